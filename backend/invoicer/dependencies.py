"""
Request-scoped access to the handles built once in create_app.

The document store session factory, the AI template service and the logo
storage live on app.state; handlers receive them through these
dependencies rather than importing module-level singletons.
"""
from fastapi import HTTPException, Request

from invoicer.config import Settings
from invoicer.services.storage_service import StorageService
from invoicer.services.template_service import TemplateService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(request: Request) -> str:
    """Identity of the signed-in user, forwarded by the authentication provider"""
    header = request.app.state.settings.auth_user_header
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return user_id


def get_template_service(request: Request) -> TemplateService:
    return request.app.state.template_service


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage_service
