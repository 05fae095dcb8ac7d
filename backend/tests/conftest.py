import os
import sys
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

# Allow imports from the backend directory
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from invoicer.config import Settings  # noqa: E402
from invoicer.database import Base  # noqa: E402
from invoicer.main import create_app  # noqa: E402

USER_HEADERS = {"X-User-Id": "user-1"}
OTHER_USER_HEADERS = {"X-User-Id": "user-2"}

TEMPLATE_HTML = "<html><body><h1>{{invoice_number}}</h1>{{invoice_table}}{{totals}}</body></html>"


class StubCompletions:
    """Stands in for AsyncOpenAI().chat.completions"""

    def __init__(self, content=TEMPLATE_HTML, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def completions():
    return StubCompletions()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        openai_api_key=None,
        storage_access_key_id=None,
        storage_secret_access_key=None,
        local_storage_dir=str(tmp_path / "storage"),
        max_logo_bytes=1024,
    )


@pytest.fixture
def app(settings, completions):
    openai_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    app = create_app(settings, openai_client=openai_client)
    Base.metadata.create_all(bind=app.state.engine)
    yield app
    Base.metadata.drop_all(bind=app.state.engine)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def customer(client):
    response = client.post(
        "/api/clients",
        json={"name": "Acme Corp", "email": "billing@acme.com", "address": "1 Main St"},
        headers=USER_HEADERS,
    )
    assert response.status_code == 201
    return response.json()
