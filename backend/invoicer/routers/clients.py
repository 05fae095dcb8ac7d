from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from invoicer.database import get_db
from invoicer.dependencies import get_current_user
from invoicer.schemas.client import ClientCreate, ClientUpdate, ClientResponse
from invoicer.services import client_service

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=List[ClientResponse])
def list_clients(db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    """List the current user's clients"""
    return client_service.list_clients(db, user_id)


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    payload: ClientCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    return client_service.create_client(db, user_id, payload)


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    return client_service.get_client(db, user_id, client_id)


@router.put("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    payload: ClientUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    return client_service.update_client(db, user_id, client_id, payload)


@router.delete("/{client_id}")
def delete_client(client_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    client_service.delete_client(db, user_id, client_id)
    return {"message": "Client deleted", "id": client_id}
