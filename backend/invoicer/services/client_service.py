import logging
from typing import List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicer.exceptions import PersistenceError
from invoicer.models.client import Client
from invoicer.schemas.client import ClientCreate, ClientUpdate
from invoicer.services.store import commit, fetch_owned

logger = logging.getLogger(__name__)


def list_clients(db: Session, owner_id: str) -> List[Client]:
    try:
        return db.query(Client).filter(Client.owner_id == owner_id).order_by(Client.name).all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to list clients: {e}")
        raise PersistenceError("Failed to load clients.", operation="list", path="clients") from e


def get_client(db: Session, owner_id: str, client_id: int) -> Client:
    return fetch_owned(db, Client, client_id, owner_id, path=f"clients/{client_id}")


def create_client(db: Session, owner_id: str, payload: ClientCreate) -> Client:
    client = Client(owner_id=owner_id, **payload.model_dump())
    db.add(client)
    commit(db, "create", "clients", "Failed to save client.")
    db.refresh(client)
    logger.info(f"Created client {client.id} for user {owner_id}")
    return client


def update_client(db: Session, owner_id: str, client_id: int, payload: ClientUpdate) -> Client:
    client = get_client(db, owner_id, client_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(client, key, value)
    commit(db, "update", f"clients/{client_id}", "Failed to save client.")
    db.refresh(client)
    return client


def delete_client(db: Session, owner_id: str, client_id: int):
    client = get_client(db, owner_id, client_id)
    db.delete(client)
    commit(db, "delete", f"clients/{client_id}", "Failed to delete client.")
    logger.info(f"Deleted client {client_id}")
