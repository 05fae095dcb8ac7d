from invoicer.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceResponse,
    InvoiceListResponse,
    InvoiceDetailResponse,
)
from invoicer.schemas.client import ClientCreate, ClientUpdate, ClientResponse
from invoicer.schemas.preview import InvoiceViewResponse

__all__ = [
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceResponse",
    "InvoiceListResponse",
    "InvoiceDetailResponse",
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    "InvoiceViewResponse",
]
