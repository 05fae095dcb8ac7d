from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from invoicer.database import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    invoice_number = Column(String, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)

    # Client snapshot taken when the invoice was written
    client_name = Column(String, nullable=False)
    client_email = Column(String, nullable=True)
    client_phone_number = Column(String, nullable=True)
    client_address = Column(String, nullable=True)

    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    currency = Column(String, default="USD")

    # Embedded line items and custom columns
    # items: [{"description": ..., "quantity": "2", "unitPrice": "50", "customFields": [{"name": ..., "value": ...}]}]
    # custom_columns: [{"name": "Shipping", "type": "additive"}]
    items = Column(JSON, nullable=False, default=list)
    custom_columns = Column(JSON, nullable=False, default=list)

    # Money as exact decimal text, same as quantity and unitPrice in items
    discount = Column(String, nullable=False, default="0")
    total_paid = Column(String, nullable=False, default="0")
    total_amount = Column(String, nullable=False, default="0")  # Recomputed on every save
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client")
