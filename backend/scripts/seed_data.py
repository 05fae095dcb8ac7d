"""
Seed script to generate synthetic clients, a company profile and invoices for demo purposes

Usage:
    python scripts/seed_data.py [user_id]
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from invoicer.config import settings
from invoicer.database import Base, create_session_factory
from invoicer.engine import ColumnBehavior, InvoiceDraft
from invoicer.models.client import Client
from invoicer.models.company_profile import CompanyProfile
from invoicer.models.invoice import Invoice
from invoicer.services.invoice_service import apply_draft
from decimal import Decimal
from datetime import date, timedelta
from faker import Faker

fake = Faker()

CUSTOM_COLUMN_CHOICES = [
    ("Shipping", ColumnBehavior.ADDITIVE),
    ("Tax", ColumnBehavior.ADDITIVE),
    ("Rebate", ColumnBehavior.SUBTRACTIVE),
    ("SKU", ColumnBehavior.NEUTRAL),
]


def create_company_profile(db: Session, owner_id: str) -> CompanyProfile:
    profile = db.query(CompanyProfile).filter(CompanyProfile.owner_id == owner_id).first()
    if profile:
        return profile
    profile = CompanyProfile(
        owner_id=owner_id,
        company_name=fake.company(),
        email=fake.company_email(),
        phone=fake.phone_number(),
        address=fake.address().replace("\n", ", ")
    )
    db.add(profile)
    db.commit()
    return profile


def create_clients(db: Session, owner_id: str, count: int = 6) -> list[Client]:
    """Create synthetic clients"""
    clients = []
    for _ in range(count):
        client = Client(
            owner_id=owner_id,
            name=fake.company(),
            email=fake.email(),
            phone_number=fake.phone_number(),
            address=fake.address().replace("\n", ", ")
        )
        db.add(client)
        clients.append(client)
    db.commit()
    return clients


def build_draft(currency: str) -> InvoiceDraft:
    """Random line items with zero to two custom columns"""
    draft = InvoiceDraft(currency=currency)
    for _ in range(fake.random_int(min=1, max=5)):
        draft.add_item(
            description=fake.catch_phrase(),
            quantity=Decimal(str(fake.random_int(min=1, max=20))),
            unit_price=Decimal(str(round(fake.random.uniform(10.0, 500.0), 2)))
        )

    for name, behavior in fake.random_sample(CUSTOM_COLUMN_CHOICES, length=fake.random_int(min=0, max=2)):
        draft.add_column(name, behavior)
        for index in range(len(draft.items)):
            if behavior == ColumnBehavior.NEUTRAL:
                value = fake.bothify(text="SKU-####")
            else:
                value = str(round(fake.random.uniform(1.0, 50.0), 2))
            draft.set_custom_value(index, name, value)

    if fake.boolean(chance_of_getting_true=30):
        draft.set_discount(Decimal(str(fake.random_int(min=5, max=50))))
    return draft


def create_invoices(db: Session, owner_id: str, clients: list[Client], count: int = 12) -> list[Invoice]:
    """Create synthetic invoices, some overdue and some partly paid"""
    invoices = []
    for i in range(count):
        client = fake.random_element(elements=clients)
        issue_date = date.today() - timedelta(days=fake.random_int(min=0, max=60))
        draft = build_draft(fake.random_element(elements=("USD", "EUR", "GBP")))

        paid_share = fake.random_element(elements=(0, 0, Decimal("0.5"), 1))
        if paid_share:
            draft.add_payment((draft.totals.total_amount * paid_share).quantize(Decimal("0.01")))

        invoice = Invoice(
            owner_id=owner_id,
            invoice_number=f"INV-{date.today().year}-{str(i+1).zfill(4)}",
            client_id=client.id,
            client_name=client.name,
            client_email=client.email,
            client_phone_number=client.phone_number,
            client_address=client.address,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=30),
            notes=fake.sentence() if fake.boolean() else None
        )
        apply_draft(invoice, draft)
        db.add(invoice)
        invoices.append(invoice)

    db.commit()
    return invoices


def main():
    owner_id = sys.argv[1] if len(sys.argv) > 1 else "demo-user"
    engine, session_factory = create_session_factory(settings.database_url)
    Base.metadata.create_all(bind=engine)

    db = session_factory()
    try:
        print(f"Seeding data for user '{owner_id}'...")
        create_company_profile(db, owner_id)
        clients = create_clients(db, owner_id)
        print(f"Created {len(clients)} clients")
        invoices = create_invoices(db, owner_id, clients)
        print(f"Created {len(invoices)} invoices")
        print("Seed data created successfully!")
    except Exception as e:
        db.rollback()
        print(f"Error seeding data: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
