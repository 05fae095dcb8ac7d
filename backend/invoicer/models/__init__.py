from invoicer.models.client import Client
from invoicer.models.invoice import Invoice
from invoicer.models.company_profile import CompanyProfile

__all__ = ["Client", "Invoice", "CompanyProfile"]
