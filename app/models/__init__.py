# Import all models so they register themselves on Base.metadata
# (Alembic autogenerate and tests rely on this).
from app.models.client import Client  # noqa: F401
from app.models.job import FreightMode, JobType, LogisticsJob  # noqa: F401
from app.models.invoice import Invoice, InvoiceLineItem  # noqa: F401
