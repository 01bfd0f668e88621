from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateTable

from app.db.base import Base


def test_every_table_is_named_by_its_model():
    assert "__tablename__" not in Base.__dict__
    assert set(Base.metadata.tables) == {"clients", "logistics_jobs", "invoices", "invoice_line_items"}


def test_job_number_unique_constraint_uses_naming_convention():
    ddl = str(CreateTable(Base.metadata.tables["logistics_jobs"]).compile(dialect=sqlite.dialect()))
    assert "CONSTRAINT uq_logistics_jobs_job_number UNIQUE (job_number)" in ddl
