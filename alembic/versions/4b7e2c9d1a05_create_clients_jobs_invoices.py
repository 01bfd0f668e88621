"""create clients, logistics jobs, invoices and line items

Revision ID: 4b7e2c9d1a05
Revises:
Create Date: 2026-10-18 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2c9d1a05'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JOB_TYPES = (
    'AIR_FREIGHT', 'SEA_FREIGHT', 'ROAD_FREIGHT',
    'AIR_FREIGHT_IMPORT', 'AIR_FREIGHT_EXPORT',
    'SEA_FREIGHT_IMPORT', 'SEA_FREIGHT_EXPORT',
    'ROAD_FREIGHT_IMPORT', 'ROAD_FREIGHT_EXPORT',
)


def _audit_columns() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('created_by', sa.String(length=255), server_default=sa.text("'system@local'"), nullable=False),
        sa.Column('last_changed_by', sa.String(length=255), server_default=sa.text("'system@local'"), nullable=False),
    ]


def upgrade() -> None:
    # 1. Clients
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('tin', sa.String(length=50), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_clients'),
    )

    # 2. Logistics jobs (job_number uniqueness is the allocation race breaker)
    op.create_table(
        'logistics_jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_number', sa.String(length=40), nullable=False),
        sa.Column(
            'job_type',
            sa.Enum(*JOB_TYPES, name='job_type_enum', native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('port_of_loading', sa.String(length=120), nullable=True),
        sa.Column('port_of_discharge', sa.String(length=120), nullable=True),
        sa.Column('gross_weight', sa.Numeric(15, 3), nullable=True),
        sa.Column('chargeable_weight', sa.Numeric(15, 3), nullable=True),
        sa.Column('shipper', sa.String(length=255), nullable=True),
        sa.Column('consignee', sa.String(length=255), nullable=True),
        sa.Column('package', sa.String(length=255), nullable=True),
        sa.Column('good_description', sa.String(length=1000), nullable=True),
        sa.Column('master_air_waybill', sa.String(length=60), nullable=True),
        sa.Column('house_air_waybill', sa.String(length=60), nullable=True),
        sa.Column('master_bl', sa.String(length=60), nullable=True),
        sa.Column('house_bl', sa.String(length=60), nullable=True),
        sa.Column('plate_number', sa.String(length=30), nullable=True),
        sa.Column('container_number', sa.String(length=30), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ['client_id'], ['clients.id'],
            name='fk_logistics_jobs_client_id_clients', ondelete='RESTRICT',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_logistics_jobs'),
        sa.UniqueConstraint('job_number', name='uq_logistics_jobs_job_number'),
    )
    op.create_index('ix_logistics_jobs_job_type', 'logistics_jobs', ['job_type'])
    op.create_index('ix_logistics_jobs_client_id', 'logistics_jobs', ['client_id'])

    # 3. Invoices
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('number', sa.String(length=40), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=True),
        sa.Column('booking_number', sa.String(length=40), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('sub_total', sa.Numeric(15, 2), nullable=False),
        sa.Column('total', sa.Numeric(15, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('amount_in_words', sa.String(length=500), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ['client_id'], ['clients.id'],
            name='fk_invoices_client_id_clients', ondelete='RESTRICT',
        ),
        sa.ForeignKeyConstraint(
            ['job_id'], ['logistics_jobs.id'],
            name='fk_invoices_job_id_logistics_jobs', ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_invoices'),
        sa.UniqueConstraint('number', name='uq_invoices_number'),
    )
    op.create_index('ix_invoices_client_id', 'invoices', ['client_id'])
    op.create_index('ix_invoices_job_id', 'invoices', ['job_id'])

    # 4. Line items (existence dependent on the invoice)
    op.create_table(
        'invoice_line_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('based_on', sa.String(length=60), nullable=True),
        sa.Column('rate', sa.Numeric(15, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('billing_amount', sa.Numeric(15, 2), nullable=False),
        sa.ForeignKeyConstraint(
            ['invoice_id'], ['invoices.id'],
            name='fk_invoice_line_items_invoice_id_invoices', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_invoice_line_items'),
    )
    op.create_index('ix_invoice_line_items_invoice_id', 'invoice_line_items', ['invoice_id'])


def downgrade() -> None:
    op.drop_index('ix_invoice_line_items_invoice_id', table_name='invoice_line_items')
    op.drop_table('invoice_line_items')
    op.drop_index('ix_invoices_job_id', table_name='invoices')
    op.drop_index('ix_invoices_client_id', table_name='invoices')
    op.drop_table('invoices')
    op.drop_index('ix_logistics_jobs_client_id', table_name='logistics_jobs')
    op.drop_index('ix_logistics_jobs_job_type', table_name='logistics_jobs')
    op.drop_table('logistics_jobs')
    op.drop_table('clients')
