"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create ENUM types
    op.execute("CREATE TYPE document_kind AS ENUM ('rules', 'scoring', 'decision_tree', 'clauses')")

    # Create policies table
    op.create_table(
        'policies',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('policy_id', sa.String(length=50), nullable=False),
        sa.Column('policy_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('effective_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('tags', postgresql.ARRAY(sa.String(length=100)), nullable=True),
    )
    op.create_index('ix_policies_policy_id', 'policies', ['policy_id'], unique=True)

    # Create policy_documents table (one JSON document per policy and kind)
    op.create_table(
        'policy_documents',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('policy_id', sa.String(length=50), nullable=False),
        sa.Column('kind', postgresql.ENUM(name='document_kind', create_type=False), nullable=False),
        sa.Column('document', postgresql.JSONB(), nullable=True),
        sa.Column('last_tested_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('policy_id', 'kind', name='uq_policy_document_kind'),
    )
    op.create_index('ix_policy_documents_policy_id', 'policy_documents', ['policy_id'])

    # Create simulation_results table
    op.create_table(
        'simulation_results',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('policy_id', sa.String(length=50), nullable=False),
        sa.Column('simulation_input', postgresql.JSONB(), nullable=True),
        sa.Column('result', postgresql.JSONB(), nullable=False),
    )
    op.create_index('ix_simulation_results_policy_id', 'simulation_results', ['policy_id'])

    # Create policy_versions table
    op.create_table(
        'policy_versions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('policy_id', sa.String(length=50), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False),
        sa.Column('json_snapshot', postgresql.JSONB(), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_policy_versions_policy_id', 'policy_versions', ['policy_id'])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_index('ix_policy_versions_policy_id', table_name='policy_versions')
    op.drop_table('policy_versions')

    op.drop_index('ix_simulation_results_policy_id', table_name='simulation_results')
    op.drop_table('simulation_results')

    op.drop_index('ix_policy_documents_policy_id', table_name='policy_documents')
    op.drop_table('policy_documents')

    op.drop_index('ix_policies_policy_id', table_name='policies')
    op.drop_table('policies')

    # Drop ENUM types
    op.execute("DROP TYPE document_kind")
