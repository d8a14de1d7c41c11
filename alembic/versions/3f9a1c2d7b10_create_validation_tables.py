"""Create provider validation tables

Revision ID: 3f9a1c2d7b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f9a1c2d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

validation_state = postgresql.ENUM(
    'unvalidated', 'correct', 'incorrect', name='validation_state', create_type=False
)
session_status = postgresql.ENUM(
    'in_progress', 'completed', name='session_status', create_type=False
)


def _sub_record_columns() -> list:
    return [
        sa.Column('provider_id', sa.UUID(), nullable=False),
        sa.Column('validation_state', validation_state, server_default='unvalidated', nullable=False),
        sa.Column('validated_by', sa.Integer(), nullable=True),
        sa.Column('validated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('link_id', sa.String(), nullable=True, comment='Pairs an address with the phone captured alongside it'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    ]


def _sub_record_constraints(table: str, correction_fields: tuple) -> list:
    corrections_null = ' AND '.join(f'{field} IS NULL' for field in correction_fields)
    return [
        sa.CheckConstraint(
            f"validation_state = 'incorrect' OR ({corrections_null})",
            name=f'ck_{table}_corrections_only_when_incorrect',
        ),
        sa.CheckConstraint(
            '(validated_by IS NULL) = (validated_at IS NULL)',
            name=f'ck_{table}_validated_audit_pair',
        ),
        sa.CheckConstraint(
            "(validation_state = 'unvalidated') = (validated_at IS NULL)",
            name=f'ck_{table}_validated_state_audit',
        ),
        sa.ForeignKeyConstraint(['provider_id'], ['providers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    validation_state.create(bind, checkfirst=True)
    session_status.create(bind, checkfirst=True)

    # Create providers table
    op.create_table('providers',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('npi', sa.String(length=20), nullable=False),
        sa.Column('gnpi', sa.String(length=20), nullable=True),
        sa.Column('provider_name', sa.String(), nullable=False),
        sa.Column('specialty', sa.String(), nullable=True),
        sa.Column('provider_group', sa.String(), nullable=True),
        sa.Column('license_numbers', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('credentials', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('additional_metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('npi')
    )

    # Create provider_addresses table
    op.create_table('provider_addresses',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('address_category', sa.String(), nullable=False),
        sa.Column('address1', sa.String(), nullable=False),
        sa.Column('address2', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('zip', sa.String(), nullable=True),
        sa.Column('country', sa.String(), server_default='US', nullable=False),
        sa.Column('corrected_address1', sa.String(), nullable=True),
        sa.Column('corrected_address2', sa.String(), nullable=True),
        sa.Column('corrected_city', sa.String(), nullable=True),
        sa.Column('corrected_state', sa.String(), nullable=True),
        sa.Column('corrected_zip', sa.String(), nullable=True),
        *_sub_record_columns(),
        *_sub_record_constraints('provider_addresses', (
            'corrected_address1', 'corrected_address2', 'corrected_city',
            'corrected_state', 'corrected_zip',
        )),
    )
    op.create_index(op.f('ix_provider_addresses_provider_id'), 'provider_addresses', ['provider_id'], unique=False)

    # Create provider_phones table
    op.create_table('provider_phones',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('phone_type', sa.String(), server_default='office', nullable=False),
        sa.Column('extension', sa.String(), nullable=True),
        sa.Column('corrected_phone', sa.String(), nullable=True),
        *_sub_record_columns(),
        *_sub_record_constraints('provider_phones', ('corrected_phone',)),
    )
    op.create_index(op.f('ix_provider_phones_provider_id'), 'provider_phones', ['provider_id'], unique=False)

    # Create validation_sessions table
    op.create_table('validation_sessions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('provider_id', sa.UUID(), nullable=False),
        sa.Column('operator_id', sa.Integer(), nullable=False),
        sa.Column('status', session_status, nullable=False),
        sa.Column('locked_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('call_attempt_1_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('call_attempt_2_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('quality_score', sa.Float(), nullable=True),
        sa.Column('validation_results', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False, comment='Progress and completion summary'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.CheckConstraint("(status = 'completed') = (completed_at IS NOT NULL)", name='ck_validation_sessions_completed_at'),
        sa.ForeignKeyConstraint(['provider_id'], ['providers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_validation_sessions_provider_id'), 'validation_sessions', ['provider_id'], unique=False)
    op.create_index(op.f('ix_validation_sessions_operator_id'), 'validation_sessions', ['operator_id'], unique=False)

    # At most one open session per provider and per operator
    op.create_index(
        'uq_validation_sessions_provider_in_progress', 'validation_sessions', ['provider_id'],
        unique=True, postgresql_where=sa.text("status = 'in_progress'"),
    )
    op.create_index(
        'uq_validation_sessions_operator_in_progress', 'validation_sessions', ['operator_id'],
        unique=True, postgresql_where=sa.text("status = 'in_progress'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_validation_sessions_operator_in_progress', table_name='validation_sessions')
    op.drop_index('uq_validation_sessions_provider_in_progress', table_name='validation_sessions')
    op.drop_index(op.f('ix_validation_sessions_operator_id'), table_name='validation_sessions')
    op.drop_index(op.f('ix_validation_sessions_provider_id'), table_name='validation_sessions')
    op.drop_table('validation_sessions')
    op.drop_index(op.f('ix_provider_phones_provider_id'), table_name='provider_phones')
    op.drop_table('provider_phones')
    op.drop_index(op.f('ix_provider_addresses_provider_id'), table_name='provider_addresses')
    op.drop_table('provider_addresses')
    op.drop_table('providers')

    session_status.drop(op.get_bind(), checkfirst=True)
    validation_state.drop(op.get_bind(), checkfirst=True)
