"""Job roles, materials and blocked periods

Revision ID: 002_job_roles_materials
Revises: 001_initial_schema
Create Date: 2026-10-19

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002_job_roles_materials'
down_revision: Union[str, None] = '001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at():
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False)


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False)


def upgrade() -> None:
    # Skip if tables already exist (e.g. DB created by app create_all())
    if 'job_roles' in sa.inspect(op.get_bind()).get_table_names():
        return

    op.create_table(
        'job_roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['entity_id'], ['entities.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entity_id', 'title', name='uq_job_role_entity_title')
    )
    op.create_index(op.f('ix_job_roles_id'), 'job_roles', ['id'], unique=False)
    op.create_index(op.f('ix_job_roles_entity_id'), 'job_roles', ['entity_id'], unique=False)

    op.create_table(
        'materials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_materials_id'), 'materials', ['id'], unique=False)

    op.create_table(
        'job_role_materials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('job_role_id', sa.Integer(), nullable=False),
        sa.Column('material_id', sa.Integer(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['job_role_id'], ['job_roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_role_id', 'material_id', name='uq_job_role_material')
    )
    op.create_index(op.f('ix_job_role_materials_id'), 'job_role_materials', ['id'], unique=False)
    op.create_index(op.f('ix_job_role_materials_job_role_id'), 'job_role_materials', ['job_role_id'], unique=False)
    op.create_index(op.f('ix_job_role_materials_material_id'), 'job_role_materials', ['material_id'], unique=False)

    op.create_table(
        'starter_materials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('starter_id', sa.Integer(), nullable=False),
        sa.Column('material_id', sa.Integer(), nullable=False),
        sa.Column('is_provided', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('provided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('provided_by', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['starter_id'], ['starters.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id']),
        sa.ForeignKeyConstraint(['provided_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('starter_id', 'material_id', name='uq_starter_material')
    )
    op.create_index(op.f('ix_starter_materials_id'), 'starter_materials', ['id'], unique=False)
    op.create_index(op.f('ix_starter_materials_starter_id'), 'starter_materials', ['starter_id'], unique=False)
    op.create_index(op.f('ix_starter_materials_material_id'), 'starter_materials', ['material_id'], unique=False)

    op.create_table(
        'blocked_periods',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('job_role_id', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.Integer(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['entity_id'], ['entities.id']),
        sa.ForeignKeyConstraint(['job_role_id'], ['job_roles.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_blocked_periods_id'), 'blocked_periods', ['id'], unique=False)
    op.create_index(op.f('ix_blocked_periods_entity_id'), 'blocked_periods', ['entity_id'], unique=False)
    op.create_index(op.f('ix_blocked_periods_job_role_id'), 'blocked_periods', ['job_role_id'], unique=False)
    op.create_index(op.f('ix_blocked_periods_is_active'), 'blocked_periods', ['is_active'], unique=False)


def downgrade() -> None:
    for table in (
        'blocked_periods',
        'starter_materials',
        'job_role_materials',
        'materials',
        'job_roles',
    ):
        op.drop_table(table)
