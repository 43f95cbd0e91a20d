"""create_matching_schema

Revision ID: 20261019_0600_matching
Revises:
Create Date: 2026-10-19 06:00:00

Adds: clients, services, projects, project_services, vendors,
vendor_services, vendor_countries, matches
Purpose: Relational store for project/vendor matching
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_0600_matching'
down_revision = None
branch_labels = None
depends_on = None

PROJECT_STATUSES = ('draft', 'active', 'on_hold', 'completed', 'archived')


def upgrade() -> None:
    """
    Create the matching schema.

    matches carries uq_matches_project_vendor, the constraint the match
    upsert relies on.
    """
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_services_name'),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('country', sa.String(length=2), nullable=False),
        sa.Column('budget', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', sa.Enum(*PROJECT_STATUSES, name='project_status'), nullable=False, server_default='draft'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ),
    )
    op.create_index('idx_projects_client_id', 'projects', ['client_id'])
    op.create_index('idx_projects_country', 'projects', ['country'])
    op.create_index('idx_projects_status', 'projects', ['status'])

    op.create_table(
        'project_services',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('project_id', 'service_id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ),
    )

    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('rating', sa.Numeric(precision=3, scale=2), nullable=False, server_default='0'),
        sa.Column('response_sla_hours', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'vendor_services',
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('vendor_id', 'service_id'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ),
    )

    op.create_table(
        'vendor_countries',
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('country', sa.String(length=2), nullable=False),
        sa.PrimaryKeyConstraint('vendor_id', 'country'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
    )

    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('score', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
        sa.UniqueConstraint('project_id', 'vendor_id', name='uq_matches_project_vendor'),
    )
    op.create_index('idx_matches_project_id', 'matches', ['project_id'])
    op.create_index('idx_matches_vendor_id', 'matches', ['vendor_id'])
    op.create_index('idx_matches_created_at', 'matches', ['created_at'])


def downgrade() -> None:
    """Drop the matching schema."""
    op.drop_index('idx_matches_created_at', table_name='matches')
    op.drop_index('idx_matches_vendor_id', table_name='matches')
    op.drop_index('idx_matches_project_id', table_name='matches')
    op.drop_table('matches')
    op.drop_table('vendor_countries')
    op.drop_table('vendor_services')
    op.drop_table('vendors')
    op.drop_table('project_services')
    op.drop_index('idx_projects_status', table_name='projects')
    op.drop_index('idx_projects_country', table_name='projects')
    op.drop_index('idx_projects_client_id', table_name='projects')
    op.drop_table('projects')
    op.drop_table('services')
    op.drop_table('clients')
    sa.Enum(name='project_status').drop(op.get_bind(), checkfirst=True)
