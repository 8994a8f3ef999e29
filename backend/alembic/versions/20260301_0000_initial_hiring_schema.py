"""initial_hiring_schema

Revision ID: 20260301_0000
Revises:
Create Date: 2026-03-01 00:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa


revision = '20260301_0000'
down_revision = None
branch_labels = None
depends_on = None

JOB_TYPES = ('full-time', 'part-time', 'contract', 'internship', 'temporary')
JOB_STATUSES = ('draft', 'published', 'closed')
USER_ROLES = ('applicant', 'recruiter', 'admin')

SEARCH_DOCUMENT = (
    "to_tsvector('english', title || ' ' || description || ' ' || department || ' ' "
    "|| location || ' ' || coalesce(CAST(requirements AS TEXT), ''))"
)


def upgrade() -> None:
    op.create_table(
        'companies',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('logo', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_companies_name'), 'companies', ['name'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum(*USER_ROLES, name='user_role'), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
    op.create_index(op.f('ix_users_company_id'), 'users', ['company_id'], unique=False)

    op.create_table(
        'job_postings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('department', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=False),
        sa.Column('type', sa.Enum(*JOB_TYPES, name='job_type'), nullable=False),
        sa.Column('status', sa.Enum(*JOB_STATUSES, name='job_status'), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('salary', sa.String(), nullable=True),
        sa.Column('experience', sa.String(), nullable=True),
        sa.Column('requirements', sa.JSON(), nullable=False),
        sa.Column('applications', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('posted_by_id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['posted_by_id'], ['users.id']),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('department', 'location', 'type', 'status', 'posted_by_id', 'company_id', 'created_at'):
        op.create_index(op.f(f'ix_job_postings_{column}'), 'job_postings', [column], unique=False)

    # Full-text search index (PostgreSQL only; other dialects use substring matching)
    if op.get_bind().dialect.name == 'postgresql':
        op.execute(
            f"CREATE INDEX ix_job_postings_search ON job_postings USING gin ({SEARCH_DOCUMENT})"
        )


def downgrade() -> None:
    if op.get_bind().dialect.name == 'postgresql':
        op.execute("DROP INDEX IF EXISTS ix_job_postings_search")

    for column in ('created_at', 'company_id', 'posted_by_id', 'status', 'type', 'location', 'department'):
        op.drop_index(op.f(f'ix_job_postings_{column}'), table_name='job_postings')
    op.drop_table('job_postings')

    op.drop_index(op.f('ix_users_company_id'), table_name='users')
    op.drop_index(op.f('ix_users_role'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')

    op.drop_index(op.f('ix_companies_name'), table_name='companies')
    op.drop_table('companies')

    sa.Enum(name='job_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='job_type').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='user_role').drop(op.get_bind(), checkfirst=True)
