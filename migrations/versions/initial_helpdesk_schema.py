"""
Initial schema: roles, users, system settings, licenses and audit log
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial_helpdesk_schema'
down_revision = None
branch_labels = None
depends_on = None

PERMISSION_COLUMNS = (
    'can_create_tickets', 'can_update_own_tickets', 'can_update_all_tickets', 'can_close_tickets',
    'can_view_all_tickets', 'can_approve_changes', 'can_manage_knowledgebase',
    'can_manage_service_catalog', 'can_run_reports', 'can_manage_users', 'can_manage_roles',
    'can_manage_cmdb', 'can_view_cmdb', 'is_tenant_scoped',
)


def upgrade():
    op.create_table(
        'role',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *[sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false())
          for name in PERMISSION_COLUMNS],
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_role_name'), 'role', ['name'], unique=True)

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=True),
        sa.Column('last_name', sa.String(length=50), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('role.id'), nullable=True),
        sa.Column('customer_id', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('must_change_password', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)
    op.create_index(op.f('ix_user_customer_id'), 'user', ['customer_id'], unique=False)

    op.create_table(
        'system_setting',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_system_setting_key'), 'system_setting', ['key'], unique=True)

    op.create_table(
        'license',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('license_key', sa.Text(), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=False),
        sa.Column('expiration_date', sa.DateTime(), nullable=False),
        sa.Column('max_users', sa.Integer(), nullable=False),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_license_is_active'), 'license', ['is_active'], unique=False)

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('actor_role', sa.String(length=20), nullable=True),
        sa.Column('ip', sa.String(length=45), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('object_type', sa.String(length=100), nullable=True),
        sa.Column('object_id', sa.String(length=64), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_audit_log_actor_id'), 'audit_log', ['actor_id'], unique=False)
    op.create_index(op.f('ix_audit_log_action'), 'audit_log', ['action'], unique=False)
    op.create_index(op.f('ix_audit_log_created_at'), 'audit_log', ['created_at'], unique=False)


def downgrade():
    op.drop_table('audit_log')
    op.drop_table('license')
    op.drop_table('system_setting')
    op.drop_table('user')
    op.drop_table('role')
