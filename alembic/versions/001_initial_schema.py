"""Initial schema: departments, users, inventory, requests and stock ledger

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('STAFF', 'DEPARTMENT_HEAD', 'STOCK_MANAGER', 'ADMIN', name='userrole')
request_status = sa.Enum(
    'PENDING', 'DEPARTMENT_APPROVED', 'APPROVED', 'REJECTED', 'FULFILLED', 'CANCELLED',
    name='requeststatus',
)
movement_kind = sa.Enum('ADD_STOCK', 'WITHDRAWAL', 'FULFILLMENT', name='movementkind')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_departments_id', 'departments', ['id'])
    op.create_index('ix_departments_name', 'departments', ['name'], unique=True)

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_department_id', 'users', ['department_id'])

    op.create_table('inventory_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('date_added', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_inventory_items_quantity_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_inventory_items_id', 'inventory_items', ['id'])
    op.create_index('ix_inventory_items_name', 'inventory_items', ['name'])
    op.create_index('ix_inventory_items_category', 'inventory_items', ['category'])
    op.create_index('ix_inventory_items_owner_id', 'inventory_items', ['owner_id'])

    op.create_table('item_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('requested_quantity', sa.Integer(), nullable=False),
        sa.Column('fulfilled_quantity', sa.Integer(), nullable=False),
        sa.Column('status', request_status, nullable=False),
        sa.Column('requester_id', sa.Integer(), nullable=False),
        sa.Column('requester_name', sa.String(length=255), nullable=False),
        sa.Column('requester_department_id', sa.Integer(), nullable=True),
        sa.Column('requester_department_name', sa.String(length=150), nullable=True),
        sa.Column('approver_id', sa.Integer(), nullable=True),
        sa.Column('approver_name', sa.String(length=255), nullable=True),
        sa.Column('approver_role', sa.String(length=50), nullable=True),
        sa.Column('fulfilled_by_id', sa.Integer(), nullable=True),
        sa.Column('fulfilled_by_name', sa.String(length=255), nullable=True),
        sa.Column('fulfilled_by_role', sa.String(length=50), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('request_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('response_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('requested_quantity > 0', name='ck_item_requests_requested_positive'),
        sa.CheckConstraint(
            'fulfilled_quantity >= 0 AND fulfilled_quantity <= requested_quantity',
            name='ck_item_requests_fulfilled_bounds',
        ),
        sa.ForeignKeyConstraint(['item_id'], ['inventory_items.id']),
        sa.ForeignKeyConstraint(['requester_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_item_requests_id', 'item_requests', ['id'])
    op.create_index('ix_item_requests_item_id', 'item_requests', ['item_id'])
    op.create_index('ix_item_requests_status', 'item_requests', ['status'])
    op.create_index('ix_item_requests_requester_id', 'item_requests', ['requester_id'])
    op.create_index('ix_item_requests_requester_department_id', 'item_requests', ['requester_department_id'])

    op.create_table('stock_movements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('kind', movement_kind, nullable=False),
        sa.Column('quantity_delta', sa.Integer(), nullable=False),
        sa.Column('quantity_after', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('actor_name', sa.String(length=255), nullable=True),
        sa.Column('request_id', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['item_id'], ['inventory_items.id']),
        sa.ForeignKeyConstraint(['request_id'], ['item_requests.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_stock_movements_id', 'stock_movements', ['id'])
    op.create_index('ix_stock_movements_item_id', 'stock_movements', ['item_id'])
    op.create_index('ix_stock_movements_request_id', 'stock_movements', ['request_id'])


def downgrade() -> None:
    op.drop_table('stock_movements')
    op.drop_table('item_requests')
    op.drop_table('inventory_items')
    op.drop_table('users')
    op.drop_table('departments')

    bind = op.get_bind()
    for enum_type in (movement_kind, request_status, user_role):
        enum_type.drop(bind, checkfirst=True)
