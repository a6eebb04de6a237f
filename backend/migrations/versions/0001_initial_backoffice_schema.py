"""initial back-office schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates every back-office table:
- counters: named atomic sequences (employee numbers, invoice numbers)
- vendors / customers: directories
- gate_in_* / gate_out_records: inventory ledgers
- invoices / invoice_line_items / invoice_payments: sales invoicing
- departments / employees / salary_records / advances / advance_repayments /
  attendance_records: HR and payroll
- monthly_expense* / yearly_expense*: expense roll-up buckets
- raw_products / products: catalogs
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    # ============================================================================
    # counters: one row per sequence, incremented atomically
    # ============================================================================
    op.create_table(
        'counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # directories
    # ============================================================================
    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Active'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('phone'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_vendors_status', 'vendors', ['status'])
    op.create_index('ix_vendors_created_at', 'vendors', ['created_at'])
    op.create_index('ix_vendors_name_email_status', 'vendors', ['name', 'email', 'status'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Active'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customers_status', 'customers', ['status'])

    # ============================================================================
    # gate-in: invoice header, items, payments
    # ============================================================================
    # vendor_id carries no FK: deleting a vendor leaves its history in place
    op.create_table(
        'gate_in_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Numeric(14, 4), nullable=False, server_default='0'),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('date', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_gate_in_records_vendor_id', 'gate_in_records', ['vendor_id'])
    op.create_index('ix_gate_in_records_payment_status', 'gate_in_records', ['payment_status'])
    op.create_index('ix_gate_in_records_created_at', 'gate_in_records', ['created_at'])
    op.create_index('ix_gate_in_vendor_date', 'gate_in_records', ['vendor_id', 'date'])

    op.create_table(
        'gate_in_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('units', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 2), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total', sa.Numeric(14, 4), nullable=False),
        sa.ForeignKeyConstraint(['record_id'], ['gate_in_records.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_gate_in_items_record_id', 'gate_in_items', ['record_id'])

    op.create_table(
        'gate_in_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('method', sa.String(length=16), nullable=False),
        sa.Column('reference', sa.String(length=128), nullable=True),
        sa.ForeignKeyConstraint(['record_id'], ['gate_in_records.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_gate_in_payments_record_id', 'gate_in_payments', ['record_id'])

    # ============================================================================
    # gate-out: single implicit line, no payment ledger
    # ============================================================================
    op.create_table(
        'gate_out_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice', sa.Integer(), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('units', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 2), nullable=False),
        sa.Column('sale_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total', sa.Numeric(14, 4), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('source', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_gate_out_records_payment_status', 'gate_out_records', ['payment_status'])
    op.create_index('ix_gate_out_records_created_at', 'gate_out_records', ['created_at'])

    # ============================================================================
    # invoices
    # ============================================================================
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(length=32), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('customer_phone', sa.String(length=32), nullable=True),
        sa.Column('customer_address', sa.Text(), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('paid', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('due', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_invoices_date', 'invoices', ['date'])
    op.create_index('ix_invoices_customer_id', 'invoices', ['customer_id'])
    op.create_index('ix_invoices_status_due_date', 'invoices', ['status', 'due_date'])

    op.create_table(
        'invoice_line_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_invoice_line_items_invoice_id', 'invoice_line_items', ['invoice_id'])

    op.create_table(
        'invoice_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('method', sa.String(length=16), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_invoice_payments_invoice_id', 'invoice_payments', ['invoice_id'])

    # ============================================================================
    # HR / payroll
    # ============================================================================
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_number', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('position', sa.String(length=128), nullable=False),
        sa.Column('department', sa.String(length=128), nullable=False),
        sa.Column('basic_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('join_date', sa.DateTime(), nullable=False),
        sa.Column('contact', sa.String(length=15), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_number'),
        sa.UniqueConstraint('contact'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_employees_department', 'employees', ['department'])
    op.create_index('ix_employees_status', 'employees', ['status'])
    op.create_index('ix_employees_join_date', 'employees', ['join_date'])

    op.create_table(
        'salary_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('basic_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('allowances', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('deductions', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('bonuses', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('net_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('payment_date', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'month', 'year', name='uq_salary_employee_period'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_salary_records_employee_id', 'salary_records', ['employee_id'])
    op.create_index('ix_salary_records_status', 'salary_records', ['status'])

    op.create_table(
        'advances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        *_timestamps(),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_advances_employee_id', 'advances', ['employee_id'])
    op.create_index('ix_advances_date', 'advances', ['date'])
    op.create_index('ix_advances_created_at', 'advances', ['created_at'])
    op.create_index('ix_advances_employee_status', 'advances', ['employee_id', 'status'])

    op.create_table(
        'advance_repayments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('advance_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['advance_id'], ['advances.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_advance_repayments_advance_id', 'advance_repayments', ['advance_id'])

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('check_in', sa.DateTime(), nullable=True),
        sa.Column('check_out', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'work_date', name='uq_attendance_employee_day'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_attendance_records_employee_id', 'attendance_records', ['employee_id'])
    op.create_index('ix_attendance_records_date', 'attendance_records', ['date'])

    # ============================================================================
    # expense roll-up buckets (never deleted, upserted)
    # ============================================================================
    op.create_table(
        'monthly_expenses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('year_month', sa.String(length=7), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('year_month'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'monthly_expense_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('monthly_expense_id', sa.Integer(), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['monthly_expense_id'], ['monthly_expenses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('monthly_expense_id', 'entry_date', name='uq_monthly_entry_day'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_monthly_expense_entries_monthly_expense_id', 'monthly_expense_entries', ['monthly_expense_id'])

    op.create_table(
        'yearly_expenses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('year'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'yearly_expense_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('yearly_expense_id', sa.Integer(), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['yearly_expense_id'], ['yearly_expenses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('yearly_expense_id', 'month', name='uq_yearly_entry_month'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_yearly_expense_entries_yearly_expense_id', 'yearly_expense_entries', ['yearly_expense_id'])

    # ============================================================================
    # catalogs
    # ============================================================================
    op.create_table(
        'raw_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('stock', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('category', sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('category', sa.String(length=128), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Out of Stock'),
        sa.Column('image', sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sku'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_created_at', 'products', ['created_at'])


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('products')
    op.drop_table('raw_products')
    op.drop_table('yearly_expense_entries')
    op.drop_table('yearly_expenses')
    op.drop_table('monthly_expense_entries')
    op.drop_table('monthly_expenses')
    op.drop_table('attendance_records')
    op.drop_table('advance_repayments')
    op.drop_table('advances')
    op.drop_table('salary_records')
    op.drop_table('employees')
    op.drop_table('departments')
    op.drop_table('invoice_payments')
    op.drop_table('invoice_line_items')
    op.drop_table('invoices')
    op.drop_table('gate_out_records')
    op.drop_table('gate_in_payments')
    op.drop_table('gate_in_items')
    op.drop_table('gate_in_records')
    op.drop_table('customers')
    op.drop_table('vendors')
    op.drop_table('counters')
