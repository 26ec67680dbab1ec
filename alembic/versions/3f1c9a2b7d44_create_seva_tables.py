"""Create profiles, sevas, donors, payment history and referrals

Revision ID: 3f1c9a2b7d44
Revises:
Create Date: 2026-10-19 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d44'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum types store the member names, matching SQLAlchemy's default for Enum columns
profilerole_enum = sa.Enum('USER', 'ADMIN', name='profilerole')
paymentstatus_enum = sa.Enum('PENDING', 'PARTIAL', 'PAID', name='paymentstatus')
paymentmode_enum = sa.Enum('CASH', 'ONLINE', 'CHEQUE', 'UPI', name='paymentmode')


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', profilerole_enum, nullable=False),
        sa.Column('referral_code', sa.String(), nullable=False),
        sa.Column('referred_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['referred_by'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=True)
    op.create_index(op.f('ix_profiles_referral_code'), 'profiles', ['referral_code'], unique=True)
    op.create_index(op.f('ix_profiles_referred_by'), 'profiles', ['referred_by'], unique=False)

    op.create_table(
        'sevas',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total_slots', sa.Integer(), nullable=False),
        sa.Column('booked_slots', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('amount_options', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('total_slots > 0', name='ck_sevas_total_slots_positive'),
        sa.CheckConstraint('booked_slots >= 0', name='ck_sevas_booked_slots_non_negative'),
        sa.CheckConstraint('booked_slots <= total_slots', name='ck_sevas_booked_within_total'),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sevas_name'), 'sevas', ['name'], unique=False)

    op.create_table(
        'donors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('enrollment_number', sa.String(), nullable=False),
        sa.Column('seva_id', sa.Uuid(), nullable=False),
        sa.Column('added_by', sa.Uuid(), nullable=False),
        sa.Column('donor_name', sa.String(), nullable=False),
        sa.Column('contact_phone', sa.String(), nullable=True),
        sa.Column('contact_email', sa.String(), nullable=True),
        sa.Column('payment_mode', paymentmode_enum, nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('paid_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('payment_status', paymentstatus_enum, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('paid_amount >= 0', name='ck_donors_paid_non_negative'),
        sa.CheckConstraint('paid_amount <= total_amount', name='ck_donors_paid_within_total'),
        sa.ForeignKeyConstraint(['seva_id'], ['sevas.id']),
        sa.ForeignKeyConstraint(['added_by'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_donors_enrollment_number'), 'donors', ['enrollment_number'], unique=True)
    op.create_index(op.f('ix_donors_seva_id'), 'donors', ['seva_id'], unique=False)
    op.create_index(op.f('ix_donors_added_by'), 'donors', ['added_by'], unique=False)
    op.create_index(op.f('ix_donors_payment_status'), 'donors', ['payment_status'], unique=False)

    op.create_table(
        'payment_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('donor_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        # paymentmode already exists from the donors table
        sa.Column('payment_mode', sa.Enum(name='paymentmode', create_type=False), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('amount > 0', name='ck_payment_history_amount_positive'),
        sa.ForeignKeyConstraint(['donor_id'], ['donors.id']),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_payment_history_donor_id'), 'payment_history', ['donor_id'], unique=False)

    op.create_table(
        'referrals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('referrer_id', sa.Uuid(), nullable=False),
        sa.Column('referred_user_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['referrer_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['referred_user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('referred_user_id'),
    )
    op.create_index(op.f('ix_referrals_referrer_id'), 'referrals', ['referrer_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_referrals_referrer_id'), table_name='referrals')
    op.drop_table('referrals')
    op.drop_index(op.f('ix_payment_history_donor_id'), table_name='payment_history')
    op.drop_table('payment_history')
    op.drop_index(op.f('ix_donors_payment_status'), table_name='donors')
    op.drop_index(op.f('ix_donors_added_by'), table_name='donors')
    op.drop_index(op.f('ix_donors_seva_id'), table_name='donors')
    op.drop_index(op.f('ix_donors_enrollment_number'), table_name='donors')
    op.drop_table('donors')
    op.drop_index(op.f('ix_sevas_name'), table_name='sevas')
    op.drop_table('sevas')
    op.drop_index(op.f('ix_profiles_referred_by'), table_name='profiles')
    op.drop_index(op.f('ix_profiles_referral_code'), table_name='profiles')
    op.drop_index(op.f('ix_profiles_email'), table_name='profiles')
    op.drop_table('profiles')

    paymentmode_enum.drop(op.get_bind(), checkfirst=True)
    paymentstatus_enum.drop(op.get_bind(), checkfirst=True)
    profilerole_enum.drop(op.get_bind(), checkfirst=True)
