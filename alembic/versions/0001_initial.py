"""donor, hospital and donation tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "donor",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("blood_group", sa.String(length=3), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("available", sa.Boolean(), nullable=False),
        sa.Column("donation_count", sa.Integer(), nullable=False),
        sa.Column("badge_level", sa.Integer(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("last_donation", sa.DateTime(), nullable=True),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("location_hidden", sa.Boolean(), nullable=False),
        sa.Column("phone_hidden", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_donor_email", "donor", ["email"], unique=True)

    op.create_table(
        "hospital",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("hospital_name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_hospital_email", "hospital", ["email"], unique=True)

    op.create_table(
        "donation",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("donor_id", sa.String(length=32), nullable=False),
        sa.Column("hospital_id", sa.String(length=32), nullable=False),
        sa.Column("donor_name", sa.String(), nullable=False),
        sa.Column("hospital_name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["donor_id"], ["donor.id"]),
        sa.ForeignKeyConstraint(["hospital_id"], ["hospital.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_donation_donor_id", "donation", ["donor_id"])
    op.create_index("ix_donation_hospital_id", "donation", ["hospital_id"])
    op.create_index("ix_donation_status", "donation", ["status"])


def downgrade() -> None:
    op.drop_index("ix_donation_status", table_name="donation")
    op.drop_index("ix_donation_hospital_id", table_name="donation")
    op.drop_index("ix_donation_donor_id", table_name="donation")
    op.drop_table("donation")
    op.drop_index("ix_hospital_email", table_name="hospital")
    op.drop_table("hospital")
    op.drop_index("ix_donor_email", table_name="donor")
    op.drop_table("donor")
