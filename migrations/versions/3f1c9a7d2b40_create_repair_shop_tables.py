"""Create repair shop tables

Creates the four entity tables and the car <-> service-center
association table.

    customer            — email and phone unique
    car                 — vin unique; customer_id required
    service_center      — name, address and phone unique
    service_request     — car_id, customer_id, service_center_id required
    car_service_center  — (car_id, service_center_id) pairs

Every foreign key is ON DELETE CASCADE so the database agrees with the
cascade the application performs explicitly.

Revision ID: 3f1c9a7d2b40
Revises:
Create Date: 2026-10-19 09:12:44.310552

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1c9a7d2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all tables, parents before children."""
    op.create_table(
        "customer",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_customer_email", "customer", ["email"], unique=True)
    op.create_index("ix_customer_phone", "customer", ["phone"], unique=True)

    op.create_table(
        "service_center",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("address", sa.String(length=300), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_service_center_name", "service_center", ["name"], unique=True)
    op.create_index(
        "ix_service_center_address", "service_center", ["address"], unique=True
    )
    op.create_index("ix_service_center_phone", "service_center", ["phone"], unique=True)

    op.create_table(
        "car",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("brand", sa.String(length=100), nullable=False),
        sa.Column("model", sa.String(length=100), nullable=False),
        sa.Column("vin", sa.String(length=32), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_car_vin", "car", ["vin"], unique=True)
    op.create_index("ix_car_customer_id", "car", ["customer_id"], unique=False)

    op.create_table(
        "car_service_center",
        sa.Column("car_id", sa.Integer(), nullable=False),
        sa.Column("service_center_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["car_id"], ["car.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["service_center_id"], ["service_center.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("car_id", "service_center_id"),
    )

    op.create_table(
        "service_request",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("car_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("service_center_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["car_id"], ["car.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["service_center_id"], ["service_center.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_service_request_car_id", "service_request", ["car_id"])
    op.create_index("ix_service_request_customer_id", "service_request", ["customer_id"])
    op.create_index(
        "ix_service_request_service_center_id", "service_request", ["service_center_id"]
    )


def downgrade() -> None:
    """Drop all tables, children before parents."""
    op.drop_table("service_request")
    op.drop_table("car_service_center")
    op.drop_index("ix_car_customer_id", table_name="car")
    op.drop_index("ix_car_vin", table_name="car")
    op.drop_table("car")
    op.drop_table("service_center")
    op.drop_table("customer")
