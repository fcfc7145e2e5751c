"""Initial schema with PostGIS extension and all booking tables.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── vehicle_types ─────────────────────────────────────────────────
    op.create_table(
        "vehicle_types",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), unique=True, nullable=False),
        sa.Column("seat_capacity", sa.Integer, default=12, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── tour_packages ─────────────────────────────────────────────────
    op.create_table(
        "tour_packages",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── orders ────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "order_type",
            sa.Enum("TRANSPORT", "TOUR", name="ordertype"),
            nullable=False,
        ),
        sa.Column(
            "order_status",
            sa.Enum(
                "PENDING",
                "CONFIRMED",
                "CANCELED",
                "COMPLETED",
                name="orderstatus",
            ),
            default="PENDING",
            nullable=False,
        ),
        sa.Column("full_name", sa.String(120), nullable=False),
        sa.Column("phone_number", sa.String(30), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("total_passengers", sa.Integer, default=1, nullable=False),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_orders_status", "orders", ["order_status"])

    # ── transportation_orders ─────────────────────────────────────────
    op.create_table(
        "transportation_orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "order_id", sa.Integer, sa.ForeignKey("orders.id"), unique=True, nullable=False
        ),
        sa.Column(
            "vehicle_type_id",
            sa.Integer,
            sa.ForeignKey("vehicle_types.id"),
            nullable=False,
        ),
        sa.Column("departure_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("pickup_location", sa.Text, nullable=False),
        sa.Column("destination", sa.Text, nullable=False),
        sa.Column("passenger_count", sa.Integer, default=1, nullable=False),
        sa.Column("vehicle_count", sa.Integer, default=1, nullable=False),
        sa.Column("round_trip", sa.Boolean, default=False, nullable=False),
        sa.Column("total_distance", sa.Float, nullable=False),
        sa.Column("base_price", sa.Integer, nullable=False),
        sa.Column("inter_trip_charges", sa.Integer, default=0, nullable=False),
        sa.Column("total_price", sa.Integer, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "vehicle_type_id",
            sa.Integer,
            sa.ForeignKey("vehicle_types.id"),
            nullable=False,
        ),
        sa.Column("plate_number", sa.String(20), unique=True, nullable=False),
        sa.Column(
            "transportation_order_id",
            sa.Integer,
            sa.ForeignKey("transportation_orders.id"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_vehicles_type_order",
        "vehicles",
        ["vehicle_type_id", "transportation_order_id"],
    )

    # ── destinations ──────────────────────────────────────────────────
    op.create_table(
        "destinations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "transportation_order_id",
            sa.Integer,
            sa.ForeignKey("transportation_orders.id"),
            nullable=False,
        ),
        sa.Column("address", sa.Text, nullable=False),
        sa.Column("point", Geometry("POINT", srid=4326, spatial_index=False), nullable=True),
        sa.Column("lat", sa.Float, nullable=True),
        sa.Column("lng", sa.Float, nullable=True),
        sa.Column("arrival_time", sa.String(5), nullable=True),
        sa.Column("departure_date", sa.Date, nullable=False),
        sa.Column("is_pickup_location", sa.Boolean, default=False, nullable=False),
        sa.Column("sequence", sa.Integer, nullable=False),
    )
    op.create_index(
        "idx_destinations_point",
        "destinations",
        ["point"],
        postgresql_using="gist",
    )
    op.create_index(
        "idx_destinations_transportation", "destinations", ["transportation_order_id"]
    )

    # ── package_orders ────────────────────────────────────────────────
    op.create_table(
        "package_orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "order_id", sa.Integer, sa.ForeignKey("orders.id"), unique=True, nullable=False
        ),
        sa.Column(
            "package_id", sa.Integer, sa.ForeignKey("tour_packages.id"), nullable=False
        ),
        sa.Column("departure_date", sa.DateTime(timezone=True), nullable=False),
    )

    # ── payments ──────────────────────────────────────────────────────
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("total_price", sa.Integer, nullable=False),
        sa.Column(
            "payment_status",
            sa.Enum("PENDING", "APPROVED", "REJECTED", name="paymentstatus"),
            default="PENDING",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_payments_order", "payments", ["order_id"])


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("package_orders")
    op.drop_table("destinations")
    op.drop_table("vehicles")
    op.drop_table("transportation_orders")
    op.drop_table("orders")
    op.drop_table("tour_packages")
    op.drop_table("vehicle_types")
    op.execute("DROP TYPE IF EXISTS paymentstatus")
    op.execute("DROP TYPE IF EXISTS orderstatus")
    op.execute("DROP TYPE IF EXISTS ordertype")
