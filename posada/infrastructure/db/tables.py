from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

metadata = MetaData()

rooms = Table(
    "rooms",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("active", Boolean, nullable=False, default=True),
    Column("display_order", Integer, nullable=False, default=0),
)

guests = Table(
    "guests",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("phone", String(50)),
    Column("document", String(50)),
    Column("city", String(120)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

reservations = Table(
    "reservations",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("room_id", String(64), ForeignKey("rooms.id"), nullable=False),
    Column("guest_id", String(36), ForeignKey("guests.id"), nullable=False),
    Column("check_in", Date, nullable=False),
    Column("check_out", Date, nullable=False),
    Column("occupancy", Integer, nullable=False),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column("status", String(32), nullable=False),
    Column("payment_status", String(32), nullable=False),
    Column("checkout_session_id", String(255)),
    Column("payment_intent_id", String(255)),
    Column("payment_method", String(32)),
    Column("payment_approved_at", DateTime(timezone=True)),
    Column("notes", Text),
    Column("lock_version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_reservations_room_status", "room_id", "status"),
    Index("ix_reservations_checkout_session", "checkout_session_id"),
)
