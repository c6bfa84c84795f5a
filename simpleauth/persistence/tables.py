"""SQLAlchemy table definitions for the device-local store.

Mirrors a keychain generic-password table: one row per (service, account,
access group), holding a single string value.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# SECURE ITEMS TABLE
# ============================================================================
secure_items_table = Table(
    "secure_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("service", String(255), nullable=False),
    Column("account", String(255), nullable=False),
    Column("access_group", String(255), nullable=True),  # NULL for app-private items
    Column("value", Text, nullable=False),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    UniqueConstraint(
        "service", "account", "access_group", name="uq_secure_items_key"
    ),
)

Index("idx_secure_items_service", secure_items_table.c.service)
