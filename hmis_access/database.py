"""
Database engine initialisation and identity loading.
"""

import sys
from typing import Optional

from sqlalchemy import (
    Boolean, Column, MetaData, String, Table, create_engine, select, text,
)

from hmis_access.config import USER_TABLE, get_env
from hmis_access.models import Identity

metadata = MetaData()

# Read-only view of the session provider's user rows.
user_table = Table(
    USER_TABLE,
    metadata,
    Column("id", String, primary_key=True),
    Column("email", String, nullable=False),
    Column("full_name", String),
    Column("role", String, nullable=False),
    Column("is_active", Boolean),
    Column("hospital_type", String),
)


def init_engine():
    """Create a SQLAlchemy engine and verify the connection."""
    db_uri = get_env("DB_URI")
    engine = create_engine(db_uri, echo=False, future=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print("ERROR: could not connect to DB:", e, file=sys.stderr)
        sys.exit(1)
    print("[init] Connected to DB.")
    return engine


def load_identity(engine, user_id: str) -> Optional[Identity]:
    """Look up a user by id and return their Identity, or None if there is no such user."""
    sql = select(
        user_table.c.id,
        user_table.c.email,
        user_table.c.full_name,
        user_table.c.role,
        user_table.c.is_active,
        user_table.c.hospital_type,
    ).where(user_table.c.id == user_id)

    with engine.connect() as conn:
        row = conn.execute(sql).mappings().first()

    if not row:
        return None

    return Identity(
        user_id=str(row["id"]),
        display_name=row["full_name"] or str(row["email"]).split("@")[0],
        role=str(row["role"] or ""),
        # Rows predating the flag are treated as active.
        is_active=row["is_active"] is not False,
        tenant=row["hospital_type"] or None,
    )
