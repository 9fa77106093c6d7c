#!/usr/bin/env python3
"""Copy a SQLite vault database into PostgreSQL and verify the copy.

Usage:
    python scripts/migrate_sqlite_to_pg.py <sqlite_path> <postgres_url>

Rows are read and written through the model tables, so 256-bit integer columns
go through ``IntText`` on both sides. After the copy every table is compared:
row counts, every position's (account, nonce) key and its big-integer
columns, and the pool balance. Any mismatch aborts with a non-zero exit.
"""

import sys
from pathlib import Path

from sqlalchemy import create_engine, func, select, text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from backend.database import create_db_and_tables
from backend.models import CollateralPool, Position

POSITION_INT_COLUMNS = ("entry_price", "size", "close_price")


class MigrationError(Exception):
    pass


def _tables():
    # Parents first; the vault has no foreign keys, so this is creation order
    return SQLModel.metadata.sorted_tables


def copy_tables(src: Engine, dst: Engine) -> dict[str, int]:
    """Replace every vault table in ``dst`` with the rows of ``src``."""
    create_db_and_tables(dst)
    copied = {}
    with src.connect() as src_conn, dst.begin() as dst_conn:
        for table in reversed(_tables()):
            dst_conn.execute(table.delete())
        for table in _tables():
            rows = [dict(row) for row in src_conn.execute(select(table)).mappings()]
            if rows:
                dst_conn.execute(table.insert(), rows)
            if dst.dialect.name == "postgresql" and "id" in table.c and rows:
                # Explicit ids bypass the serial sequence
                dst_conn.execute(
                    text("SELECT setval(pg_get_serial_sequence(:table, 'id'), :val)"),
                    {"table": f'"{table.name}"', "val": max(row["id"] for row in rows)},
                )
            copied[table.name] = len(rows)
    return copied


def _positions(conn) -> dict[tuple[str, int], tuple]:
    stmt = select(
        Position.__table__.c.account,
        Position.__table__.c.nonce,
        *(Position.__table__.c[name] for name in POSITION_INT_COLUMNS),
    )
    return {(row[0], row[1]): tuple(row)[2:] for row in conn.execute(stmt)}


def verify(src: Engine, dst: Engine):
    """Raise MigrationError unless ``dst`` holds exactly the vault state of ``src``."""
    with src.connect() as src_conn, dst.connect() as dst_conn:
        for table in _tables():
            count = select(func.count()).select_from(table)
            expected = src_conn.execute(count).scalar_one()
            actual = dst_conn.execute(count).scalar_one()
            if expected != actual:
                raise MigrationError(f"{table.name}: {actual} rows, expected {expected}")

        keys = select(Position.__table__.c.account, Position.__table__.c.nonce).distinct()
        distinct = dst_conn.execute(select(func.count()).select_from(keys.subquery())).scalar_one()
        total = dst_conn.execute(select(func.count()).select_from(Position.__table__)).scalar_one()
        if distinct != total:
            raise MigrationError(f"position: {total - distinct} duplicate (account, nonce) keys")

        src_positions = _positions(src_conn)
        dst_positions = _positions(dst_conn)
        for key, values in src_positions.items():
            if dst_positions.get(key) != values:
                account, nonce = key
                raise MigrationError(f"position {account}#{nonce}: {dst_positions.get(key)} != {values}")

        balance = select(CollateralPool.__table__.c.balance)
        if src_conn.execute(balance).scalars().all() != dst_conn.execute(balance).scalars().all():
            raise MigrationError("collateral_pool balance differs")


def migrate(sqlite_path: str, pg_url: str):
    if not Path(sqlite_path).exists():
        print(f"ERROR: SQLite file not found: {sqlite_path}")
        sys.exit(1)

    src = create_engine(f"sqlite:///{sqlite_path}", connect_args={"check_same_thread": False})
    dst = create_engine(pg_url)

    print("Copying tables...")
    for table_name, count in copy_tables(src, dst).items():
        print(f"  {table_name}: {count} rows")

    try:
        verify(src, dst)
    except MigrationError as e:
        print(f"ERROR: verification failed: {e}")
        sys.exit(1)
    print("\nMigration complete and verified.")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    migrate(sys.argv[1], sys.argv[2])
