"""KuzuDB embedded graph database connection."""
import os
import logging
import kuzu
from pathlib import Path

logger = logging.getLogger(__name__)

DB_PATH = Path(os.environ.get("DB_PATH", Path(__file__).resolve().parent.parent / "graph_data"))
_database = None


def get_database():
    global _database
    if _database is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _database = kuzu.Database(str(DB_PATH))
        init_schema(_database)
        logger.info("Opened family tree database at %s", DB_PATH)
    return _database


def init_schema(db):
    conn = kuzu.Connection(db)

    # ── Family data ──
    # Optional text fields are stored as '' and read back as None.
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS Member("
        "id STRING, first_name STRING, last_name STRING, "
        "birth_date STRING, death_date STRING, photo_url STRING, bio STRING, "
        "created_at STRING, "
        "PRIMARY KEY(id))"
    )
    conn.execute(
        "CREATE REL TABLE IF NOT EXISTS RELATED("
        "FROM Member TO Member, id STRING, rel_type STRING, created_at STRING)"
    )

    # ── Accounts ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS User("
        "id STRING, email STRING, name STRING, "
        "password_hash STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )


def get_conn():
    db = get_database()
    conn = kuzu.Connection(db)
    try:
        yield conn
    finally:
        pass
