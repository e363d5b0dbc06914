# booking_provisioning/storage/sqlite_base.py
import sqlite3
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

IN_MEMORY_DB_PATH = ":memory:"


def open_sqlite_connection(db_path: str) -> sqlite3.Connection:
    """
    Open a SQLite connection and make sure the provisioning schema exists.

    The caller owns the returned connection; there is no process-wide handle.

    Args:
        db_path: Filesystem path of the database, or ":memory:"

    Returns:
        sqlite3.Connection: A connection with name-based row access

    Raises:
        sqlite3.Error: If the database cannot be opened
    """
    try:
        if db_path != IN_MEMORY_DB_PATH:
            resolved = Path(db_path).resolve()
            resolved.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(resolved)

        logger.info(f"Attempting to connect to SQLite DB at: {db_path}")
        # check_same_thread=False so the connection can be shared with FastAPI's threadpool
        conn = sqlite3.connect(db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Successfully connected to SQLite DB: {db_path}")

        init_sqlite_db(conn)
        return conn
    except sqlite3.Error as e:
        logger.error(f"Error connecting to SQLite database at {db_path}: {e}", exc_info=True)
        raise


def init_sqlite_db(conn: sqlite3.Connection) -> None:
    """
    Create all provisioning tables. Safe to call repeatedly.

    Uniqueness of tenant email and slug is enforced here, not by application
    locking, so racing registrations resolve to exactly one winner.
    """
    cursor = conn.cursor()

    cursor.execute('''
    CREATE TABLE IF NOT EXISTS tenants (
        id TEXT PRIMARY KEY,
        slug TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        business_name TEXT NOT NULL,
        phone TEXT NOT NULL,
        business_category TEXT NOT NULL,
        tier TEXT NOT NULL,
        flow TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        trial_ends_at TEXT NOT NULL,
        cancellation_token_hash TEXT NOT NULL,
        routing_secret_encrypted TEXT,
        payment_customer_ref TEXT,
        phone_number TEXT,
        assistant_id TEXT,
        assistant_kind TEXT,
        failure_reason TEXT,
        warnings_json TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    ''')
    logger.info("Ensured 'tenants' table exists.")

    cursor.execute('''
    CREATE TABLE IF NOT EXISTS service_catalog_entries (
        tenant_id TEXT NOT NULL REFERENCES tenants(id),
        name TEXT NOT NULL,
        duration_minutes INTEGER NOT NULL,
        price TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        UNIQUE (tenant_id, name)
    )
    ''')
    logger.info("Ensured 'service_catalog_entries' table exists.")

    cursor.execute('''
    CREATE TABLE IF NOT EXISTS staff_members (
        tenant_id TEXT NOT NULL REFERENCES tenants(id),
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL DEFAULT '',
        email TEXT NOT NULL,
        phone TEXT NOT NULL,
        role TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        UNIQUE (tenant_id, email)
    )
    ''')
    logger.info("Ensured 'staff_members' table exists.")

    # Exactly one telephony assignment per tenant
    cursor.execute('''
    CREATE TABLE IF NOT EXISTS phone_number_assignments (
        tenant_id TEXT PRIMARY KEY REFERENCES tenants(id),
        kind TEXT NOT NULL,
        number TEXT,
        platform_phone_id TEXT,
        forwarding_rules_json TEXT,
        created_at TEXT NOT NULL
    )
    ''')
    logger.info("Ensured 'phone_number_assignments' table exists.")

    conn.commit()
    logger.info("SQLite database schema initialized/verified.")


def close_sqlite_connection(conn: sqlite3.Connection) -> None:
    logger.info("Closing SQLite DB connection.")
    conn.close()
    logger.info("SQLite DB connection closed.")
