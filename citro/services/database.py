"""
Citro Database Module

Handles SQLite storage behind the voice collaborators:
- categories / events: the public event catalogue
- registrations: paid and pending registrations per user
- cart_items: cart lines keyed by owner
- sessions: hashed session tokens issued by the login flow
"""

import asyncio
import logging
import os
import sqlite3
from pathlib import Path

from citro.services.base import CollaboratorError

logger = logging.getLogger(__name__)


# Database path
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "citro.db"

# Seeding control via environment variable
SEED_DATA_ON_INIT = os.getenv("CITRO_SEED_DATA", "false").lower() in ("true", "1", "yes")


def get_db_path() -> Path:
    """Database path, overridable with CITRO_DB_PATH."""
    return Path(os.getenv("CITRO_DB_PATH", str(DEFAULT_DB_PATH)))


def get_db_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """Get database connection with row factory."""
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: Path | str | None = None, seed: bool | None = None) -> None:
    """Create tables if they don't exist, optionally loading sample data."""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            slug TEXT UNIQUE NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            tagline TEXT,
            description TEXT,
            venue TEXT,
            start_time DATETIME,
            end_time DATETIME,
            category_id INTEGER REFERENCES categories(id),
            ticket_price REAL DEFAULT 0,
            max_tickets INTEGER DEFAULT 0,
            registered INTEGER DEFAULT 0,
            prize TEXT,
            status TEXT DEFAULT 'draft',
            visibility TEXT DEFAULT 'public',
            featured INTEGER DEFAULT 0,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS registrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            event_id INTEGER NOT NULL REFERENCES events(id),
            quantity INTEGER DEFAULT 1,
            amount_paid REAL DEFAULT 0,
            payment_status TEXT DEFAULT 'pending',
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS cart_items (
            owner TEXT NOT NULL,
            event_id INTEGER NOT NULL REFERENCES events(id),
            quantity INTEGER NOT NULL DEFAULT 1,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (owner, event_id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS sessions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            token_hash TEXT UNIQUE NOT NULL,
            user_id TEXT NOT NULL,
            role TEXT,
            email TEXT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            expires_at DATETIME NOT NULL,
            is_active INTEGER DEFAULT 1
        )
    """)

    # Indexes
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_status ON events(status, visibility)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_registrations_user ON registrations(user_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_sessions_token ON sessions(token_hash)")

    conn.commit()

    if seed is None:
        seed = SEED_DATA_ON_INIT
    if seed:
        cursor.execute("SELECT COUNT(*) FROM events")
        if cursor.fetchone()[0] == 0:
            seed_sample_data(conn)
            logger.info("Seeded sample events")

    conn.close()


SAMPLE_CATEGORIES = [
    ("Computer Science & Engineering", "cse"),
    ("Mechanical Engineering", "me"),
    ("Electronics & Communication Engineering", "ec"),
    ("Pharmacy", "pharma"),
    ("Master of Business Administration", "mba"),
]

# (name, tagline, venue, start, end, category slug, price, max tickets, prize, featured)
SAMPLE_EVENTS = [
    ("Codeology", "Competitive coding sprint", "Lab 8 & 9",
     "2026-04-08T12:00:00", "2026-04-08T15:00:00", "cse", 100, 35, "Total ₹5,000", 1),
    ("ROBO Race", "Race your bot through the track", "Main Ground",
     "2026-04-09T11:00:00", "2026-04-09T16:00:00", "ec", 200, 20, "Total ₹10,000", 1),
    ("Battle of Design", "CAD design challenge", "CAD Lab",
     "2026-04-08T12:00:00", "2026-04-08T16:00:00", "me", 100, 10, "Total ₹5,000", 0),
    ("Pharmathon", "Pharmacy quiz marathon", "CDIP",
     "2026-04-08T12:00:00", "2026-04-08T16:00:00", "pharma", 150, 20, "Total ₹9,000", 0),
    ("AD-MAD Show", "Pitch a product in sixty seconds", "Seminar Hall",
     "2026-04-10T10:00:00", "2026-04-10T13:00:00", "mba", 100, 15, "Total ₹5,000", 0),
]


def seed_sample_data(conn: sqlite3.Connection) -> None:
    """Insert a handful of published events for local development."""
    cursor = conn.cursor()
    slugs = {}
    for name, slug in SAMPLE_CATEGORIES:
        cursor.execute("INSERT OR IGNORE INTO categories (name, slug) VALUES (?, ?)", (name, slug))
        cursor.execute("SELECT id FROM categories WHERE slug = ?", (slug,))
        slugs[slug] = cursor.fetchone()[0]

    for name, tagline, venue, start, end, slug, price, seats, prize, featured in SAMPLE_EVENTS:
        cursor.execute(
            """
            INSERT INTO events (name, tagline, venue, start_time, end_time, category_id,
                                ticket_price, max_tickets, prize, status, visibility, featured)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 'published', 'public', ?)
        """,
            (name, tagline, venue, start, end, slugs[slug], price, seats, prize, featured),
        )
    conn.commit()


class SqliteService:
    """Shared plumbing for the SQLite collaborators.

    Queries are blocking, so every public method runs its query in a worker
    thread and turns sqlite errors into CollaboratorError.
    """

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path) if db_path else get_db_path()

    def _connect(self) -> sqlite3.Connection:
        return get_db_connection(self.db_path)

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as e:
            raise CollaboratorError(f"{type(self).__name__}: {e}") from e
