import sqlite3
from contextlib import contextmanager
from threading import Lock

from utils.security_utils import get_env_variable
from utils.logging_utils import db_logger, log_info, log_warning

# Database configuration
DATABASE_PATH = get_env_variable('DATABASE_PATH', 'course_outline.db')

SCHEMA = (
    '''
    CREATE TABLE IF NOT EXISTS courses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    ''',
    '''
    CREATE TABLE IF NOT EXISTS modules (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        course_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        order_index INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (course_id) REFERENCES courses (id) ON DELETE CASCADE
    )
    ''',
    '''
    CREATE TABLE IF NOT EXISTS chapters (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        module_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        order_index INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (module_id) REFERENCES modules (id) ON DELETE CASCADE
    )
    ''',
    '''
    CREATE TABLE IF NOT EXISTS content_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        chapter_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        content_type TEXT NOT NULL DEFAULT 'text',
        content_data TEXT,
        order_index INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (chapter_id) REFERENCES chapters (id) ON DELETE CASCADE
    )
    ''',
    'CREATE INDEX IF NOT EXISTS idx_modules_course_order ON modules (course_id, order_index)',
    'CREATE INDEX IF NOT EXISTS idx_chapters_module_order ON chapters (module_id, order_index)',
    'CREATE INDEX IF NOT EXISTS idx_content_chapter_order ON content_items (chapter_id, order_index)',
)


class DatabaseManager:
    """Manages pooled SQLite connections for the outline service."""

    def __init__(self, db_path=None, pool_size=5):
        self.db_path = db_path or DATABASE_PATH
        self.pool_size = pool_size
        self.connection_pool = []
        self.lock = Lock()

    def configure(self, db_path, pool_size=None):
        """Point the manager at another database file, dropping pooled connections."""
        self.close_all_connections()
        self.db_path = db_path
        if pool_size is not None:
            self.pool_size = pool_size
        log_info(db_logger, "Database configured", db_path=db_path)

    def _create_connection(self):
        """Create a new database connection with proper configuration."""
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA journal_mode=WAL')
        conn.execute('PRAGMA foreign_keys=ON')
        return conn

    def get_connection(self):
        """Get a database connection from the pool."""
        with self.lock:
            if self.connection_pool:
                return self.connection_pool.pop()
        return self._create_connection()

    def return_connection(self, conn):
        """Return a connection to the pool."""
        if conn is None:
            return
        with self.lock:
            if len(self.connection_pool) < self.pool_size:
                try:
                    conn.rollback()
                except sqlite3.Error as e:
                    log_warning(db_logger, "Discarding broken connection", error=str(e))
                    conn.close()
                    return
                self.connection_pool.append(conn)
                return
        conn.close()

    @contextmanager
    def get_db_cursor(self):
        """
        Context manager for database operations.
        Commits on success, rolls back on any exception and always returns
        the connection to the pool.
        """
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            yield conn, cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self.return_connection(conn)

    def close_all_connections(self):
        """Close all connections in the pool."""
        with self.lock:
            for conn in self.connection_pool:
                try:
                    conn.close()
                except sqlite3.Error:
                    pass
            self.connection_pool.clear()

    def initialize_database(self):
        """Initialize the database with required tables."""
        conn = self._create_connection()
        try:
            for statement in SCHEMA:
                conn.execute(statement)
            conn.commit()
        finally:
            conn.close()
        log_info(db_logger, "Database initialized", db_path=self.db_path)


# Global instance for the application
db_manager = DatabaseManager()


def get_db_connection():
    """Get a database connection from the pool."""
    return db_manager.get_connection()


@contextmanager
def get_db_cursor():
    """Get a database cursor with automatic connection management (recommended)."""
    with db_manager.get_db_cursor() as (conn, cursor):
        yield conn, cursor


def return_db_connection(conn):
    """Return a database connection to the pool."""
    db_manager.return_connection(conn)
