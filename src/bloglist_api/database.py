"""
Database initialization and lifecycle for bloglist-api.

This module provides:
- Database path resolution (environment > .env defaults > cwd)
- Engine configuration and table creation for the Flask app
- The administrative reset used by the testing endpoint
"""
import logging
import os

from .config_defaults import get_int_setting, get_setting
from .models import (
    Account,
    ActivityLog,
    Blog,
    UserSession,
    db,
)

logger = logging.getLogger(__name__)

MEMORY_DB = ':memory:'


def get_db_path() -> str:
    """
    Get database file path.
    Priority: environment variable > .env defaults > current directory
    """
    db_path = get_setting('BLOGLIST_DB_PATH')
    if db_path:
        logger.info(f"Using configured database path: {db_path}")
        return db_path

    db_path = os.path.join(os.getcwd(), 'bloglist.db')
    logger.info(f"Using default database path: {db_path}")
    return db_path


def init_db(app):
    """
    Initialize database with Flask app.

    Respects a SQLALCHEMY_DATABASE_URI already present in app.config
    (test overrides); otherwise builds a SQLite URI from get_db_path().
    """
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{get_db_path()}'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine_options = dict(app.config.get('SQLALCHEMY_ENGINE_OPTIONS') or {})
    if uri.startswith('sqlite'):
        # Writers wait on the SQLite lock instead of failing with "database is locked"
        connect_args = engine_options.setdefault('connect_args', {})
        connect_args.setdefault('timeout', get_int_setting('SQLITE_BUSY_TIMEOUT', 30))
    if MEMORY_DB not in uri:
        engine_options.setdefault('pool_recycle', 3600)
        engine_options.setdefault('pool_pre_ping', True)
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options

    db.init_app(app)

    with app.app_context():
        db.create_all()
        logger.info("Database tables created/verified")


def reset_database() -> dict[str, int]:
    """
    Wipe every account, session, blog and audit row.

    Children are deleted before parents so foreign keys hold throughout.
    Must run inside an app context.

    Returns:
        Number of deleted rows per table
    """
    deleted = {}
    for model in (ActivityLog, UserSession, Blog, Account):
        deleted[model.__tablename__] = db.session.query(model).delete()
    db.session.commit()

    logger.warning(f"Database reset: {deleted}")
    return deleted
