"""
Back-office configuration.

Everything can be overridden from the environment; create_app() also
accepts a dict of overrides for tests.
"""

import os
from pathlib import Path

HERE = Path(__file__).resolve().parent


class Config:
    """Back-office app configuration."""

    SECRET_KEY = os.getenv('BOOKSTORE_SECRET_KEY', 'bookstore-secret-key')

    # e.g. '/proxy/5050' when served behind a path-rewriting proxy
    URL_PREFIX = os.getenv('BOOKSTORE_URL_PREFIX', '')

    BOOKS_FILE = Path(
        os.getenv('BOOKSTORE_BOOKS_FILE', str(HERE / 'bookstore_books.csv'))
    ).expanduser()

    ADMIN_USERNAME = os.getenv('BOOKSTORE_ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.getenv('BOOKSTORE_ADMIN_PASSWORD', 'admin123')

    MAX_VIEWS = int(os.getenv('BOOKSTORE_MAX_VIEWS', '256'))

    HOST  = os.getenv('WEB_HOST', '127.0.0.1')
    PORT  = int(os.getenv('WEB_PORT', '5050'))
    DEBUG = os.getenv('WEB_DEBUG', 'false').lower() == 'true'
