"""Shared fixtures: a small catalogue CSV and a configured app."""

import pytest

from main import create_app

SAMPLE_CSV = """id,title,author,isbn,year,price
1,The Pragmatic Programmer,Andrew Hunt,9780135957059,2019,1234.5
2,Clean Code,Robert C. Martin,9780132350884,2008,890
3,The Little Prince,Antoine de Saint-Exupery,9780156012195,1943,
"""


@pytest.fixture
def books_file(tmp_path):
    path = tmp_path / "books.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def app(books_file):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "BOOKS_FILE": books_file,
        "ADMIN_USERNAME": "admin",
        "ADMIN_PASSWORD": "secret",
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client whose session already carries the admin flag."""
    with client.session_transaction() as sess:
        sess["isAdminAuthenticated"] = "true"
    return client
