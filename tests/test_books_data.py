"""
Catalogue store tests.

Real CSV files in tmp_path, no mocks.
"""

from decimal import Decimal

import threading

import pytest

from books_data import BookSourceError, BookStore, parse_price, parse_year

HEADER = "id,title,author,isbn,year,price\n"


def write(tmp_path, body, header=HEADER):
    path = tmp_path / "books.csv"
    path.write_text(header + body, encoding="utf-8")
    return path


def test_loads_books(books_file):
    books = BookStore(books_file).get_all_books()
    assert [b["id"] for b in books] == [1, 2, 3]
    assert books[0] == {
        "id": 1, "title": "The Pragmatic Programmer", "author": "Andrew Hunt",
        "isbn": "9780135957059", "year": 2019, "price": Decimal("1234.5"),
    }
    assert books[2]["price"] is None, "blank price should load as absent"


def test_get_all_books_returns_copies(books_file):
    store = BookStore(books_file)
    books = store.get_all_books()
    books[0]["title"] = "changed"
    books.pop()
    assert store.get_all_books()[0]["title"] == "The Pragmatic Programmer"
    assert len(store.get_all_books()) == 3


def test_load_is_lazy(tmp_path):
    store = BookStore(tmp_path / "not-there.csv")
    with pytest.raises(BookSourceError, match="cannot open"):
        store.get_all_books()


def test_missing_column(tmp_path):
    path = write(tmp_path, "1,T,A,123,2000\n", header="id,title,author,isbn,year\n")
    with pytest.raises(BookSourceError, match="missing columns price"):
        BookStore(path).get_all_books()


def test_bad_number_reports_line(tmp_path):
    path = write(tmp_path, "1,T,A,123,2000,10\n2,U,B,456,soon,20\n")
    with pytest.raises(BookSourceError, match=":3:"):
        BookStore(path).get_all_books()


def test_duplicate_ids_keep_first(tmp_path):
    path = write(tmp_path, "1,First,A,,2000,10\n1,Second,B,,2001,20\n")
    books = BookStore(path).get_all_books()
    assert len(books) == 1
    assert books[0]["title"] == "First"


def test_add_book_assigns_next_id(books_file):
    store = BookStore(books_file)
    book = store.add_book("New", "Someone", isbn="999", year=2024, price=Decimal("99.00"))
    assert book["id"] == 4
    assert store.get_book(4)["title"] == "New"
    assert store.add_book("Newer", "Someone")["id"] == 5


def test_update_book(books_file):
    store = BookStore(books_file)
    updated = store.update_book(2, title="Clean Code 2nd", price=None)
    assert updated["title"] == "Clean Code 2nd"
    assert updated["price"] is None
    assert store.get_book(2)["author"] == "Robert C. Martin"
    assert store.update_book(42, title="x") is None
    with pytest.raises(KeyError):
        store.update_book(2, id=7)


def test_get_book_unknown(books_file):
    assert BookStore(books_file).get_book(99) is None


@pytest.mark.parametrize("text, expected", [
    ("", None), ("  ", None), (None, None),
    ("1,234.50", Decimal("1234.50")), ("890", Decimal("890")),
])
def test_parse_price(text, expected):
    assert parse_price(text) == expected


@pytest.mark.parametrize("text", [
    "abc", "-5", "NaN", "Infinity", "1e30", "1E+27", "9" * 40, "1000000000000",
])
def test_parse_price_rejects(text):
    with pytest.raises(ValueError):
        parse_price(text)


def test_parse_year():
    assert parse_year(" 1999 ") == 1999
    assert parse_year("") is None
    with pytest.raises(ValueError):
        parse_year("nineteen")


def test_largest_price_accepted():
    assert parse_price("999,999,999,999.99") == Decimal("999999999999.99")


def test_concurrent_adds_get_unique_ids(books_file):
    store = BookStore(books_file)

    def add_many():
        for n in range(200):
            store.add_book(f"Book {n}", "Someone")

    threads = [threading.Thread(target=add_many) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [b["id"] for b in store.get_all_books()]
    assert len(ids) == 3 + 4 * 200
    assert len(set(ids)) == len(ids), "book ids must stay unique"
