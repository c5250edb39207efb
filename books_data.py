"""
In-memory book catalogue for the back office.

The catalogue is seeded from a CSV file the first time it is read and
then lives in memory only; nothing is ever written back to disk.
"""

import csv
import logging
import re
from decimal import Decimal
from pathlib import Path
from threading import RLock

log = logging.getLogger(__name__)

FIELDS = ('id', 'title', 'author', 'isbn', 'year', 'price')

PRICE_RE  = re.compile(r'\d+(\.\d+)?')
MAX_PRICE = Decimal('999999999999.99')


class BookSourceError(Exception):
    """The catalogue file is missing or malformed."""


# ── PARSING ───────────────────────────────────────────────────────────────────

def parse_year(text):
    text = (text or '').strip()
    return int(text) if text else None


def parse_price(text):
    """Blank means no price. Raises ValueError for anything else unparseable."""
    text = (text or '').strip().replace(',', '')
    if not text:
        return None
    # plain digits only: no sign, exponent, NaN or Infinity
    if not PRICE_RE.fullmatch(text):
        raise ValueError(f'invalid price: {text!r}')
    price = Decimal(text)
    if price > MAX_PRICE:
        raise ValueError(f'price out of range: {text!r}')
    return price


def _load_books(csvpath):
    """Read the catalogue CSV. Duplicate ids keep the first row."""
    try:
        f = open(csvpath, newline='', encoding='utf-8')
    except OSError as e:
        raise BookSourceError(f'cannot open book file {csvpath}: {e}') from e

    seen = {}
    with f:
        reader = csv.DictReader(f)
        missing = [c for c in FIELDS if c not in (reader.fieldnames or [])]
        if missing:
            raise BookSourceError(f'{csvpath}: missing columns {", ".join(missing)}')
        for line, row in enumerate(reader, start=2):
            try:
                bid   = int(row['id'])
                year  = parse_year(row['year'])
                price = parse_price(row['price'])
            except (TypeError, ValueError) as e:
                raise BookSourceError(f'{csvpath}:{line}: {e}') from e
            if bid in seen:
                log.warning('%s:%d: duplicate book id %d ignored', csvpath, line, bid)
                continue
            seen[bid] = {
                'id': bid,
                'title':  (row['title'] or '').strip(),
                'author': (row['author'] or '').strip(),
                'isbn':   (row['isbn'] or '').strip(),
                'year':   year,
                'price':  price,
            }
    return list(seen.values())


# ── STORE ─────────────────────────────────────────────────────────────────────

class BookStore:
    """Catalogue shared by every view in one application. Thread-safe via RLock."""

    def __init__(self, path):
        self.path     = Path(path)
        self._books   = None
        self._next_id = 1
        self._lock    = RLock()

    @property
    def books(self):
        with self._lock:
            if self._books is None:
                self._books   = _load_books(self.path)
                self._next_id = max((b['id'] for b in self._books), default=0) + 1
                log.info('Loaded %d books from %s', len(self._books), self.path)
            return self._books

    def get_all_books(self):
        # copies, so a caller's list never aliases the catalogue
        with self._lock:
            return [dict(b) for b in self.books]

    def get_book(self, book_id):
        with self._lock:
            book = next((b for b in self.books if b['id'] == book_id), None)
            return dict(book) if book else None

    def add_book(self, title, author, isbn='', year=None, price=None):
        with self._lock:
            books = self.books
            book = {
                'id': self._next_id, 'title': title, 'author': author,
                'isbn': isbn, 'year': year, 'price': price,
            }
            books.append(book)
            self._next_id += 1
            return dict(book)

    def update_book(self, book_id, **fields):
        """Returns the updated book, or None if there is no such id."""
        unknown = set(fields) - set(FIELDS[1:])
        with self._lock:
            book = next((b for b in self.books if b['id'] == book_id), None)
            if book is None:
                return None
            if unknown:
                raise KeyError(f'unknown book fields: {", ".join(sorted(unknown))}')
            book.update(fields)
            return dict(book)
