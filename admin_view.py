"""
Book list admin view.

A BookListView is one activation of the back-office book list page. It
owns its own list of books (the view state), which is filled once by
on_mount() and afterwards only shrinks through delete_book(). Deletes
are local to the view: the catalogue is never told about them, and a
new mount starts from the full catalogue again.

Collaborators are injected so the view does not depend on Flask:

    auth        AdminSession (or anything with is_authenticated / clear)
    load_books  callable returning a list of book dicts
    navigate    callable taking a route path
"""

import logging
from collections import OrderedDict
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from threading import Lock
from uuid import uuid4

from books_data import BookSourceError

log = logging.getLogger(__name__)

AUTH_FLAG     = 'isAdminAuthenticated'
LOGIN_ROUTE   = '/login'
LIST_ROUTE    = '/store-manager/all-books'
ADD_ROUTE     = '/store-manager/add-book'
EDIT_ROUTE    = '/store-manager/edit-book/{book_id}'
DELETE_PROMPT = 'Are you sure you want to delete this book?'

CURRENCY      = '฿'   # Thai baht sign
MISSING_PRICE = '-'
CENTS         = Decimal('0.01')


class AdminSession:
    """The admin flag in a session-like mapping. Only the string 'true' counts."""

    def __init__(self, store):
        self.store = store

    def is_authenticated(self):
        return self.store.get(AUTH_FLAG) == 'true'

    def login(self):
        self.store[AUTH_FLAG] = 'true'

    def clear(self):
        self.store.pop(AUTH_FLAG, None)


# ── PURE HELPERS ──────────────────────────────────────────────────────────────

def remove_by_id(books, book_id):
    return [b for b in books if b['id'] != book_id]


def format_price(price):
    """'฿1,234.50' style, half-up to two places. Absent or junk prices give '-'."""
    if price is None:
        return MISSING_PRICE
    try:
        amount = Decimal(str(price))
        if not amount.is_finite():
            return MISSING_PRICE
        # raises once the amount needs more digits than the context allows
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return MISSING_PRICE
    return f'{CURRENCY}{amount:,.2f}'


# ── VIEW ──────────────────────────────────────────────────────────────────────

class BookListView:

    def __init__(self, auth, load_books, navigate):
        self.auth       = auth
        self.load_books = load_books
        self.navigate   = navigate
        self.books      = []
        self.load_error = None

    def guard(self):
        """True if the admin flag is set; otherwise sends the user to login."""
        if self.auth.is_authenticated():
            return True
        self.navigate(LOGIN_ROUTE)
        return False

    def on_mount(self):
        if not self.guard():
            return False
        self.fetch_books()
        return True

    def fetch_books(self):
        try:
            self.books = list(self.load_books())
            self.load_error = None
        except BookSourceError as e:
            log.error('Could not load books: %s', e)
            self.books = []
            self.load_error = str(e)

    # actions

    def logout(self):
        self.auth.clear()
        self.navigate(LOGIN_ROUTE)

    def add_book(self):
        self.navigate(ADD_ROUTE)

    def edit_book(self, book_id):
        self.navigate(EDIT_ROUTE.format(book_id=book_id))

    def delete_book(self, book_id, confirm):
        """Ask confirm(prompt) first. Returns True if the state changed."""
        if not confirm(DELETE_PROMPT):
            return False
        before = len(self.books)
        self.books = remove_by_id(self.books, book_id)
        if len(self.books) == before:
            return False
        log.info('Book %s removed from view', book_id)
        return True

    def find(self, book_id):
        return next((b for b in self.books if b['id'] == book_id), None)

    def rows(self):
        return [dict(b, price_display=format_price(b.get('price'))) for b in self.books]


class ViewRegistry:
    """Live views by id. Oldest views are dropped once `limit` is exceeded."""

    def __init__(self, limit=256):
        self.limit = limit
        self.views = OrderedDict()
        self._lock = Lock()

    def add(self, view):
        view_id = uuid4().hex
        with self._lock:
            self.views[view_id] = view
            while len(self.views) > self.limit:
                self.views.popitem(last=False)
        return view_id

    def get(self, view_id):
        with self._lock:
            view = self.views.get(view_id)
            if view is not None:
                self.views.move_to_end(view_id)
            return view

    def discard(self, view_id):
        with self._lock:
            self.views.pop(view_id, None)
