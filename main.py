"""
BookStore back office.

Admin book list with add / edit pages and local-only delete.

Usage:
    python main.py
    python main.py --port 5050 --host 127.0.0.1
"""

import logging

from flask import (Blueprint, Flask, abort, current_app, redirect, request,
                   session)
from markupsafe import escape

from admin_view import (DELETE_PROMPT, LIST_ROUTE, AdminSession, BookListView,
                        ViewRegistry)
from books_data import BookStore, parse_price, parse_year
from config import Config

bp = Blueprint('backoffice', __name__)


class PrefixMiddleware:
    def __init__(self, wsgi_app, prefix):
        self.app    = wsgi_app
        self.prefix = prefix
    def __call__(self, environ, start_response):
        path = environ.get('PATH_INFO', '/')
        if path.startswith(self.prefix):
            environ['PATH_INFO']   = path[len(self.prefix):] or '/'
            environ['SCRIPT_NAME'] = self.prefix
        return self.app(environ, start_response)


class Navigator:
    """Navigation capability handed to a view; remembers where it was sent."""

    def __init__(self):
        self.target = None

    def __call__(self, path):
        self.target = path

    def response(self):
        return redirect(p(self.target)) if self.target else None


# ── APP STATE ─────────────────────────────────────────────────────────────────

def store():
    return current_app.extensions['bookstore']

def views():
    return current_app.extensions['book_views']

def admin():
    return AdminSession(session)

def new_view():
    return BookListView(admin(), store().get_all_books, Navigator())


# ── HTML HELPERS ──────────────────────────────────────────────────────────────

def p(path=''):
    return request.script_root + path

def pop_flash():
    msg = session.pop('_flash', None)
    if not msg:
        return ''
    kind, text = msg[0], msg[2:]
    bg     = '#d4edda' if kind == 's' else '#f8d7da'
    color  = '#155724' if kind == 's' else '#721c24'
    border = '#c3e6cb' if kind == 's' else '#f5c6cb'
    return (f'<div style="padding:10px 16px;border-radius:6px;margin-bottom:14px;'
            f'background:{bg};color:{color};border:1px solid {border};">{text}</div>')

def set_flash(kind, msg):
    session['_flash'] = kind[0] + ':' + msg

def fmt_year(year):
    return '&mdash;' if year is None else str(year)

def fmt_price_input(price):
    return '' if price is None else str(price)

def base(content, title='BookStore - BackOffice', logout_action=None):
    logout = ''
    if logout_action:
        logout = (f'<form action="{logout_action}" method="post" style="display:inline">'
                  f'<input type="hidden" name="action" value="logout">'
                  f'<button style="background:rgba(255,255,255,.2);color:white;border:none;'
                  f'padding:8px 16px;border-radius:6px;cursor:pointer;font-weight:600;">'
                  f'Logout</button></form>')

    return f'''<!DOCTYPE html>
<html lang="th">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>{title}</title>
<style>
*{{box-sizing:border-box;margin:0;padding:0}}
body{{font-family:"Segoe UI",sans-serif;background:#f9fafb;color:#333;font-size:16px}}
nav{{background:linear-gradient(to right,#93c5fd,#f9a8d4);color:white;padding:0 2rem;
     display:flex;align-items:center;justify-content:space-between;min-height:70px;
     box-shadow:0 2px 6px rgba(0,0,0,.2)}}
.brand{{font-size:1.4rem;font-weight:700;display:flex;align-items:center;gap:.5rem}}
.container{{max-width:1200px;margin:2rem auto;padding:0 1.5rem}}
.card{{background:white;border-radius:8px;box-shadow:0 2px 8px rgba(0,0,0,.08);padding:2rem}}
.fg{{margin-bottom:1.2rem}}
.fg label{{display:block;font-weight:600;margin-bottom:5px;font-size:.95rem}}
.fg input[type=text],.fg input[type=password]{{
  width:100%;padding:11px 13px;border:1px solid #ddd;border-radius:5px;font-size:1rem}}
.fg input:focus{{outline:none;border-color:#3b82f6}}
.btn{{padding:10px 22px;border:none;border-radius:5px;cursor:pointer;font-size:.95rem;
      font-weight:600;transition:opacity .2s;text-decoration:none;display:inline-block}}
.btn:hover{{opacity:.85}}
.btn-b{{background:#3b82f6;color:white}}
.btn-i{{background:none;color:#4f46e5}}
.btn-r{{background:none;color:#dc2626}}
.btn-rs{{background:#dc2626;color:white}}
.btn-sm{{padding:6px 13px;font-size:.85rem}}
h1{{font-size:1.6rem;margin-bottom:1.5rem;color:#374151}}
table{{width:100%;border-collapse:collapse}}
th,td{{padding:12px 20px;text-align:left;border-bottom:1px solid #e5e7eb;font-size:.9rem;white-space:nowrap}}
th{{background:#f3f4f6;font-weight:500;color:#6b7280;text-transform:uppercase;font-size:.75rem;letter-spacing:.05em}}
</style>
</head>
<body>
<nav>
  <div class="brand">&#128214; BookStore - BackOffice</div>
  <div>{logout}</div>
</nav>
<div class="container">
  <div style="margin-top:1rem">{pop_flash()}</div>
  {content}
</div>
</body></html>'''


def render_view(view_id, view):
    action = p(f'{LIST_ROUTE}/{view_id}/action')

    rows = ''
    for b in view.rows():
        bid = b['id']
        rows += f'''<tr>
          <td style="color:#6b7280">{bid}</td>
          <td>{escape(b["title"])}</td>
          <td>{escape(b["author"])}</td>
          <td>{escape(b["isbn"])}</td>
          <td>{fmt_year(b["year"])}</td>
          <td>{b["price_display"]}</td>
          <td>
            <form action="{action}" method="post" style="display:inline">
              <input type="hidden" name="action" value="edit">
              <input type="hidden" name="book_id" value="{bid}">
              <button class="btn btn-i btn-sm" title="Edit">&#9998; Edit</button></form>
            <form action="{action}" method="post" style="display:inline"
                  onsubmit="if(!confirm('{DELETE_PROMPT}'))return false;this.confirmed.value='yes';">
              <input type="hidden" name="action" value="delete">
              <input type="hidden" name="book_id" value="{bid}">
              <input type="hidden" name="confirmed" value="">
              <button class="btn btn-r btn-sm" title="Delete">&#128465; Delete</button></form>
          </td></tr>'''

    if view.load_error:
        rows = ('<tr><td colspan="7" style="text-align:center;color:#b91c1c;padding:2rem">'
                'The book list could not be loaded.</td></tr>')
    elif not rows:
        rows = '<tr><td colspan="7" style="text-align:center;color:#888;padding:2rem">No books.</td></tr>'

    content = f'''
    <div style="display:flex;justify-content:space-between;align-items:center;margin-bottom:1.5rem">
      <h1 style="margin:0">Manage all books</h1>
      <form action="{action}" method="post">
        <input type="hidden" name="action" value="add">
        <button class="btn btn-b">+ Add book</button>
      </form>
    </div>
    <div class="card" style="padding:0;overflow:hidden">
      <table>
        <thead><tr><th>ID</th><th>Title</th><th>Author</th><th>ISBN</th>
                   <th>Year</th><th>Price</th><th>Actions</th></tr></thead>
        <tbody>{rows}</tbody>
      </table>
    </div>'''
    return base(content, logout_action=action)


def book_form(action, heading, submit, book=None):
    book = book or {}
    isbn  = escape(book.get('isbn', '') or '')
    year  = '' if book.get('year') is None else book['year']
    price = fmt_price_input(book.get('price'))
    return f'''
    <div style="max-width:560px;margin:0 auto"><div class="card">
      <h1>{heading}</h1>
      <form method="post" action="{action}">
        <div class="fg"><label>Title *</label>
          <input type="text" name="title" value="{escape(book.get('title', ''))}" required></div>
        <div class="fg"><label>Author *</label>
          <input type="text" name="author" value="{escape(book.get('author', ''))}" required></div>
        <div class="fg"><label>ISBN</label>
          <input type="text" name="isbn" value="{isbn}" placeholder="e.g. 9780135957059"></div>
        <div class="fg"><label>Year</label>
          <input type="text" name="year" value="{year}" placeholder="e.g. 2019"></div>
        <div class="fg"><label>Price (&#3647;)</label>
          <input type="text" name="price" value="{price}" placeholder="e.g. 1234.50"></div>
        <div style="display:flex;gap:1rem;margin-top:.5rem">
          <button type="submit" class="btn btn-b">{submit}</button>
          <a href="{p(LIST_ROUTE)}" style="line-height:2.4;color:#666;text-decoration:none">Cancel</a>
        </div>
      </form>
    </div></div>'''


def read_book_form():
    """Returns (fields, None) or (None, error message)."""
    title  = request.form.get('title', '').strip()
    author = request.form.get('author', '').strip()
    if not title or not author:
        return None, 'Title and author are required.'
    try:
        year = parse_year(request.form.get('year'))
    except ValueError:
        return None, 'Year must be a whole number.'
    try:
        price = parse_price(request.form.get('price'))
    except ValueError:
        return None, 'Price must be a number, e.g. 1234.50.'
    return {
        'title': title, 'author': author,
        'isbn': request.form.get('isbn', '').strip(),
        'year': year, 'price': price,
    }, None


def form_book_id():
    book_id = request.form.get('book_id', type=int)
    if book_id is None:
        abort(400, 'book_id must be an integer')
    return book_id


def live_view(view_id):
    """(view, None) for a registered view that passes the guard, else (None, response)."""
    view = views().get(view_id)
    if view is None:
        return None, redirect(p(LIST_ROUTE))
    view.navigate = Navigator()
    if not view.guard():
        views().discard(view_id)
        return None, view.navigate.response()
    return view, None


# ── HOME ──────────────────────────────────────────────────────────────────────

@bp.route('/')
def index():
    return redirect(p(LIST_ROUTE))


# ── LOGIN ─────────────────────────────────────────────────────────────────────

@bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        username = request.form.get('username', '').strip()
        password = request.form.get('password', '')
        cfg      = current_app.config
        if username == cfg['ADMIN_USERNAME'] and password == cfg['ADMIN_PASSWORD']:
            admin().login()
            current_app.logger.info('Admin %s logged in', username)
            set_flash('success', 'Welcome back!')
            return redirect(p(LIST_ROUTE))
        current_app.logger.warning('Failed admin login for %r', username)
        set_flash('error', 'Invalid username or password.')
        return redirect(p('/login'))

    content = f'''
    <div style="max-width:420px;margin:0 auto"><div class="card">
      <h1>Store manager login</h1>
      <form method="post" action="{p("/login")}">
        <div class="fg"><label>Username</label>
          <input type="text" name="username" placeholder="admin" required></div>
        <div class="fg"><label>Password</label>
          <input type="password" name="password" placeholder="Your password" required></div>
        <button type="submit" class="btn btn-b" style="width:100%">Log In</button>
      </form>
    </div></div>'''
    return base(content, 'Login')


# ── BOOK LIST ─────────────────────────────────────────────────────────────────

@bp.route(LIST_ROUTE)
def all_books():
    # every visit mounts a fresh view, so earlier local deletes are gone
    view = new_view()
    if not view.on_mount():
        return view.navigate.response()
    view_id = views().add(view)
    return render_view(view_id, view)


@bp.route(f'{LIST_ROUTE}/<view_id>')
def show_view(view_id):
    view, resp = live_view(view_id)
    if view is None:
        return resp
    return render_view(view_id, view)


@bp.route(f'{LIST_ROUTE}/<view_id>/action', methods=['POST'])
def view_action(view_id):
    action = request.form.get('action', '')

    if action == 'logout':
        view = views().get(view_id) or new_view()
        view.navigate = Navigator()
        view.logout()
        views().discard(view_id)
        current_app.logger.info('Admin logged out')
        set_flash('success', 'You have been logged out.')
        return view.navigate.response()

    view, resp = live_view(view_id)
    if view is None:
        return resp

    if action == 'add':
        view.add_book()
    elif action == 'edit':
        view.edit_book(form_book_id())
    elif action == 'delete':
        book_id = form_book_id()
        answer  = request.form.get('confirmed', '')
        if answer not in ('yes', 'no'):
            return redirect(p(f'{LIST_ROUTE}/{view_id}/confirm-delete/{book_id}'))
        book = view.find(book_id)
        if view.delete_book(book_id, lambda prompt: answer == 'yes'):
            current_app.logger.info('Deleted book %d from view %s', book_id, view_id)
            set_flash('success', f'Book &ldquo;{escape(book["title"])}&rdquo; deleted.')
        return redirect(p(f'{LIST_ROUTE}/{view_id}'))
    else:
        abort(400, f'unknown action {action!r}')

    return view.navigate.response()


@bp.route(f'{LIST_ROUTE}/<view_id>/confirm-delete/<int:book_id>')
def confirm_delete(view_id, book_id):
    view, resp = live_view(view_id)
    if view is None:
        return resp
    book = view.find(book_id)
    if book is None:
        set_flash('error', 'Book not found.')
        return redirect(p(f'{LIST_ROUTE}/{view_id}'))

    action = p(f'{LIST_ROUTE}/{view_id}/action')
    content = f'''
    <div style="max-width:480px;margin:0 auto"><div class="card">
      <h1>Delete book</h1>
      <p style="margin-bottom:1.5rem">{DELETE_PROMPT}<br>
        <strong>{escape(book["title"])}</strong> by {escape(book["author"])}</p>
      <div style="display:flex;gap:1rem">
        <form action="{action}" method="post">
          <input type="hidden" name="action" value="delete">
          <input type="hidden" name="book_id" value="{book_id}">
          <input type="hidden" name="confirmed" value="yes">
          <button class="btn btn-rs">Delete</button></form>
        <form action="{action}" method="post">
          <input type="hidden" name="action" value="delete">
          <input type="hidden" name="book_id" value="{book_id}">
          <input type="hidden" name="confirmed" value="no">
          <button class="btn" style="background:#eee;color:#333">Cancel</button></form>
      </div>
    </div></div>'''
    return base(content, 'Delete book')


# ── ADD BOOK ──────────────────────────────────────────────────────────────────

@bp.route('/store-manager/add-book', methods=['GET', 'POST'])
def add_book():
    if not admin().is_authenticated():
        return redirect(p('/login'))
    if request.method == 'POST':
        fields, error = read_book_form()
        if error:
            set_flash('error', error)
            return redirect(p('/store-manager/add-book'))
        book = store().add_book(**fields)
        current_app.logger.info('Added book %d', book['id'])
        set_flash('success', f'Book &ldquo;{escape(book["title"])}&rdquo; added.')
        return redirect(p(LIST_ROUTE))

    return base(book_form(p('/store-manager/add-book'), 'Add book', 'Add Book'), 'Add book')


# ── EDIT BOOK ─────────────────────────────────────────────────────────────────

@bp.route('/store-manager/edit-book/<int:book_id>', methods=['GET', 'POST'])
def edit_book(book_id):
    if not admin().is_authenticated():
        return redirect(p('/login'))
    book = store().get_book(book_id)
    if book is None:
        set_flash('error', 'Book not found.')
        return redirect(p(LIST_ROUTE))
    if request.method == 'POST':
        fields, error = read_book_form()
        if error:
            set_flash('error', error)
            return redirect(p(f'/store-manager/edit-book/{book_id}'))
        book = store().update_book(book_id, **fields)
        current_app.logger.info('Updated book %d', book_id)
        set_flash('success', f'Book &ldquo;{escape(book["title"])}&rdquo; updated.')
        return redirect(p(LIST_ROUTE))

    action = p(f'/store-manager/edit-book/{book_id}')
    return base(book_form(action, 'Edit book', 'Save Changes', book), 'Edit book')


# ── APP ───────────────────────────────────────────────────────────────────────

def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    if app.config['URL_PREFIX']:
        app.wsgi_app = PrefixMiddleware(app.wsgi_app, app.config['URL_PREFIX'])

    app.extensions['bookstore']  = BookStore(app.config['BOOKS_FILE'])
    app.extensions['book_views'] = ViewRegistry(app.config['MAX_VIEWS'])
    app.register_blueprint(bp)
    return app


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='BookStore back office')
    parser.add_argument('--port', type=int, default=Config.PORT)
    parser.add_argument('--host', default=Config.HOST)
    parser.add_argument('--debug', action='store_true', default=Config.DEBUG)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app = create_app()

    print(f'\nBookStore back office on http://{args.host}:{args.port}{Config.URL_PREFIX}/')
    print(f'Books file: {Config.BOOKS_FILE}\n')
    app.run(host=args.host, port=args.port, debug=args.debug)
