import os
import sys
import pytest

# Prepend repository root to sys.path so tests import local modules before stdlib
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from errors import PersistenceFailure


@pytest.fixture(scope='session', autouse=True)
def ensure_clean_test_db():
    """Point the store at a throwaway sqlite file for the whole session.

    The file lives under .run/ and is removed before and after the run so
    every session starts from an empty database.
    """
    run_dir = os.path.join(ROOT, '.run')
    os.makedirs(run_dir, exist_ok=True)
    db_file = os.path.join(run_dir, 'pytest_db.sqlite')

    os.environ.setdefault('DATABASE_FILE', db_file)

    if os.path.exists(db_file):
        try:
            os.remove(db_file)
        except OSError:
            pass

    yield

    try:
        if os.path.exists(db_file):
            os.remove(db_file)
    except OSError:
        pass


@pytest.fixture
def store():
    """A DocumentStore over an emptied database."""
    from pony.orm import db_session
    from models import Document, init_db
    from store import DocumentStore

    init_db()
    with db_session:
        Document.select().delete(bulk=True)
    return DocumentStore()


class BrokenStore:
    """Store whose every call fails, as when the database is unreachable."""

    def _fail(self, *a, **k):
        raise PersistenceFailure('store unavailable')

    get = set = update = increment = add_to_set = delete = delete_all = keys = _fail


class DictStore:
    """Minimal get/set/delete store without the atomic primitives."""

    def __init__(self):
        self.docs = {}

    def get(self, path, key):
        doc = self.docs.get((path, key))
        return dict(doc) if doc is not None else None

    def set(self, path, key, document, merge=False):
        body = dict(self.docs.get((path, key)) or {}) if merge else {}
        body.update(document)
        self.docs[(path, key)] = body
        return dict(body)

    def delete(self, path, key):
        return self.docs.pop((path, key), None) is not None

    def delete_all(self, path):
        keys = [k for k in self.docs if k[0] == path]
        for k in keys:
            del self.docs[k]
        return len(keys)


@pytest.fixture
def broken_store():
    return BrokenStore()


@pytest.fixture
def dict_store():
    return DictStore()
