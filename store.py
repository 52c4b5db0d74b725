"""Key-value/document store bound to PonyORM.

Documents are addressed by (collection path, key); the key is the owner id
so every user's data lives in its own documents. Every failure is re-raised
as `errors.PersistenceFailure` so callers only need to handle one type.

`increment` and `add_to_set` are the atomic primitives. They run in a
`db_session(retry=N)`: each write bumps the document's `version`, so if
another writer commits between our read and our commit, Pony's optimistic
check fails the transaction and it is replayed against fresh data.
"""

import json
import logging
import os
from datetime import datetime, timezone

from pony.orm import db_session, select

from errors import PersistenceFailure
from models import Document, init_db

logger = logging.getLogger('poketrainer.store')


def _now():
    # naive UTC, matching Document.updated_at
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _plain(value):
    """Deep copy as plain JSON types (Pony hands out tracked dicts/lists)."""
    return json.loads(json.dumps(value))


class DocumentStore:
    def __init__(self, retries=None):
        if retries is None:
            try:
                retries = int(os.environ.get('STORE_RETRIES', '3'))
            except ValueError:
                retries = 3
        self.retries = max(1, retries)
        self._ready = False
        # retry is only accepted by db_session when used as a decorator
        self._increment_tx = db_session(retry=self.retries)(self._increment)
        self._add_to_set_tx = db_session(retry=self.retries)(self._add_to_set)

    def _ensure_db(self):
        if not self._ready:
            init_db()
            self._ready = True

    def _call(self, op, path, key, fn, *args):
        try:
            self._ensure_db()
            return fn(*args)
        except PersistenceFailure:
            raise
        except Exception as e:
            logger.debug('Store %s failed for %s/%s: %s', op, path, key, e)
            raise PersistenceFailure(f'{op} {path}/{key} failed: {e}') from e

    # -- reads -------------------------------------------------------------

    def get(self, path, key):
        """Return a copy of the stored document, or None when absent."""
        def _get():
            with db_session:
                doc = Document.get(collection_path=path, doc_key=str(key))
                if doc is None:
                    return None
                return _plain(doc.body or {})
        return self._call('get', path, key, _get)

    def keys(self, path):
        def _keys():
            with db_session:
                return [d.doc_key for d in select(d for d in Document if d.collection_path == path)]
        return self._call('keys', path, '*', _keys)

    # -- writes ------------------------------------------------------------

    def set(self, path, key, document, merge=False):
        """Write `document`; with merge=True only the given fields change.

        Returns the stored document.
        """
        def _set():
            with db_session:
                doc = Document.get(collection_path=path, doc_key=str(key))
                if doc is None:
                    body = _plain(dict(document))
                    Document(collection_path=path, doc_key=str(key), body=body, version=1, updated_at=_now())
                    return body
                if merge:
                    body = _plain(doc.body or {})
                    body.update(_plain(dict(document)))
                else:
                    body = _plain(dict(document))
                doc.body = body
                doc.version = (doc.version or 0) + 1
                doc.updated_at = _now()
                return _plain(body)
        return self._call('set', path, key, _set)

    def update(self, path, key, partial):
        """Merge `partial` into an existing document; fails when absent."""
        def _update():
            with db_session:
                doc = Document.get(collection_path=path, doc_key=str(key))
                if doc is None:
                    raise PersistenceFailure(f'update {path}/{key} failed: no such document')
                body = _plain(doc.body or {})
                body.update(_plain(dict(partial)))
                doc.body = body
                doc.version = (doc.version or 0) + 1
                doc.updated_at = _now()
                return _plain(body)
        return self._call('update', path, key, _update)

    def increment(self, path, key, field, delta=1, defaults=None, extra=None):
        """Atomically add `delta` to an integer field and return the document.

        A missing document is created from `defaults` first. `extra` fields
        (e.g. a last-activity timestamp) are written in the same transaction.
        """
        return self._call('increment', path, key, self._increment_tx, path, key, field, delta, defaults, extra)

    def _increment(self, path, key, field, delta, defaults, extra):
        doc = Document.get(collection_path=path, doc_key=str(key))
        if doc is None:
            body = _plain(dict(defaults or {}))
            body[field] = int(body.get(field) or 0) + delta
            body.update(extra or {})
            Document(collection_path=path, doc_key=str(key), body=body, version=1, updated_at=_now())
            return _plain(body)
        body = _plain(doc.body or {})
        for k, v in (defaults or {}).items():
            body.setdefault(k, v)
        body[field] = int(body.get(field) or 0) + delta
        body.update(extra or {})
        doc.body = body
        doc.version = (doc.version or 0) + 1
        doc.updated_at = _now()
        return _plain(body)

    def add_to_set(self, path, key, field, values, stamp_field=None):
        """Atomically append values missing from the list at `field`.

        Returns the values that were actually added, in the given order. When
        `stamp_field` is set, the time each value was added is recorded under
        body[stamp_field][value].
        """
        return self._call('add_to_set', path, key, self._add_to_set_tx, path, key, field, list(values), stamp_field)

    def _add_to_set(self, path, key, field, values, stamp_field):
        doc = Document.get(collection_path=path, doc_key=str(key))
        body = _plain(doc.body or {}) if doc is not None else {}
        current = list(body.get(field) or [])
        added = []
        for v in values:
            if v not in current and v not in added:
                added.append(v)
        if not added:
            return []
        body[field] = current + added
        if stamp_field:
            stamps = dict(body.get(stamp_field) or {})
            ts = datetime.now(timezone.utc).isoformat()
            for v in added:
                stamps[str(v)] = ts
            body[stamp_field] = stamps
        if doc is None:
            Document(collection_path=path, doc_key=str(key), body=body, version=1, updated_at=_now())
        else:
            doc.body = body
            doc.version = (doc.version or 0) + 1
            doc.updated_at = _now()
        return added

    def delete(self, path, key):
        """Remove a document; returns True when something was deleted."""
        def _delete():
            with db_session:
                doc = Document.get(collection_path=path, doc_key=str(key))
                if doc is None:
                    return False
                doc.delete()
                return True
        return self._call('delete', path, key, _delete)

    def delete_all(self, path):
        """Remove every document in a collection; returns the count."""
        def _delete_all():
            with db_session:
                docs = list(select(d for d in Document if d.collection_path == path))
                for d in docs:
                    d.delete()
                return len(docs)
        return self._call('delete_all', path, '*', _delete_all)
