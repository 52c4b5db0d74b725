import os
from pony.orm import Database, Optional, Required, Json, composite_key
from datetime import datetime, timezone

"""PonyORM models and initialization.

Defines the Document entity that backs the key-value/document store used by
the recency cache, the achievement engine and the collection helpers. The
init_db helper binds to Postgres when configured and otherwise to a local
sqlite file.
"""

db = Database()


class Document(db.Entity):
    # collection path, e.g. 'trainerStats' or 'recentSearches'
    collection_path = Required(str)
    # owner key inside the collection (typically the user id)
    doc_key = Required(str)
    body = Optional(Json)
    # Bumped on every write. Pony's optimistic check compares the value read
    # in a db_session against the row at commit time, so a stale
    # read-modify-write fails and can be retried.
    version = Optional(int, default=0)
    # Naive UTC. sqlite returns naive datetimes, and PonyORM raises
    # UnrepeatableReadError when an in-memory aware value meets a naive one.
    updated_at = Optional(datetime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    composite_key(collection_path, doc_key)


def init_db(path=None, create_tables=True):
    # Idempotent: a second call in the same process only makes sure the
    # mapping exists.
    if getattr(db, 'provider', None) is not None:
        if getattr(db, 'schema', None) is None:
            db.generate_mapping(create_tables=create_tables)
        return db

    # Priority 1: DATABASE_URL (Postgres DSN)
    database_url = os.environ.get('DATABASE_URL')
    if database_url:
        try:
            db.bind(provider='postgres', dsn=database_url)
        except Exception:
            # if binding fails, continue to sqlite fallback below
            database_url = None

    # Priority 2: explicit PG env vars (PGHOST/PGPORT/PGUSER/PGPASSWORD/PGDATABASE)
    if not database_url:
        pg_host = os.environ.get('PGHOST')
        pg_db = os.environ.get('PGDATABASE')
        if pg_host and pg_db:
            pg_port = os.environ.get('PGPORT', '5432')
            pg_user = os.environ.get('PGUSER', os.environ.get('POSTGRES_USER', 'postgres'))
            pg_password = os.environ.get('PGPASSWORD', os.environ.get('POSTGRES_PASSWORD', ''))
            dsn = f"postgresql://{pg_user}:{pg_password}@{pg_host}:{pg_port}/{pg_db}"
            try:
                db.bind(provider='postgres', dsn=dsn)
            except Exception:
                pass

    # Priority 3: sqlite
    if getattr(db, 'provider', None) is None:
        repo_root = os.path.dirname(os.path.abspath(__file__))
        requested_path = path or os.environ.get('DATABASE_FILE') or os.path.join(repo_root, 'db.sqlite')
        # sqlite ':memory:' gives every connection its own database, so the
        # test client and the test body would not see each other's rows. Map
        # it to one shared file under .run/ instead.
        if requested_path == ':memory:':
            shared_dir = os.path.join(repo_root, '.run')
            os.makedirs(shared_dir, exist_ok=True)
            requested_path = os.path.join(shared_dir, 'pytest_db.sqlite')

        parent = os.path.dirname(requested_path)
        if parent and not os.path.exists(parent):
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as e:
                raise RuntimeError(f"Unable to prepare sqlite database directory {parent}: {e}")
        db.bind('sqlite', filename=requested_path, create_db=True)

    db.generate_mapping(create_tables=create_tables)
    return db
