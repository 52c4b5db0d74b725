"""Flask JSON API for the Pokemon trainer app.

This module defines the HTTP routes for (mock) login, searching the catalog
(with recent-search caching, "did you mean" suggestions and search badges),
random catches, favorites, caught storage, trainer profiles and the badge
overview.

The mobile client renders everything; these routes only wire the catalog
client, the document store, the recency cache and the achievement engine
together. The current user is the `username` stored in the Flask session.
"""

from flask import Flask, jsonify, request, session, redirect, url_for
import os
from types import SimpleNamespace
from dotenv import load_dotenv
from models import init_db
from store import DocumentStore
from cache import CacheEntry, RecencyCache
from achievements import AchievementEngine
from badges import BADGES
from catalog import CatalogClient
from collection import CaughtStorage, Favorites
from trainers import TrainerProfiles
from corpus import load_corpus
from suggestions import suggest
from errors import CatalogError, NetworkUnavailable, NotFound, PersistenceFailure, ValidationFailure

# load .env if present
load_dotenv()

import logging

# named logger for the application
logger = logging.getLogger('poketrainer')


def _configure_logging():
    # Allow explicit override via environment variable LOG_LEVEL or POKETRAINER_LOG_LEVEL
    env_level = os.environ.get('LOG_LEVEL') or os.environ.get('POKETRAINER_LOG_LEVEL')
    is_dev = (os.environ.get('FLASK_ENV') == 'development') or (os.environ.get('FLASK_DEBUG') == '1')
    if env_level:
        requested = getattr(logging, env_level.strip().upper(), None)
        if not isinstance(requested, int):
            requested = logging.INFO
    else:
        requested = logging.DEBUG if is_dev else logging.INFO

    # Never allow DEBUG logging in production.
    suppressed_debug = False
    if not is_dev and requested == logging.DEBUG:
        requested = logging.INFO
        suppressed_debug = True
    if not logger.handlers:
        ch = logging.StreamHandler()
        ch.setLevel(requested)
        fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s')
        ch.setFormatter(fmt)
        logger.addHandler(ch)
    logger.setLevel(requested)
    if suppressed_debug:
        logger.warning('DEBUG logging was requested via LOG_LEVEL but suppressed because FLASK_ENV is not development')


def get_current_user():
    """Return a lightweight object with .username from the session or None."""
    username = session.get('username')
    if not username:
        return None
    return SimpleNamespace(username=username)


def json_error(message, code=400, **extra):
    body = {'error': message}
    body.update(extra)
    return jsonify(body), code


app = Flask(__name__)
app.secret_key = os.environ.get('SECRET_KEY', os.urandom(24))

is_dev = (os.environ.get('FLASK_ENV') == 'development') or (os.environ.get('FLASK_DEBUG') == '1')
app.config.update({
    'SESSION_COOKIE_SECURE': not is_dev,
    'SESSION_COOKIE_HTTPONLY': True,
    'SESSION_COOKIE_SAMESITE': 'Lax',
})

_configure_logging()

# Shared collaborators. The badge catalog and the name corpus are immutable
# and handed to the components that read them.
store = DocumentStore()
recent_cache = RecencyCache(store)
engine = AchievementEngine(store, badges=BADGES)
catalog_client = CatalogClient()
favorites = Favorites(store)
caught_storage = CaughtStorage(store)
trainer_profiles = TrainerProfiles(store)
NAME_CORPUS = load_corpus()


@app.errorhandler(ValidationFailure)
def _validation_failure(e):
    return json_error(str(e), 400)


@app.errorhandler(PersistenceFailure)
def _persistence_failure(e):
    logger.error('Store failure during %s: %s', request.path, e)
    return json_error('storage-unavailable', 503)


@app.route('/')
def index():
    return redirect(url_for('health'))


@app.route('/health')
def health():
    return jsonify({'status': 'ok'}), 200


@app.route('/login', methods=['GET', 'POST'])
def login():
    # Mock login for tests/development: ?user=name when ALLOW_MOCK_LOGIN=1.
    user = request.args.get('user') or (request.form.get('user') if request.form else None)
    j = request.get_json(silent=True) or {}
    if not user and isinstance(j, dict):
        user = j.get('user')

    if user and os.environ.get('ALLOW_MOCK_LOGIN') == '1':
        session['username'] = user
        return jsonify({'ok': True}), 200

    if 'username' in session:
        return jsonify({'username': session['username']}), 200
    return json_error('not logged in', 401)


@app.route('/logout')
def logout():
    session.clear()
    return redirect(url_for('index'))


@app.route('/search', methods=['POST'])
def search():
    data = request.get_json(silent=True) or {}
    term = str(data.get('term') or '').strip()
    if not term:
        return json_error('Please enter a Pokemon name or ID', 400)
    try:
        pokemon = catalog_client.fetch_by_name_or_id(term)
    except NotFound as e:
        suggestions = suggest(term, NAME_CORPUS, 5)
        logger.debug('Search miss term=%r suggestions=%s', term, suggestions)
        return json_error(str(e), 404, suggestions=suggestions)
    except NetworkUnavailable as e:
        return json_error(str(e), 503, retry=True)
    except CatalogError as e:
        logger.error('Catalog error for term=%r: %s', term, e)
        return json_error(str(e), 502)

    resp = {'pokemon': pokemon, 'recent': [], 'awarded_badges': []}
    u = get_current_user()
    if u:
        # cache and badge bookkeeping never block the search result
        entries = recent_cache.record(u.username, CacheEntry.from_catalog(pokemon))
        resp['recent'] = [e.to_dict() for e in entries]
        resp.update(engine.report_search(u.username).to_dict())
    return jsonify(resp)


@app.route('/suggest', methods=['POST'])
def suggest_names():
    data = request.get_json(silent=True) or {}
    try:
        limit = int(data.get('limit', 5))
    except (TypeError, ValueError):
        return json_error('invalid limit', 400)
    return jsonify({'suggestions': suggest(data.get('term') or '', NAME_CORPUS, limit)})


@app.route('/recent', methods=['GET', 'DELETE'])
def recent():
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    if request.method == 'DELETE':
        recent_cache.clear(u.username)
        return jsonify({'ok': True})
    return jsonify({'recent': [e.to_dict() for e in recent_cache.list(u.username)]})


@app.route('/catch', methods=['POST'])
def catch():
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    try:
        pokemon = catalog_client.fetch_random()
    except NotFound as e:
        return json_error(str(e), 404)
    except NetworkUnavailable as e:
        return json_error(str(e), 503, retry=True)
    except CatalogError as e:
        return json_error(str(e), 502)

    record = caught_storage.save(u.username, pokemon)
    recent_cache.record(u.username, CacheEntry.from_catalog(pokemon))
    resp = {
        'pokemon': pokemon,
        'caught': record,
        'pokemon_caught': trainer_profiles.increment_caught(u.username),
    }
    resp.update(engine.report_catch(u.username).to_dict())
    return jsonify(resp)


@app.route('/storage')
def storage():
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    return jsonify(caught_storage.stats(u.username))


@app.route('/storage/<caught_id>', methods=['DELETE'])
def release(caught_id):
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    if not caught_storage.release(u.username, caught_id):
        return json_error('caught pokemon not found', 404)
    return jsonify({'ok': True})


@app.route('/favorites', methods=['GET', 'POST'])
def favorites_list():
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    if request.method == 'GET':
        return jsonify({'favorites': favorites.list(u.username)})
    data = request.get_json(silent=True) or {}
    pokemon = data.get('pokemon')
    if not isinstance(pokemon, dict) or 'id' not in pokemon or 'name' not in pokemon:
        return json_error('pokemon with id and name required', 400)
    total = favorites.add(u.username, pokemon)
    resp = {'total': total}
    resp.update(engine.report_favorites_total(u.username, total).to_dict())
    return jsonify(resp)


@app.route('/favorites/<int:pokemon_id>', methods=['DELETE'])
def favorites_remove(pokemon_id):
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    total = favorites.remove(u.username, pokemon_id)
    resp = {'total': total}
    resp.update(engine.report_favorites_total(u.username, total).to_dict())
    return jsonify(resp)


@app.route('/api/badges')
def api_badges():
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    stats = engine.get_stats(u.username)
    earned = engine.earned_badges(u.username)
    progress = {b.id: engine.progress(b, stats) for b in engine.get_all_badges()}
    return jsonify({
        'badges': [b.id for b in earned],
        'catalog': [b.to_dict() for b in engine.get_all_badges()],
        'progress': progress,
        'stats': stats.to_dict(),
    })


@app.route('/trainer', methods=['GET', 'POST', 'PATCH'])
def trainer():
    u = get_current_user()
    if not u:
        return json_error('not logged in', 401)
    if request.method == 'GET':
        profile = trainer_profiles.get(u.username)
        if profile is None:
            return json_error('no trainer profile', 404)
        return jsonify({'trainer': profile})
    data = request.get_json(silent=True) or {}
    if request.method == 'POST':
        if trainer_profiles.exists(u.username):
            return json_error('Trainer profile already exists', 409)
        return jsonify({'trainer': trainer_profiles.create(u.username, data)}), 201
    profile = trainer_profiles.update(u.username, data)
    if profile is None:
        return json_error('no trainer profile', 404)
    return jsonify({'trainer': profile})


if __name__ == '__main__':
    # Initialize DB for development runs
    init_db()
    host = os.environ.get('FLASK_HOST') or os.environ.get('HOST') or '127.0.0.1'
    port = int(os.environ.get('FLASK_PORT') or os.environ.get('PORT') or 5000)
    debug = os.environ.get('FLASK_DEBUG', '1')
    app.run(host=host, port=port, debug=(debug == '1'))
