"""Favorites and caught-Pokemon storage for a user.

Favorites are a per-user list unique by Pokemon id, in the order they were
added. Caught records keep one row per catch (the same Pokemon can be caught
more than once) and are listed newest first.

Writes raise PersistenceFailure so the caller can tell the user the action
did not happen. Reads degrade to empty results.
"""

import logging
import uuid
from datetime import datetime, timezone

from errors import PersistenceFailure, ValidationFailure

logger = logging.getLogger('poketrainer.collection')

FAVORITES_COLLECTION = 'favorites'
STORAGE_COLLECTION = 'pokemonStorage'


def _pokemon_id(value):
    # ids arrive from JSON bodies; "25" and 25 must name the same Pokemon
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise ValidationFailure('Pokemon id must be an integer')


def _summary(pokemon):
    sprites = pokemon.get('sprites') or {}
    return {
        'id': _pokemon_id(pokemon['id']),
        'name': pokemon['name'],
        'sprite': sprites.get('front_default') or pokemon.get('sprite') or '',
    }


def _require_user(user):
    if not user:
        raise ValidationFailure('You must be logged in')


class Favorites:
    def __init__(self, store):
        self.store = store

    def list(self, user):
        if not user:
            return []
        try:
            doc = self.store.get(FAVORITES_COLLECTION, user) or {}
        except PersistenceFailure:
            logger.exception('Error loading favorites for user=%s', user)
            return []
        return list(doc.get('items') or [])

    def is_favorite(self, user, pokemon_id):
        return any(f.get('id') == pokemon_id for f in self.list(user))

    def add(self, user, pokemon):
        """Add a Pokemon; returns the new favorites total."""
        _require_user(user)
        item = _summary(pokemon)
        doc = self.store.get(FAVORITES_COLLECTION, user) or {}
        items = list(doc.get('items') or [])
        if not any(f.get('id') == item['id'] for f in items):
            items.append(item)
            self.store.set(FAVORITES_COLLECTION, user, {'items': items})
        return len(items)

    def remove(self, user, pokemon_id):
        """Remove a Pokemon by id; returns the new favorites total."""
        _require_user(user)
        pokemon_id = _pokemon_id(pokemon_id)
        doc = self.store.get(FAVORITES_COLLECTION, user) or {}
        items = list(doc.get('items') or [])
        kept = [f for f in items if f.get('id') != pokemon_id]
        if len(kept) != len(items):
            self.store.set(FAVORITES_COLLECTION, user, {'items': kept})
        return len(kept)


class CaughtStorage:
    def __init__(self, store):
        self.store = store

    def save(self, user, pokemon):
        """Store a caught Pokemon and return the new record."""
        _require_user(user)
        record = _summary(pokemon)
        record.update({
            'caught_id': uuid.uuid4().hex,
            'types': [t['type']['name'] for t in (pokemon.get('types') or []) if t.get('type')],
            'caught_at': datetime.now(timezone.utc).isoformat(),
        })
        doc = self.store.get(STORAGE_COLLECTION, user) or {}
        caught = list(doc.get('caught') or [])
        caught.append(record)
        self.store.set(STORAGE_COLLECTION, user, {'caught': caught})
        logger.info('Pokemon %s saved to storage for user=%s', record['name'], user)
        return record

    def list(self, user):
        if not user:
            return []
        try:
            doc = self.store.get(STORAGE_COLLECTION, user) or {}
        except PersistenceFailure:
            logger.exception('Error getting caught Pokemon for user=%s', user)
            return []
        caught = list(doc.get('caught') or [])
        caught.sort(key=lambda r: r.get('caught_at') or '', reverse=True)
        return caught

    def release(self, user, caught_id):
        """Remove one caught record; returns False if it did not exist."""
        _require_user(user)
        doc = self.store.get(STORAGE_COLLECTION, user) or {}
        caught = list(doc.get('caught') or [])
        kept = [r for r in caught if r.get('caught_id') != caught_id]
        if len(kept) == len(caught):
            return False
        self.store.set(STORAGE_COLLECTION, user, {'caught': kept})
        logger.info('Pokemon released from storage for user=%s', user)
        return True

    def stats(self, user):
        caught = self.list(user)
        return {
            'total': len(caught),
            'unique': len({r.get('id') for r in caught}),
            'pokemon': caught,
        }

    def count(self, user, pokemon_id):
        return sum(1 for r in self.list(user) if r.get('id') == pokemon_id)
