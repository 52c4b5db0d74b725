"""Per-user cache of recently looked-up Pokemon.

Each owner gets one document holding at most `capacity` entries, most
recent first. Recording an entry that is already present moves it to the
front. The cache is a convenience: store errors are logged and turned into
empty results, never raised to the search flow.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from errors import PersistenceFailure, ValidationFailure

logger = logging.getLogger('poketrainer.cache')

CACHE_COLLECTION = 'recentSearches'
DEFAULT_CAPACITY = 10


@dataclass(frozen=True)
class CacheEntry:
    id: int
    name: str
    thumbnail_ref: Optional[str] = None

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'sprite': self.thumbnail_ref or ''}

    @classmethod
    def from_dict(cls, d):
        return cls(id=d['id'], name=d['name'], thumbnail_ref=(d.get('sprite') or None))

    @classmethod
    def from_catalog(cls, pokemon):
        """Reduce a catalog entity to the fields the cache keeps."""
        sprites = pokemon.get('sprites') or {}
        return cls(id=pokemon['id'], name=pokemon['name'], thumbnail_ref=(sprites.get('front_default') or None))


def _default_capacity():
    try:
        return int(os.environ.get('RECENT_CACHE_SIZE', DEFAULT_CAPACITY))
    except ValueError:
        return DEFAULT_CAPACITY


class RecencyCache:
    def __init__(self, store, capacity=None, collection=CACHE_COLLECTION):
        if capacity is None:
            capacity = _default_capacity()
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValidationFailure('Cache capacity must be a positive integer')
        self.store = store
        self.capacity = capacity
        self.collection = collection

    def _load(self, owner):
        doc = self.store.get(self.collection, owner) or {}
        stored = doc.get('entries') or []
        if not isinstance(stored, list):
            logger.warning('Ignoring malformed cache for owner=%s: %r', owner, stored)
            return []
        entries = []
        for raw in stored:
            try:
                entries.append(CacheEntry.from_dict(raw))
            except (KeyError, TypeError, AttributeError):
                logger.warning('Skipping malformed cache entry for owner=%s: %r', owner, raw)
        return entries

    def record(self, owner, entry):
        """Move `entry` to the front of the owner's list and persist it.

        Returns the updated list, or [] when the owner is missing or the
        store fails.
        """
        if not owner:
            logger.warning('Cannot save to cache: owner id is missing')
            return []
        try:
            entries = [e for e in self._load(owner) if e.id != entry.id]
            entries.insert(0, entry)
            entries = entries[:self.capacity]
            self.store.set(self.collection, owner, {'entries': [e.to_dict() for e in entries]})
        except PersistenceFailure:
            logger.exception('Error saving entry id=%s to cache for owner=%s', getattr(entry, 'id', None), owner)
            return []
        logger.debug('Cached entry id=%s for owner=%s (size=%d)', entry.id, owner, len(entries))
        return entries

    def list(self, owner):
        if not owner:
            return []
        try:
            return self._load(owner)
        except PersistenceFailure:
            logger.exception('Error reading cache for owner=%s', owner)
            return []

    def clear(self, owner):
        if not owner:
            return
        try:
            self.store.delete(self.collection, owner)
        except PersistenceFailure:
            logger.exception('Error clearing cache for owner=%s', owner)

    def clear_all(self):
        try:
            removed = self.store.delete_all(self.collection)
            logger.info('Cleared %d recent-search caches', removed)
        except PersistenceFailure:
            logger.exception('Error clearing all recent-search caches')
