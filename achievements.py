"""Activity counters and badge awarding.

Every user has three counters in the `trainerStats` collection: searches and
catches are incremented by one per event, favorites is overwritten with the
absolute total the caller computed. After each event the badge catalog is
evaluated; badges already in the user's awarded set (`trainers` collection)
are never reported again, even if a counter later drops below the threshold.

Badges are a nice-to-have on top of the user's action. Store errors are
logged and returned as a failed, empty AwardResult instead of being raised.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from badges import BADGES, badge_progress, counter_value, get_badge_by_id
from errors import PersistenceFailure, ValidationFailure

logger = logging.getLogger('poketrainer.achievements')

STATS_COLLECTION = 'trainerStats'
TRAINERS_COLLECTION = 'trainers'


@dataclass
class ActivityCounters:
    searches: int = 0
    catches: int = 0
    favorites: int = 0

    @classmethod
    def from_document(cls, doc):
        doc = doc or {}
        return cls(
            searches=counter_value(doc, 'searches'),
            catches=counter_value(doc, 'catches'),
            favorites=counter_value(doc, 'favorites'),
        )

    @classmethod
    def coerce(cls, counters):
        if isinstance(counters, cls):
            return counters
        return cls(
            searches=counter_value(counters, 'searches'),
            catches=counter_value(counters, 'catches'),
            favorites=counter_value(counters, 'favorites'),
        )

    def to_dict(self):
        return {'searches': self.searches, 'catches': self.catches, 'favorites': self.favorites}


class AwardResult:
    """Badges newly earned by one call, plus whether the call degraded.

    Iterating, len() and truthiness act on `badges`, so callers that only
    care about "what to announce" can treat the result as a list. `failed`
    tells an empty result caused by a store error apart from "nothing new".
    """

    def __init__(self, badges=None, failed=False, skipped=False, error=None):
        self.badges = list(badges or [])
        self.failed = failed
        self.skipped = skipped
        self.error = error

    @classmethod
    def failure(cls, error):
        return cls(failed=True, error=str(error))

    @classmethod
    def skip(cls):
        return cls(skipped=True)

    def __iter__(self):
        return iter(self.badges)

    def __len__(self):
        return len(self.badges)

    def __bool__(self):
        return bool(self.badges)

    def __repr__(self):
        return f'AwardResult(badges={[b.id for b in self.badges]}, failed={self.failed}, skipped={self.skipped})'

    def to_dict(self):
        return {
            'awarded_badges': [b.to_dict() for b in self.badges],
            'badges_failed': self.failed,
        }


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _zero_counters(now):
    return {'searches': 0, 'catches': 0, 'favorites': 0, 'created_at': now}


class AchievementEngine:
    def __init__(self, store, badges=BADGES):
        self.store = store
        self.badges = tuple(badges)

    # -- catalog -----------------------------------------------------------

    def get_badge_by_id(self, badge_id):
        return get_badge_by_id(badge_id, self.badges)

    def get_all_badges(self):
        return list(self.badges)

    def progress(self, badge, counters):
        return badge_progress(badge, counters)

    # -- events ------------------------------------------------------------

    def report_search(self, user):
        return self._report(user, 'searches', 'last_search_at')

    def report_catch(self, user):
        return self._report(user, 'catches', 'last_catch_at')

    def report_favorites_total(self, user, total):
        """Set the favorites counter to `total` and evaluate badges.

        `total` is the caller's post-toggle favorites count, not a delta.
        """
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise ValidationFailure('Favorites total must be a non-negative integer')
        if not user:
            logger.debug('Skipping favorites report: no user id')
            return AwardResult.skip()
        now = _now_iso()
        try:
            doc = self.store.get(STATS_COLLECTION, user)
            if doc is None:
                doc = _zero_counters(now)
                doc.update({'favorites': total, 'last_favorite_at': now})
                doc = self.store.set(STATS_COLLECTION, user, doc)
            else:
                doc = self.store.set(STATS_COLLECTION, user, {'favorites': total, 'last_favorite_at': now}, merge=True)
        except PersistenceFailure as e:
            logger.exception('Error tracking favorites for user=%s', user)
            return AwardResult.failure(e)
        return self.evaluate_badges(user, ActivityCounters.from_document(doc))

    def _report(self, user, field, stamp_field):
        if not user:
            logger.debug('Skipping %s report: no user id', field)
            return AwardResult.skip()
        try:
            doc = self._increment(user, field, stamp_field)
        except PersistenceFailure as e:
            logger.exception('Error tracking %s for user=%s', field, user)
            return AwardResult.failure(e)
        counters = ActivityCounters.from_document(doc)
        logger.debug('User=%s %s=%d', user, field, getattr(counters, field))
        return self.evaluate_badges(user, counters)

    def _increment(self, user, field, stamp_field):
        now = _now_iso()
        increment = getattr(self.store, 'increment', None)
        if increment is not None:
            return increment(STATS_COLLECTION, user, field, 1, defaults=_zero_counters(now), extra={stamp_field: now})
        # Read-then-write: two concurrent reports for the same user can both
        # read N and both write N+1.
        doc = self.store.get(STATS_COLLECTION, user)
        if doc is None:
            doc = _zero_counters(now)
        doc[field] = counter_value(doc, field) + 1
        doc[stamp_field] = now
        self.store.set(STATS_COLLECTION, user, doc)
        return doc

    # -- badges ------------------------------------------------------------

    def _awarded_ids(self, user):
        doc = self.store.get(TRAINERS_COLLECTION, user) or {}
        return list(doc.get('badges') or [])

    def evaluate_badges(self, user, counters):
        """Award every not-yet-earned badge whose threshold `counters` meet.

        All new ids are persisted in one update. Returns only the badges
        earned by this call, in catalog order.
        """
        if not user:
            return AwardResult.skip()
        counters = ActivityCounters.coerce(counters)
        try:
            current = self._awarded_ids(user)
            awarded = set(current)
            earned = [
                b for b in self.badges
                if b.id not in awarded and counter_value(counters, b.requirement) >= b.threshold
            ]
            if not earned:
                return AwardResult()
            ids = [b.id for b in earned]
            add_to_set = getattr(self.store, 'add_to_set', None)
            if add_to_set is not None:
                # only ids this call actually added, so a concurrent
                # evaluation cannot announce the same badge twice
                added = set(add_to_set(TRAINERS_COLLECTION, user, 'badges', ids, stamp_field='awarded_at'))
            else:
                now = _now_iso()
                doc = self.store.get(TRAINERS_COLLECTION, user) or {}
                stamps = dict(doc.get('awarded_at') or {})
                stamps.update({i: now for i in ids})
                self.store.set(TRAINERS_COLLECTION, user, {'badges': current + ids, 'awarded_at': stamps}, merge=True)
                added = set(ids)
        except PersistenceFailure as e:
            logger.exception('Error checking badges for user=%s', user)
            return AwardResult.failure(e)
        newly = [b for b in earned if b.id in added]
        if newly:
            logger.info('Awarded badges %s to user=%s', [b.id for b in newly], user)
        return AwardResult(newly)

    # -- reads -------------------------------------------------------------

    def get_stats(self, user):
        """Current counters; zeros when nothing is stored or the read fails."""
        if not user:
            return ActivityCounters()
        try:
            return ActivityCounters.from_document(self.store.get(STATS_COLLECTION, user))
        except PersistenceFailure:
            logger.exception('Error getting stats for user=%s', user)
            return ActivityCounters()

    def earned_badges(self, user):
        if not user:
            return []
        try:
            ids = set(self._awarded_ids(user))
        except PersistenceFailure:
            logger.exception('Error reading badges for user=%s', user)
            return []
        return [b for b in self.badges if b.id in ids]
