"""Trainer profiles.

A profile lives in the same `trainers/<user>` document as the awarded
badges, so profile writes always merge and never touch `badges` or
`awarded_at`. A document that only holds badges has no profile yet: a
profile exists once a trainer name has been registered.

Registration and updates raise ValidationFailure for bad input and
PersistenceFailure when the store fails. Reads degrade to None/False.
"""

import logging
from datetime import datetime, timezone

from achievements import TRAINERS_COLLECTION
from errors import PersistenceFailure, ValidationFailure

logger = logging.getLogger('poketrainer.trainers')

MIN_NAME_LENGTH = 3

REGIONS = (
    'Kanto', 'Johto', 'Hoenn', 'Sinnoh', 'Unova',
    'Kalos', 'Alola', 'Galar', 'Paldea',
)

AVATARS = ('male1', 'male2', 'female1', 'female2', 'neutral1', 'neutral2')

# fields a client may set; counters and badges are owned by the server
PROFILE_FIELDS = ('trainer_name', 'avatar', 'region')


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _require_user(user):
    if not user:
        raise ValidationFailure('You must be logged in')


def validate_profile(data, partial=False):
    """Return the cleaned profile fields from `data`.

    With partial=True only the fields present are checked, and at least one
    is required.
    """
    if not isinstance(data, dict):
        raise ValidationFailure('Trainer profile must be an object')
    cleaned = {}
    if not partial or 'trainer_name' in data:
        name = data.get('trainer_name')
        name = name.strip() if isinstance(name, str) else ''
        if not name:
            raise ValidationFailure('Please enter your trainer name')
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationFailure(f'Trainer name must be at least {MIN_NAME_LENGTH} characters')
        cleaned['trainer_name'] = name
    if not partial or 'avatar' in data:
        if data.get('avatar') not in AVATARS:
            raise ValidationFailure('Please select an avatar')
        cleaned['avatar'] = data['avatar']
    if not partial or 'region' in data:
        if data.get('region') not in REGIONS:
            raise ValidationFailure('Please select your home region')
        cleaned['region'] = data['region']
    if not cleaned:
        raise ValidationFailure(f'Nothing to update; expected one of {", ".join(PROFILE_FIELDS)}')
    return cleaned


class TrainerProfiles:
    def __init__(self, store):
        self.store = store

    def _load(self, user):
        doc = self.store.get(TRAINERS_COLLECTION, user) or {}
        if not doc.get('trainer_name'):
            return None
        profile = dict(doc)
        profile['id'] = user
        profile.setdefault('badges', [])
        profile.setdefault('pokemon_caught', 0)
        return profile

    def get(self, user):
        if not user:
            return None
        try:
            return self._load(user)
        except PersistenceFailure:
            logger.exception('Error getting trainer profile for user=%s', user)
            return None

    def exists(self, user):
        return self.get(user) is not None

    def create(self, user, data):
        """Register a profile and return it.

        Badges and the caught count already recorded for the user are kept.
        Raises ValidationFailure when a profile already exists.
        """
        _require_user(user)
        fields = validate_profile(data)
        doc = self.store.get(TRAINERS_COLLECTION, user) or {}
        if doc.get('trainer_name'):
            raise ValidationFailure('Trainer profile already exists')
        now = _now_iso()
        fields.update({'created_at': now, 'updated_at': now})
        if 'badges' not in doc:
            fields['badges'] = []
        if 'pokemon_caught' not in doc:
            fields['pokemon_caught'] = 0
        self.store.set(TRAINERS_COLLECTION, user, fields, merge=True)
        logger.info('Trainer profile created for user=%s', user)
        return self._load(user)

    def update(self, user, data):
        """Change some profile fields; returns the profile or None if absent."""
        _require_user(user)
        fields = validate_profile(data, partial=True)
        if self._load(user) is None:
            return None
        fields['updated_at'] = _now_iso()
        self.store.update(TRAINERS_COLLECTION, user, fields)
        return self._load(user)

    def increment_caught(self, user):
        """Bump pokemon_caught; returns the new count, or None on failure."""
        if not user:
            return None
        try:
            doc = self.store.increment(TRAINERS_COLLECTION, user, 'pokemon_caught', 1,
                                       extra={'updated_at': _now_iso()})
        except PersistenceFailure:
            logger.exception('Error incrementing pokemon caught for user=%s', user)
            return None
        return doc['pokemon_caught']
