"""Badge catalog and metadata.

Each badge is earned once, the first time one activity counter (searches,
catches or favorites) reaches the badge's threshold. The catalog is static:
it is built at import time, never mutated, and shared by every request.
Declaration order matters; newly earned badges are reported in this order.
"""

from dataclasses import dataclass

COUNTERS = ('searches', 'catches', 'favorites')


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    requirement: str
    threshold: int
    emoji: str = ''

    def __post_init__(self):
        if self.requirement not in COUNTERS:
            raise ValueError(f'unknown badge counter {self.requirement!r}')
        if self.threshold <= 0:
            raise ValueError('badge threshold must be positive')

    def to_dict(self):
        """Return a lightweight serializable dict for JSON APIs."""
        return {
            'id': self.id,
            'name': self.name,
            'emoji': self.emoji,
            'description': self.description,
            'requirement': self.requirement,
            'threshold': self.threshold,
        }


BADGES = (
    BadgeDefinition('boulder', 'Boulder Badge', 'Search 10 Pokémon', 'searches', 10, '🪨'),
    BadgeDefinition('water', 'Water Badge', 'Catch 5 random Pokémon', 'catches', 5, '💧'),
    BadgeDefinition('thunder', 'Thunder Badge', 'Add 3 Pokémon to favorites', 'favorites', 3, '⚡'),
    BadgeDefinition('rainbow', 'Rainbow Badge', 'Search 25 Pokémon', 'searches', 25, '🌈'),
    BadgeDefinition('soul', 'Soul Badge', 'Catch 10 random Pokémon', 'catches', 10, '👻'),
    BadgeDefinition('marsh', 'Marsh Badge', 'Add 10 Pokémon to favorites', 'favorites', 10, '🌿'),
    BadgeDefinition('volcano', 'Volcano Badge', 'Search 50 Pokémon', 'searches', 50, '🔥'),
    BadgeDefinition('earth', 'Earth Badge', 'Catch 25 random Pokémon', 'catches', 25, '🌍'),
)


def counter_value(counters, name):
    """Read a counter from a mapping or an object with counter attributes."""
    if hasattr(counters, 'get'):
        value = counters.get(name, 0)
    else:
        value = getattr(counters, name, 0)
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def get_badge_by_id(badge_id, badges=BADGES):
    return next((b for b in badges if b.id == badge_id), None)


def catalog(badges=BADGES):
    return list(badges)


def badge_progress(badge, counters):
    """Progress towards one badge for UI progress bars.

    Returns {current, required, percentage (0-100, capped), earned}.
    """
    current = counter_value(counters, badge.requirement)
    required = badge.threshold
    percentage = min(current * 100 / required, 100)
    return {
        'current': current,
        'required': required,
        'percentage': percentage,
        'earned': current >= required,
    }
