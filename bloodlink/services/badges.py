from typing import NamedTuple, Optional, Sequence


class BadgeTier(NamedTuple):
    level: int
    name: str
    min_donations: int
    color: str
    icon: str


BADGE_LEVELS: tuple[BadgeTier, ...] = (
    BadgeTier(1, "Life Starter", 1, "#CD7F32", "🌱"),
    BadgeTier(2, "Life Saver", 3, "#C0C0C0", "💪"),
    BadgeTier(3, "Hero", 5, "#FFD700", "⭐"),
    BadgeTier(4, "Guardian", 10, "#E5E4E2", "🛡️"),
    BadgeTier(5, "Legend", 20, "#B9F2FF", "👑"),
)

# Donors below the first threshold
NEW_DONOR = BadgeTier(0, "New Donor", 0, "#9CA3AF", "🩸")


def resolve_badge(count: int, tiers: Sequence[BadgeTier] = BADGE_LEVELS) -> BadgeTier:
    """Return the badge tier earned with *count* verified donations.

    Tiers are checked from the highest threshold down; with duplicate
    thresholds the first one met in that order wins (``sorted`` is stable).
    """
    for tier in sorted(tiers, key=lambda t: t.min_donations, reverse=True):
        if count >= tier.min_donations:
            return tier
    return NEW_DONOR


def next_badge(count: int, tiers: Sequence[BadgeTier] = BADGE_LEVELS) -> Optional[BadgeTier]:
    """First tier not yet reached, or None at the top tier."""
    for tier in sorted(tiers, key=lambda t: t.min_donations):
        if tier.min_donations > count:
            return tier
    return None


def badge_to_dict(tier: BadgeTier) -> dict:
    return tier._asdict()
