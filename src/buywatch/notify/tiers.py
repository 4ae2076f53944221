from decimal import Decimal

from buywatch.domain.models import Tier

# Ascending by min_usd; each lower bound belongs to its own tier.
DEFAULT_TIERS: tuple[Tier, ...] = (
    Tier(label="Shrimp", emoji="🦐", image="buy.jpg", min_usd=Decimal("0")),
    Tier(label="Fish", emoji="🐟", image="buy.jpg", min_usd=Decimal("50")),
    Tier(label="Dolphin", emoji="🐬", image="buy.jpg", min_usd=Decimal("200")),
    Tier(label="Whale", emoji="🐋", image="buy.jpg", min_usd=Decimal("500")),
)


def tier_for(usd: Decimal, tiers: tuple[Tier, ...] = DEFAULT_TIERS) -> Tier:
    """Highest tier whose threshold is <= usd."""
    chosen = tiers[0]
    for tier in tiers:
        if usd >= tier.min_usd:
            chosen = tier
    return chosen
