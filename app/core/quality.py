"""
Compression tier to encoder quality mapping.

The scale is inverted on purpose: a higher compression tier keeps a lower
quality value, giving a smaller output.
"""
from typing import Optional

TIER_LOW = "low"
TIER_MEDIUM = "medium"
TIER_HIGH = "high"

DEFAULT_TIER = TIER_MEDIUM

QUALITY_BY_TIER = {
    TIER_LOW: 80,
    TIER_MEDIUM: 60,
    TIER_HIGH: 40,
}


def normalize_tier(tier: Optional[str]) -> str:
    """Return the tier that will actually be applied for a requested value.

    Matching is exact; any other value, including differently cased
    spellings, falls back to the default tier.
    """
    return tier if isinstance(tier, str) and tier in QUALITY_BY_TIER else DEFAULT_TIER


def resolve_quality(tier: Optional[str]) -> int:
    """
    Map a compression tier to an encoder quality value (0-100).

    Unrecognized or missing tiers resolve to the medium value.
    """
    return QUALITY_BY_TIER[normalize_tier(tier)]
