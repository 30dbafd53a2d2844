"""
Coin Launches - New meme coins appearing mid-game.

Almost every launch is a sketchy, high-hype, thinly traded coin.
"""
import re
from typing import Iterable

from .asset import Asset, AssetTier

PREFIXES = ['Moon', 'Doge', 'Pepe', 'Shib', 'Floki', 'Elon', 'Wojak', 'Chad', 'Based', 'Giga']
SUFFIXES = ['Coin', 'Token', 'Inu', 'Finance', 'Swap', 'Protocol', 'DAO', 'Chain', 'Moon', 'Rocket']

BASE_LAUNCH_CHANCE = 0.15
MIN_DAYS_BETWEEN_LAUNCHES = 3
STALE_AFTER_DAYS = 5
STALE_MULTIPLIER = 1.5

_LAUNCH_ID = re.compile(r'^new_(\d+)_')


def generate_new_coin(day: int, rng) -> Asset:
    prefix = rng.choice(PREFIXES)
    suffix = rng.choice(SUFFIXES)
    symbol = (prefix[:3] + suffix[:3]).upper()
    base_price = rng.uniform(0.0001, 0.01)

    return Asset(
        id=f"new_{day}_{symbol.lower()}",
        symbol=symbol,
        name=f"{prefix}{suffix}",
        tier=AssetTier.BASE,
        base_price=base_price,
        price=base_price,
        liquidity_usd=rng.uniform(50_000, 500_000),
        dev_tokens_pct=rng.uniform(30, 70),
        audit_score=rng.uniform(0.1, 0.4),
        social_hype=rng.uniform(0.6, 0.95),
        base_volatility=rng.uniform(0.08, 0.15),
        gov_favor_score=0.1,
        launched_days_ago=0,
    )


def days_since_last_launch(assets: Iterable[Asset], day: int) -> int:
    """Days since the newest launched coin; seed coins count as day 0."""
    last = 0
    for asset in assets:
        match = _LAUNCH_ID.match(asset.id)
        if match:
            last = max(last, int(match.group(1)))
    return day - last


def should_launch_coin(days_since_last: int, rng) -> bool:
    if days_since_last < MIN_DAYS_BETWEEN_LAUNCHES:
        return False
    chance = BASE_LAUNCH_CHANCE
    if days_since_last > STALE_AFTER_DAYS:
        chance *= STALE_MULTIPLIER
    return rng.chance(chance)
