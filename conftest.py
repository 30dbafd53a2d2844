"""
Shared fixtures for the simulator tests.
"""
import pytest

from rugsim.config import SimConfig
from rugsim.core.asset import Asset, AssetTier


class ScriptedRNG:
    """
    Deterministic stand-in for SeededRNG.

    normal() is always 0, uniform() returns the low end, and chance()
    returns `rug` (or raises if `forbid_chance` is set).
    """

    def __init__(self, rug: bool = False, forbid_chance: bool = False):
        self.rug = rug
        self.forbid_chance = forbid_chance
        self.chance_calls = 0

    def random(self) -> float:
        return 0.5

    def uniform(self, low, high):
        return low

    def normal(self, mean=0.0, std=1.0):
        return mean

    def chance(self, probability):
        if self.forbid_chance:
            raise AssertionError("chance() should not have been called")
        self.chance_calls += 1
        return self.rug

    def integers(self, low, high):
        return low

    def choice(self, items):
        return items[0]


def build_asset(**overrides) -> Asset:
    fields = dict(
        id='coin',
        symbol='COIN',
        name='Coin',
        tier=AssetTier.BASE,
        base_price=1.0,
        base_volatility=0.0,
        liquidity_usd=100_000_000,
        dev_tokens_pct=0.0,
        audit_score=1.0,
        social_hype=0.5,
    )
    fields.update(overrides)
    return Asset(**fields)


def build_sketchy(**overrides) -> Asset:
    fields = dict(
        id='rekt',
        symbol='REKT',
        name='RektFinance',
        dev_tokens_pct=90.0,
        audit_score=0.0,
        liquidity_usd=50_000,
        social_hype=1.0,
    )
    fields.update(overrides)
    return build_asset(**fields)


@pytest.fixture
def scripted_rng():
    return ScriptedRNG


@pytest.fixture
def make_asset():
    return build_asset


@pytest.fixture
def make_sketchy():
    return build_sketchy


@pytest.fixture
def quiet_config():
    """No daily news, launches or market events, so ticks only do what a test asks."""
    return SimConfig(ticks_per_day=24, daily_news=False, coin_launches=False, market_events=False)
