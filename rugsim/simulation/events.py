"""
Market Events - Exit scams, oracle hacks and whale buybacks.

Rolled once per tick after the rug pass, always in the same order so a
seed replays the same events:

    1. exit scams      per asset with a heavy dev bag; no warning first
    2. oracle hack     one draw for the whole market, one random victim
    3. whale buybacks  per asset with a deep pool

Only eligible assets consume random draws. Like the price engine, this
never touches the registry; it returns new asset values.

Usage:
    from rugsim.simulation import MarketEvents

    events = MarketEvents(config.events, config.price.min_price)
    roll = events.roll(registry.all(), rng, tick)
    registry.update_many(roll.updated_assets)
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..config import EventConfig
from ..core.asset import Asset, MIN_PRICE

logger = logging.getLogger(__name__)


class MarketEventKind(Enum):
    EXIT_SCAM = "exit_scam"
    ORACLE_HACK = "oracle_hack"
    WHALE_BUYBACK = "whale_buyback"


@dataclass
class MarketEvent:
    """One event and the price move it caused."""
    kind: MarketEventKind
    asset_id: str
    symbol: str
    old_price: float
    new_price: float

    @property
    def change_pct(self) -> float:
        if self.old_price <= 0:
            return 0.0
        return (self.new_price / self.old_price - 1) * 100

    @property
    def message(self) -> str:
        if self.kind == MarketEventKind.EXIT_SCAM:
            return f"EXIT SCAM: {self.symbol} devs vanished with all funds!"
        if self.kind == MarketEventKind.ORACLE_HACK:
            verb = "spiked" if self.change_pct > 0 else "crashed"
            return f"ORACLE HACK: {self.symbol} {verb} {abs(self.change_pct):.0f}%!"
        return f"WHALE ALERT: {self.symbol} pumped {self.change_pct:.0f}% from a buyback!"


@dataclass
class MarketEventRoll:
    """What one tick of events did."""
    tick: int
    updated_assets: Dict[str, Asset] = field(default_factory=dict)
    events: List[MarketEvent] = field(default_factory=list)
    scrutiny_delta: float = 0.0     # Every exit scam puts regulators on edge

    @property
    def exit_scams(self) -> List[str]:
        return [e.asset_id for e in self.events if e.kind == MarketEventKind.EXIT_SCAM]


class MarketEvents:

    def __init__(self, config: Optional[EventConfig] = None, min_price: float = MIN_PRICE):
        self.config = config or EventConfig()
        self.min_price = min_price

    def can_exit_scam(self, asset: Asset) -> bool:
        """Rug-able coins whose devs hold a big bag. The player's own token is excluded."""
        return (
            asset.can_rug
            and not asset.is_player_token
            and asset.dev_tokens_pct > self.config.exit_scam_min_dev_pct
        )

    def can_whale_buyback(self, asset: Asset) -> bool:
        return not asset.rugged and asset.liquidity_usd >= self.config.whale_min_liquidity_usd

    def roll(self, assets: Iterable[Asset], rng, tick: int) -> MarketEventRoll:
        """
        Roll this tick's events.

        Args:
            assets: Current asset values, in registry order
            rng: Seeded RNG
            tick: Tick being produced

        Returns:
            MarketEventRoll with changed assets, events and scrutiny added
        """
        c = self.config
        result = MarketEventRoll(tick=tick)
        current = {a.id: a for a in assets}

        # 1. Exit scams
        for asset in list(current.values()):
            if not self.can_exit_scam(asset) or not rng.chance(c.exit_scam_chance):
                continue
            new_price = max(self.min_price, asset.price * c.exit_scam_price_ratio)
            scammed = asset.repriced(
                tick,
                new_price,
                liquidity_usd=0.0,
                flagged=True,
                rugged=True,
                rugged_at_tick=tick,
            )
            self._record(result, current, MarketEventKind.EXIT_SCAM, asset, scammed)
            result.scrutiny_delta += rng.uniform(*c.exit_scam_scrutiny)

        # 2. Oracle hack
        if rng.chance(c.oracle_hack_chance):
            victims = [a for a in current.values() if not a.rugged]
            if victims:
                victim = rng.choice(victims)
                direction = 1 if rng.chance(0.5) else -1
                magnitude = rng.uniform(*c.oracle_hack_range)
                new_price = max(self.min_price, victim.price * (1 + direction * magnitude))
                self._record(
                    result, current, MarketEventKind.ORACLE_HACK, victim,
                    victim.repriced(tick, new_price),
                )

        # 3. Whale buybacks
        for asset in list(current.values()):
            if not self.can_whale_buyback(asset) or not rng.chance(c.whale_buyback_chance):
                continue
            new_price = asset.price * rng.uniform(*c.whale_multiplier_range)
            self._record(
                result, current, MarketEventKind.WHALE_BUYBACK, asset,
                asset.repriced(tick, new_price),
            )

        return result

    def _record(
        self,
        result: MarketEventRoll,
        current: Dict[str, Asset],
        kind: MarketEventKind,
        before: Asset,
        after: Asset,
    ):
        current[after.id] = after
        result.updated_assets[after.id] = after
        event = MarketEvent(kind, after.id, after.symbol, before.price, after.price)
        result.events.append(event)
        logger.warning(f"{event.message} (tick {result.tick})")
