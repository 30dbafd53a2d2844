"""
PRICE ENGINE
============

One pass per tick over every live asset:

    sigma   = base_volatility / sqrt(ticks_per_day) * dampener(liquidity) * amplifier(hype)
    drift   = hype_drift * (hype - 0.5) * sigma + sum(active shock drifts)
    r       = drift + sigma * z,   z ~ N(0, 1)
    price'  = max(min_price, price * exp(r))

Rugged assets are skipped and get no further candles. The first tick of a
day folds the previous day's intraday candles into one daily candle.

The engine does not touch the registry; it returns new asset values.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..config import PriceConfig
from ..core.asset import Asset, Candle, aggregate_candles
from ..signals.shocks import SentimentShock

logger = logging.getLogger(__name__)


@dataclass
class PriceTickResult:
    tick: int
    updated_assets: Dict[str, Asset] = field(default_factory=dict)
    new_candles: Dict[str, Candle] = field(default_factory=dict)

    def log_return(self, asset_id: str) -> float:
        candle = self.new_candles[asset_id]
        return math.log(candle.close / candle.open)


class PriceEngine:

    def __init__(self, config: Optional[PriceConfig] = None, ticks_per_day: int = 24):
        self.config = config or PriceConfig()
        self.ticks_per_day = ticks_per_day

    def liquidity_dampener(self, liquidity_usd: float) -> float:
        """1 for an empty pool, shrinking toward min_liquidity_dampener."""
        c = self.config
        raw = 1.0 / math.sqrt(1.0 + max(liquidity_usd, 0.0) / c.liquidity_reference_usd)
        return max(c.min_liquidity_dampener, raw)

    def hype_amplifier(self, social_hype: float) -> float:
        return self.config.hype_amp_base + self.config.hype_amp_slope * social_hype

    def effective_volatility(self, asset: Asset) -> float:
        """Per-tick sigma of log returns."""
        per_tick = asset.base_volatility / math.sqrt(self.ticks_per_day)
        return per_tick * self.liquidity_dampener(asset.liquidity_usd) * self.hype_amplifier(asset.social_hype)

    def advance_tick(
        self,
        assets: Iterable[Asset],
        shocks: Iterable[SentimentShock],
        rng,
        tick: int,
    ) -> PriceTickResult:
        """
        Compute next prices and candles for every live asset.

        Args:
            assets: Current asset values, in registry order
            shocks: Shocks that may be active at `tick`
            rng: Seeded RNG; one normal draw per live asset
            tick: Tick being produced

        Returns:
            PriceTickResult with updated assets and their new candles
        """
        result = PriceTickResult(tick=tick)

        drift_by_asset: Dict[str, float] = {}
        for shock in shocks:
            drift = shock.drift_at(tick)
            if drift:
                drift_by_asset[shock.asset_id] = drift_by_asset.get(shock.asset_id, 0.0) + drift

        new_day = (tick - 1) % self.ticks_per_day == 0

        for asset in assets:
            if asset.rugged:
                continue

            z = rng.normal(0.0, 1.0)
            sigma = self.effective_volatility(asset)
            hype_drift = self.config.hype_drift * (asset.social_hype - 0.5) * sigma
            log_return = hype_drift + drift_by_asset.get(asset.id, 0.0) + sigma * z

            old_price = asset.price
            new_price = max(self.config.min_price, old_price * math.exp(log_return))
            candle = Candle.from_move(tick, old_price, new_price)

            history = asset.history.copy()
            if new_day and history.intraday:
                history.daily.append(aggregate_candles(history.intraday))
                history.intraday = []
            history.intraday.append(candle)
            history.all_time.append(candle)
            if len(history.all_time) > self.config.max_candles:
                history.all_time = history.all_time[-self.config.max_candles:]

            age = asset.launched_days_ago + (1 if new_day and tick > 1 else 0)
            updated = asset.evolve(price=new_price, history=history, launched_days_ago=age)

            result.updated_assets[asset.id] = updated
            result.new_candles[asset.id] = candle

        return result


def price_path(results: List[PriceTickResult], asset_id: str) -> List[float]:
    """Closing prices of one asset across several passes."""
    return [r.new_candles[asset_id].close for r in results if asset_id in r.new_candles]
