"""
Rug Risk Model - Score rug probability per asset and decide rug pulls.

Usage:
    from rugsim.core import RugModel
    from rugsim.config import RiskConfig

    model = RugModel(RiskConfig())
    p = model.rug_probability(asset)

    # Get readable risk reasons
    result = model.check_detailed(asset)
    print(result.reasons)

    # Per tick: flag, maybe rug
    evaluation = model.evaluate(asset, rng, tick)
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from scipy.special import expit  # sigmoid function

from ..config import RiskConfig
from .asset import Asset, MIN_PRICE

logger = logging.getLogger(__name__)


@dataclass
class RiskResult:
    """Result of scoring an asset."""
    probability: float
    score: float
    flagged: bool
    reasons: List[str]

    @property
    def is_sketchy(self) -> bool:
        return self.flagged or len(self.reasons) >= 2


@dataclass
class RugEvaluation:
    """Outcome of one tick's risk pass for one asset."""
    asset: Asset
    probability: float
    flag_changed: bool = False
    rugged: bool = False
    crash_ratio: Optional[float] = None


class RugModel:
    """
    Logistic rug-pull model.

    score = bias + w_dev * dev + w_hype * hype - w_audit * audit - w_liq * depth
    p     = max_rug_probability * expit(score)

    Probability rises strictly with dev share and hype and falls strictly
    with audit score and liquidity.
    """

    def __init__(self, config: Optional[RiskConfig] = None, min_price: float = MIN_PRICE):
        self.config = config or RiskConfig()
        self.min_price = min_price

    def score(self, asset: Asset) -> float:
        c = self.config
        depth = math.log10(1.0 + max(asset.liquidity_usd, 0.0) / 100_000)
        return (
            c.score_bias
            + c.dev_weight * (asset.dev_tokens_pct / 100)
            - c.audit_weight * asset.audit_score
            - c.liquidity_weight * depth
            + c.hype_weight * asset.social_hype
        )

    def rug_probability(self, asset: Asset) -> float:
        """Per-tick rug probability in [0, max_rug_probability]."""
        if not asset.can_rug:
            return 0.0
        return float(self.config.max_rug_probability * expit(self.score(asset)))

    def check_detailed(self, asset: Asset) -> RiskResult:
        """
        Detailed risk check with reasons.

        Returns:
            RiskResult with probability, flag state and reasons
        """
        reasons = []

        # 1. Dev wallet concentration
        if asset.dev_tokens_pct >= 40:
            reasons.append(f"dev holds {asset.dev_tokens_pct:.0f}% of supply")

        # 2. Audit
        if asset.audit_score < 0.4:
            reasons.append(f"audit score {asset.audit_score:.2f} < 0.40")

        # 3. Liquidity
        if asset.liquidity_usd < 500_000:
            reasons.append(f"liquidity ${asset.liquidity_usd:,.0f} < $500,000")

        # 4. Hype
        if asset.social_hype >= 0.8:
            reasons.append(f"hype {asset.social_hype:.2f} is euphoric")

        probability = self.rug_probability(asset)
        return RiskResult(
            probability=probability,
            score=self.score(asset),
            flagged=asset.can_rug and probability >= self.config.flag_threshold,
            reasons=reasons,
        )

    def evaluate(self, asset: Asset, rng, tick: int) -> RugEvaluation:
        """Update the flag and roll for a rug. Rugged assets pass through."""
        if not asset.can_rug:
            return RugEvaluation(asset=asset, probability=0.0)

        probability = self.rug_probability(asset)
        warned = asset.flagged          # Flag from the previous tick
        flagged = probability >= self.config.flag_threshold
        flag_changed = flagged != asset.flagged
        if flag_changed:
            asset = asset.evolve(flagged=flagged)
            if flagged:
                logger.info(f"{asset.symbol} flagged: rug risk {probability:.2%}/tick")

        # A rug needs a warning from an earlier tick that still stands
        if self.config.require_flag_before_rug and not (warned and flagged):
            return RugEvaluation(asset=asset, probability=probability, flag_changed=flag_changed)

        if not rng.chance(probability):
            return RugEvaluation(asset=asset, probability=probability, flag_changed=flag_changed)

        crash_ratio = rng.uniform(*self.config.crash_range)
        rugged = self.apply_rug(asset, rng, tick, crash_ratio)
        logger.warning(
            f"RUG PULL: {asset.symbol} at tick {tick} "
            f"(${asset.price:.6f} -> ${rugged.price:.6f})"
        )
        return RugEvaluation(
            asset=rugged,
            probability=probability,
            flag_changed=flag_changed,
            rugged=True,
            crash_ratio=crash_ratio,
        )

    def apply_rug(self, asset: Asset, rng, tick: int, crash_ratio: float) -> Asset:
        """Crash price and liquidity, then freeze the asset."""
        new_price = max(self.min_price, asset.price * crash_ratio)
        new_liquidity = asset.liquidity_usd * rng.uniform(*self.config.liquidity_crash_range)

        # The rug tick's candle absorbs the crash
        return asset.repriced(
            tick,
            new_price,
            liquidity_usd=new_liquidity,
            flagged=True,
            rugged=True,
            rugged_at_tick=tick,
        )

    def decay_audit(self, asset: Asset) -> Asset:
        """Audits go stale a little every day."""
        if asset.rugged or asset.audit_score <= 0:
            return asset
        return asset.evolve(audit_score=max(0.0, asset.audit_score - self.config.audit_decay_per_day))
