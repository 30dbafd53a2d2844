"""
Simulation Configuration - All game parameters in one place.

Usage:
    from rugsim.config import SimConfig, DEFAULT_CONFIG

    config = SimConfig()
    print(config.risk.max_rug_probability)

    # Faster days for a headless run
    config = SimConfig.for_day_length(12)
"""
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple


@dataclass
class PriceConfig:
    """Price engine configuration."""

    min_price: float = 0.00001                  # Hard floor for live assets
    liquidity_reference_usd: float = 1_000_000.0
    min_liquidity_dampener: float = 0.2         # Deep pools never go fully still
    hype_amp_base: float = 0.8                  # sigma *= base + slope * hype
    hype_amp_slope: float = 0.6
    hype_drift: float = 0.5                     # Drift in sigmas per unit of (hype - 0.5)
    max_candles: int = 5000                     # All-time series cap

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min_price': self.min_price,
            'liquidity_reference_usd': self.liquidity_reference_usd,
            'min_liquidity_dampener': self.min_liquidity_dampener,
            'hype_amp_base': self.hype_amp_base,
            'hype_amp_slope': self.hype_amp_slope,
            'hype_drift': self.hype_drift,
            'max_candles': self.max_candles,
        }


@dataclass
class RiskConfig:
    """Rug/risk model configuration."""

    # Logistic score weights
    score_bias: float = -4.0
    dev_weight: float = 5.0                     # Per unit of dev share (0-1)
    audit_weight: float = 4.0
    liquidity_weight: float = 1.2               # Per log10(1 + liq / 100k)
    hype_weight: float = 2.0

    max_rug_probability: float = 0.02           # Per tick ceiling
    flag_threshold: float = 0.004               # Warning threshold, per tick
    require_flag_before_rug: bool = True

    # Rug aftermath
    crash_range: Tuple[float, float] = (0.01, 0.2)
    liquidity_crash_range: Tuple[float, float] = (0.05, 0.4)

    audit_decay_per_day: float = 0.02

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score_bias': self.score_bias,
            'dev_weight': self.dev_weight,
            'audit_weight': self.audit_weight,
            'liquidity_weight': self.liquidity_weight,
            'hype_weight': self.hype_weight,
            'max_rug_probability': self.max_rug_probability,
            'flag_threshold': self.flag_threshold,
            'require_flag_before_rug': self.require_flag_before_rug,
            'crash_range': list(self.crash_range),
            'liquidity_crash_range': list(self.liquidity_crash_range),
            'audit_decay_per_day': self.audit_decay_per_day,
        }


@dataclass
class TradingConfig:
    """Trading engine configuration."""

    trading_fee: float = 8.0                    # Flat $ per trade
    dust_threshold: float = 1e-8                # Units shown as zero
    starting_cash: float = 10_000.0
    max_history_points: int = 1000              # Net worth samples kept

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trading_fee': self.trading_fee,
            'dust_threshold': self.dust_threshold,
            'starting_cash': self.starting_cash,
            'max_history_points': self.max_history_points,
        }


@dataclass
class ShockConfig:
    """Sentiment shock shape."""

    drift_scale: float = 0.02                   # Log-return per tick at magnitude 1
    decay: float = 0.7                          # Per tick multiplier
    duration: int = 12                          # Ticks before a shock expires
    hype_scale: float = 0.1                     # Hype nudge at magnitude 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'drift_scale': self.drift_scale,
            'decay': self.decay,
            'duration': self.duration,
            'hype_scale': self.hype_scale,
        }


@dataclass
class SocialConfig:
    """Social feed configuration."""

    starting_followers: int = 100
    starting_engagement: float = 0.05
    starting_credibility: float = 0.5
    credibility_bounds: Tuple[float, float] = (0.3, 0.9)

    # Post n of the day is scaled by schedule[n-1], then halves per post
    fatigue_schedule: Tuple[float, ...] = (1.0, 0.6, 0.3, 0.15)
    fatigue_tail_decay: float = 0.5

    engagement_range: Tuple[float, float] = (0.02, 0.12)
    engagement_smoothing: float = 0.7           # Weight kept on the old average
    viral_base_chance: float = 0.002
    viral_spike_range: Tuple[float, float] = (3000.0, 80000.0)   # Followers, before credibility

    call_threshold_pct: float = 5.0             # Analysis call needs a 5% move
    timeframe_days: Dict[str, int] = field(default_factory=lambda: {
        '1d': 1,
        '3d': 3,
        '1w': 7,
    })
    timeframe_weights: Dict[str, float] = field(default_factory=lambda: {
        '1d': 0.8,
        '3d': 1.0,
        '1w': 1.2,
    })

    follower_base: Dict[str, int] = field(default_factory=lambda: {
        'shill': 50,
        'analysis': 80,
        'meme': 120,
        'fud': 40,
    })
    post_magnitude: Dict[str, float] = field(default_factory=lambda: {
        'shill': 0.6,
        'analysis': 0.4,
        'meme': 0.3,
        'fud': 0.6,
    })

    def to_dict(self) -> Dict[str, Any]:
        return {
            'starting_followers': self.starting_followers,
            'starting_engagement': self.starting_engagement,
            'starting_credibility': self.starting_credibility,
            'credibility_bounds': list(self.credibility_bounds),
            'fatigue_schedule': list(self.fatigue_schedule),
            'fatigue_tail_decay': self.fatigue_tail_decay,
            'engagement_range': list(self.engagement_range),
            'engagement_smoothing': self.engagement_smoothing,
            'viral_base_chance': self.viral_base_chance,
            'viral_spike_range': list(self.viral_spike_range),
            'call_threshold_pct': self.call_threshold_pct,
            'timeframe_days': dict(self.timeframe_days),
            'timeframe_weights': dict(self.timeframe_weights),
            'follower_base': dict(self.follower_base),
            'post_magnitude': dict(self.post_magnitude),
        }


@dataclass
class NewsConfig:
    """News feed configuration."""

    daily_articles: Tuple[int, int] = (2, 5)    # Inclusive range
    fake_damping: float = 0.5                   # Per prior debunked twin
    debunk_chance_per_day: float = 0.3
    max_debunk_chance: float = 0.9
    hype_reversal_ratio: float = 0.5            # Hype taken back on debunk

    def to_dict(self) -> Dict[str, Any]:
        return {
            'daily_articles': list(self.daily_articles),
            'fake_damping': self.fake_damping,
            'debunk_chance_per_day': self.debunk_chance_per_day,
            'max_debunk_chance': self.max_debunk_chance,
            'hype_reversal_ratio': self.hype_reversal_ratio,
        }


@dataclass
class EventConfig:
    """Random market events, rolled every tick."""

    # Exit scam: base tier coin with a heavy dev bag, no warning
    exit_scam_chance: float = 0.000055          # Per tick, per eligible asset
    exit_scam_min_dev_pct: float = 35.0
    exit_scam_price_ratio: float = 0.001
    exit_scam_scrutiny: Tuple[float, float] = (5.0, 15.0)

    # Oracle hack: one live asset spikes 100-400% or crashes to the floor
    oracle_hack_chance: float = 0.00003         # Per tick, whole market
    oracle_hack_range: Tuple[float, float] = (1.0, 4.0)

    # Whale buyback: deep pools only
    whale_buyback_chance: float = 0.00005       # Per tick, per eligible asset
    whale_min_liquidity_usd: float = 200_000.0
    whale_multiplier_range: Tuple[float, float] = (2.0, 4.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exit_scam_chance': self.exit_scam_chance,
            'exit_scam_min_dev_pct': self.exit_scam_min_dev_pct,
            'exit_scam_price_ratio': self.exit_scam_price_ratio,
            'exit_scam_scrutiny': list(self.exit_scam_scrutiny),
            'oracle_hack_chance': self.oracle_hack_chance,
            'oracle_hack_range': list(self.oracle_hack_range),
            'whale_buyback_chance': self.whale_buyback_chance,
            'whale_min_liquidity_usd': self.whale_min_liquidity_usd,
            'whale_multiplier_range': list(self.whale_multiplier_range),
        }


@dataclass
class OperationsConfig:
    """Paid operations and the player's own token."""

    # Stat changes are per $1,000 of budget
    pump_budget_scale: float = 10_000.0         # +100% price per this many USD
    pump_noise: Tuple[float, float] = (0.0, 0.15)
    pump_exposure: float = 0.08
    pump_scrutiny: float = 0.05
    wash_exposure: float = 0.12
    wash_scrutiny: float = 0.10
    audit_boost_range: Tuple[float, float] = (0.15, 0.35)
    bribe_relief_range: Tuple[float, float] = (10.0, 25.0)

    # Player token
    token_price: float = 1.0
    token_volatility: float = 0.15
    token_audit_range: Tuple[float, float] = (0.3, 0.6)   # Only with an audit budget
    rug_payout_range: Tuple[float, float] = (50_000.0, 500_000.0)
    rug_scrutiny_range: Tuple[float, float] = (40.0, 80.0)
    rug_reputation_loss_range: Tuple[float, float] = (50.0, 100.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pump_budget_scale': self.pump_budget_scale,
            'pump_noise': list(self.pump_noise),
            'pump_exposure': self.pump_exposure,
            'pump_scrutiny': self.pump_scrutiny,
            'wash_exposure': self.wash_exposure,
            'wash_scrutiny': self.wash_scrutiny,
            'audit_boost_range': list(self.audit_boost_range),
            'bribe_relief_range': list(self.bribe_relief_range),
            'token_price': self.token_price,
            'token_volatility': self.token_volatility,
            'token_audit_range': list(self.token_audit_range),
            'rug_payout_range': list(self.rug_payout_range),
            'rug_scrutiny_range': list(self.rug_scrutiny_range),
            'rug_reputation_loss_range': list(self.rug_reputation_loss_range),
        }


@dataclass
class SimConfig:
    """Master configuration."""

    ticks_per_day: int = 24
    max_events: int = 500

    # End-of-day features
    daily_news: bool = True
    coin_launches: bool = True

    # Per-tick exit scams, oracle hacks and whale buybacks
    market_events: bool = True

    # Sub-configs
    price: PriceConfig = field(default_factory=PriceConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    trading: TradingConfig = field(default_factory=TradingConfig)
    shocks: ShockConfig = field(default_factory=ShockConfig)
    social: SocialConfig = field(default_factory=SocialConfig)
    news: NewsConfig = field(default_factory=NewsConfig)
    events: EventConfig = field(default_factory=EventConfig)
    operations: OperationsConfig = field(default_factory=OperationsConfig)

    @classmethod
    def for_day_length(cls, ticks_per_day: int) -> 'SimConfig':
        """Create config with shocks and rug odds rescaled to a day length."""
        if ticks_per_day < 1:
            raise ValueError(f"ticks_per_day must be >= 1, got {ticks_per_day}")

        config = cls(ticks_per_day=ticks_per_day)
        scale = 24 / ticks_per_day

        # Keep the per-day rug odds roughly constant
        config.risk.max_rug_probability = min(1.0, config.risk.max_rug_probability * scale)
        config.risk.flag_threshold = min(1.0, config.risk.flag_threshold * scale)
        config.events.exit_scam_chance = min(1.0, config.events.exit_scam_chance * scale)
        config.events.oracle_hack_chance = min(1.0, config.events.oracle_hack_chance * scale)
        config.events.whale_buyback_chance = min(1.0, config.events.whale_buyback_chance * scale)

        # Shorter days, shorter shock windows
        config.shocks.duration = max(2, round(config.shocks.duration / scale))
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ticks_per_day': self.ticks_per_day,
            'max_events': self.max_events,
            'daily_news': self.daily_news,
            'coin_launches': self.coin_launches,
            'market_events': self.market_events,
            'price': self.price.to_dict(),
            'risk': self.risk.to_dict(),
            'trading': self.trading.to_dict(),
            'shocks': self.shocks.to_dict(),
            'social': self.social.to_dict(),
            'news': self.news.to_dict(),
            'events': self.events.to_dict(),
            'operations': self.operations.to_dict(),
        }


# Default config
DEFAULT_CONFIG = SimConfig()


# Quiet markets for tutorials
CALM_CONFIG = SimConfig(
    risk=RiskConfig(
        max_rug_probability=0.005,
        flag_threshold=0.002,
    ),
    shocks=ShockConfig(drift_scale=0.01),
    coin_launches=False,
)


# Everything rugs
RUG_SEASON_CONFIG = SimConfig(
    risk=RiskConfig(
        score_bias=-2.0,
        max_rug_probability=0.08,
        flag_threshold=0.01,
    ),
    price=PriceConfig(hype_drift=1.0),
    shocks=ShockConfig(drift_scale=0.04, duration=18),
)
