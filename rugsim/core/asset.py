"""
Asset - Data structure for tradable coins.

Usage:
    from rugsim.core import Asset, AssetTier

    asset = Asset(
        id="doge",
        symbol="DOGE",
        name="Dogecoin",
        tier=AssetTier.CORE,
        base_price=0.12,
        base_volatility=0.05,
        liquidity_usd=5_000_000,
        dev_tokens_pct=10,
        audit_score=0.8,
    )

    # From a seed catalog record
    asset = Asset.from_seed(record)
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Any, List, Optional

MIN_PRICE = 0.00001


class AssetTier(Enum):
    """Availability tier of an asset."""
    CORE = "core"
    BASE = "base"
    UNLOCKABLE = "unlockable"


@dataclass(frozen=True)
class Candle:
    """OHLC bar for a single tick (or a whole day for daily candles)."""
    tick: int
    open: float
    high: float
    low: float
    close: float

    @classmethod
    def from_move(cls, tick: int, open_price: float, close_price: float) -> 'Candle':
        return cls(
            tick=tick,
            open=open_price,
            high=max(open_price, close_price),
            low=min(open_price, close_price),
            close=close_price,
        )

    @property
    def is_valid(self) -> bool:
        return self.low <= min(self.open, self.close) and max(self.open, self.close) <= self.high

    def with_close(self, close_price: float) -> 'Candle':
        """Same tick, extended to a new close."""
        return Candle(
            tick=self.tick,
            open=self.open,
            high=max(self.high, close_price),
            low=min(self.low, close_price),
            close=close_price,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tick': self.tick,
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Candle':
        return cls(
            tick=int(data['tick']),
            open=float(data['open']),
            high=float(data['high']),
            low=float(data['low']),
            close=float(data['close']),
        )


def aggregate_candles(candles: List[Candle]) -> Candle:
    """Fold a run of candles into one bar keyed by its first tick."""
    if not candles:
        raise ValueError("cannot aggregate an empty candle series")
    return Candle(
        tick=candles[0].tick,
        open=candles[0].open,
        high=max(c.high for c in candles),
        low=min(c.low for c in candles),
        close=candles[-1].close,
    )


@dataclass
class PriceHistory:
    """Candle series of one asset."""
    all_time: List[Candle] = field(default_factory=list)
    intraday: List[Candle] = field(default_factory=list)
    daily: List[Candle] = field(default_factory=list)

    @property
    def last(self) -> Optional[Candle]:
        return self.all_time[-1] if self.all_time else None

    def copy(self) -> 'PriceHistory':
        return PriceHistory(
            all_time=list(self.all_time),
            intraday=list(self.intraday),
            daily=list(self.daily),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'all_time': [c.to_dict() for c in self.all_time],
            'intraday': [c.to_dict() for c in self.intraday],
            'daily': [c.to_dict() for c in self.daily],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PriceHistory':
        return cls(
            all_time=[Candle.from_dict(c) for c in data.get('all_time', [])],
            intraday=[Candle.from_dict(c) for c in data.get('intraday', [])],
            daily=[Candle.from_dict(c) for c in data.get('daily', [])],
        )


@dataclass
class Asset:
    """
    Tradable coin with its simulation state.

    Treated as a value: engines return updated copies via `evolve()` and
    the registry swaps them in.
    """

    # Identity
    id: str
    symbol: str
    name: str
    tier: AssetTier = AssetTier.BASE
    is_player_token: bool = False

    # Price data
    base_price: float = MIN_PRICE
    price: float = 0.0
    history: PriceHistory = field(default_factory=PriceHistory)

    # Risk inputs
    base_volatility: float = 0.1        # Daily sigma
    liquidity_usd: float = 0.0
    dev_tokens_pct: float = 0.0         # 0-100
    audit_score: float = 0.0            # 0-1
    social_hype: float = 0.5            # 0-1
    gov_favor_score: float = 0.5        # 0-1
    launched_days_ago: int = 0

    # Flags
    flagged: bool = False
    rugged: bool = False
    rugged_at_tick: Optional[int] = None

    def __post_init__(self):
        if self.price <= 0:
            self.price = self.base_price

    @property
    def is_tradable(self) -> bool:
        return not self.rugged

    @property
    def can_rug(self) -> bool:
        """Core coins are too big to rug."""
        return not self.rugged and self.tier != AssetTier.CORE

    @property
    def change_since_launch(self) -> float:
        """Percent change from base price."""
        if self.base_price <= 0:
            return 0.0
        return (self.price - self.base_price) / self.base_price * 100

    def evolve(self, **changes) -> 'Asset':
        """Copy with changes; the candle history is copied, not shared."""
        if 'history' not in changes:
            changes['history'] = self.history.copy()
        return replace(self, **changes)

    def repriced(self, tick: int, new_price: float, **changes) -> 'Asset':
        """
        Move the price inside `tick`.

        The move is folded into that tick's candle. An asset with no candle
        for the tick gets a fresh one, except before the first tick.
        """
        history = self.history.copy()
        for series in (history.all_time, history.intraday):
            if series and series[-1].tick == tick:
                series[-1] = series[-1].with_close(new_price)
            elif tick > 0:
                series.append(Candle.from_move(tick, self.price, new_price))
        return self.evolve(price=new_price, history=history, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'id': self.id,
            'symbol': self.symbol,
            'name': self.name,
            'tier': self.tier.value,
            'is_player_token': self.is_player_token,
            'base_price': self.base_price,
            'price': self.price,
            'history': self.history.to_dict(),
            'base_volatility': self.base_volatility,
            'liquidity_usd': self.liquidity_usd,
            'dev_tokens_pct': self.dev_tokens_pct,
            'audit_score': self.audit_score,
            'social_hype': self.social_hype,
            'gov_favor_score': self.gov_favor_score,
            'launched_days_ago': self.launched_days_ago,
            'flagged': self.flagged,
            'rugged': self.rugged,
            'rugged_at_tick': self.rugged_at_tick,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Asset':
        return cls(
            id=data['id'],
            symbol=data['symbol'],
            name=data['name'],
            tier=AssetTier(data.get('tier', 'base')),
            is_player_token=bool(data.get('is_player_token', False)),
            base_price=float(data['base_price']),
            price=float(data['price']),
            history=PriceHistory.from_dict(data.get('history', {})),
            base_volatility=float(data['base_volatility']),
            liquidity_usd=float(data['liquidity_usd']),
            dev_tokens_pct=float(data['dev_tokens_pct']),
            audit_score=float(data['audit_score']),
            social_hype=float(data.get('social_hype', 0.5)),
            gov_favor_score=float(data.get('gov_favor_score', 0.5)),
            launched_days_ago=int(data.get('launched_days_ago', 0)),
            flagged=bool(data.get('flagged', False)),
            rugged=bool(data.get('rugged', False)),
            rugged_at_tick=data.get('rugged_at_tick'),
        )

    @classmethod
    def from_seed(cls, record: Dict[str, Any]) -> 'Asset':
        """
        Create from a seed catalog record (camelCase keys).

        Validation lives in rugsim.catalog; this only maps fields.
        """
        symbol = str(record['symbol'])
        base_price = float(record['basePrice'])
        return cls(
            id=str(record.get('id') or symbol.lower()),
            symbol=symbol,
            name=str(record['name']),
            tier=AssetTier(record['tier']),
            is_player_token=bool(record.get('isPlayerToken', False)),
            base_price=base_price,
            price=base_price,
            base_volatility=float(record['baseVolatility']),
            liquidity_usd=float(record['liquidityUSD']),
            dev_tokens_pct=float(record['devTokensPct']),
            audit_score=float(record['auditScore']),
            social_hype=float(record.get('socialHype', 0.5)),
            gov_favor_score=float(record.get('govFavorScore', 0.5)),
            launched_days_ago=int(record['launchedDaysAgo']),
        )

    def __str__(self) -> str:
        status = " RUGGED" if self.rugged else (" FLAGGED" if self.flagged else "")
        return f"{self.symbol}: ${self.price:.6f} | Liq: ${self.liquidity_usd:,.0f}{status}"

    def __repr__(self) -> str:
        return f"Asset({self.symbol}, {self.tier.value}, ${self.price:.6f})"
