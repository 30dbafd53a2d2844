"""
Game Models - Shared Data Structures
====================================

Orders, trades, limit orders, the player and the result objects returned
by every command. Expected failures are values, not exceptions.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, List
from enum import Enum


class OrderSide(Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderType(Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"


class LimitOrderStatus(Enum):
    PENDING = "PENDING"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"


class FailureKind(Enum):
    """Why a command was rejected."""
    VALIDATION = "validation"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_HOLDINGS = "insufficient_holdings"
    MARKET_CLOSED = "market_closed"
    ASSET_RUGGED = "asset_rugged"
    BLACKLISTED = "blacklisted"
    LOCKED = "locked"               # Feature not unlocked yet

    @property
    def is_transient(self) -> bool:
        return self == FailureKind.MARKET_CLOSED


STAT_NAMES = ('reputation', 'influence', 'security', 'scrutiny', 'exposure')


@dataclass
class Order:
    """Market order. BUY spends `usd`, SELL sells `units`."""
    asset_id: str
    side: OrderSide
    usd: float = 0.0
    units: float = 0.0
    order_type: OrderType = OrderType.MARKET

    @classmethod
    def buy(cls, asset_id: str, usd: float) -> 'Order':
        return cls(asset_id=asset_id, side=OrderSide.BUY, usd=usd)

    @classmethod
    def sell(cls, asset_id: str, units: float) -> 'Order':
        return cls(asset_id=asset_id, side=OrderSide.SELL, units=units)

    def to_dict(self) -> dict:
        return {
            'asset_id': self.asset_id,
            'side': self.side.value,
            'usd': self.usd,
            'units': self.units,
            'order_type': self.order_type.value,
        }


@dataclass(frozen=True)
class Trade:
    """Executed trade. Never modified after creation."""
    id: str
    tick: int
    asset_id: str
    symbol: str
    side: OrderSide
    units: float
    price_per_unit: float
    total_usd: float
    fee: float
    realized_pnl: Optional[float] = None
    order_type: OrderType = OrderType.MARKET

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'tick': self.tick,
            'asset_id': self.asset_id,
            'symbol': self.symbol,
            'side': self.side.value,
            'units': self.units,
            'price_per_unit': self.price_per_unit,
            'total_usd': self.total_usd,
            'fee': self.fee,
            'realized_pnl': self.realized_pnl,
            'order_type': self.order_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Trade':
        return cls(
            id=data['id'],
            tick=int(data['tick']),
            asset_id=data['asset_id'],
            symbol=data['symbol'],
            side=OrderSide(data['side']),
            units=float(data['units']),
            price_per_unit=float(data['price_per_unit']),
            total_usd=float(data['total_usd']),
            fee=float(data['fee']),
            realized_pnl=data.get('realized_pnl'),
            order_type=OrderType(data.get('order_type', 'MARKET')),
        )


@dataclass(frozen=True)
class CostBasis:
    """Weighted-average cost of an open position (fees excluded)."""
    asset_id: str
    total_units: float
    total_cost_usd: float

    @property
    def avg_cost(self) -> float:
        return self.total_cost_usd / self.total_units if self.total_units > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            'asset_id': self.asset_id,
            'total_units': self.total_units,
            'total_cost_usd': self.total_cost_usd,
            'avg_cost': self.avg_cost,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CostBasis':
        return cls(
            asset_id=data['asset_id'],
            total_units=float(data['total_units']),
            total_cost_usd=float(data['total_cost_usd']),
        )


@dataclass(frozen=True)
class LimitOrder:
    """Resting order that fires once price crosses its trigger."""
    id: str
    asset_id: str
    side: OrderSide
    trigger_price: float
    units: float
    created_tick: int
    status: LimitOrderStatus = LimitOrderStatus.PENDING
    filled_tick: Optional[int] = None
    trade_id: Optional[str] = None
    cancel_reason: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == LimitOrderStatus.PENDING

    def is_triggered(self, price: float) -> bool:
        if self.side == OrderSide.BUY:
            return price <= self.trigger_price
        return price >= self.trigger_price

    def filled(self, tick: int, trade_id: str) -> 'LimitOrder':
        return replace(self, status=LimitOrderStatus.FILLED, filled_tick=tick, trade_id=trade_id)

    def cancelled(self, reason: str) -> 'LimitOrder':
        return replace(self, status=LimitOrderStatus.CANCELLED, cancel_reason=reason)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'asset_id': self.asset_id,
            'side': self.side.value,
            'trigger_price': self.trigger_price,
            'units': self.units,
            'created_tick': self.created_tick,
            'status': self.status.value,
            'filled_tick': self.filled_tick,
            'trade_id': self.trade_id,
            'cancel_reason': self.cancel_reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LimitOrder':
        return cls(
            id=data['id'],
            asset_id=data['asset_id'],
            side=OrderSide(data['side']),
            trigger_price=float(data['trigger_price']),
            units=float(data['units']),
            created_tick=int(data['created_tick']),
            status=LimitOrderStatus(data.get('status', 'PENDING')),
            filled_tick=data.get('filled_tick'),
            trade_id=data.get('trade_id'),
            cancel_reason=data.get('cancel_reason'),
        )


class OperationKind(Enum):
    PUMP = "pump"
    WASH = "wash"
    AUDIT = "audit"
    BRIBE = "bribe"
    LAUNCH_TOKEN = "launch_token"
    RUG_OWN_TOKEN = "rug_own_token"


@dataclass(frozen=True)
class Operation:
    """A market operation the player paid for. Never modified after creation."""
    id: str
    tick: int
    kind: OperationKind
    cost_usd: float
    asset_id: Optional[str] = None
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'tick': self.tick,
            'kind': self.kind.value,
            'cost_usd': self.cost_usd,
            'asset_id': self.asset_id,
            'detail': dict(self.detail),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Operation':
        return cls(
            id=data['id'],
            tick=int(data['tick']),
            kind=OperationKind(data['kind']),
            cost_usd=float(data['cost_usd']),
            asset_id=data.get('asset_id'),
            detail=dict(data.get('detail', {})),
        )


@dataclass
class Player:
    """Player account. Commands work on copies and commit by swap."""
    cash_usd: float = 10_000.0
    holdings: Dict[str, float] = field(default_factory=dict)
    cost_basis: Dict[str, CostBasis] = field(default_factory=dict)
    realized_pnl: float = 0.0
    fees_paid: float = 0.0
    trades: List[Trade] = field(default_factory=list)
    limit_orders: List[LimitOrder] = field(default_factory=list)
    operations: List[Operation] = field(default_factory=list)
    stats: Dict[str, float] = field(default_factory=lambda: {
        'reputation': 50.0,
        'influence': 0.0,
        'security': 5.0,
        'scrutiny': 0.0,
        'exposure': 0.0,
    })
    blacklisted: bool = False
    initial_net_worth: float = 10_000.0
    net_worth_usd: float = 10_000.0
    net_worth_history: List[List[float]] = field(default_factory=list)  # [tick, value]

    @classmethod
    def new(cls, starting_cash: float = 10_000.0) -> 'Player':
        return cls(
            cash_usd=starting_cash,
            initial_net_worth=starting_cash,
            net_worth_usd=starting_cash,
            net_worth_history=[[0, starting_cash]],
        )

    def copy(self) -> 'Player':
        return replace(
            self,
            holdings=dict(self.holdings),
            cost_basis=dict(self.cost_basis),
            trades=list(self.trades),
            limit_orders=list(self.limit_orders),
            operations=list(self.operations),
            stats=dict(self.stats),
            net_worth_history=[list(p) for p in self.net_worth_history],
        )

    def units_of(self, asset_id: str) -> float:
        return self.holdings.get(asset_id, 0.0)

    def display_holdings(self, dust_threshold: float = 1e-8) -> Dict[str, float]:
        """Holdings with dust shown as zero."""
        return {k: (0.0 if v < dust_threshold else v) for k, v in self.holdings.items()}

    def adjust_stat(self, name: str, delta: float):
        if name not in STAT_NAMES:
            raise KeyError(name)
        self.stats[name] = max(0.0, min(100.0, self.stats.get(name, 0.0) + delta))

    def set_stat(self, name: str, value: float):
        if name not in STAT_NAMES:
            raise KeyError(name)
        self.stats[name] = max(0.0, min(100.0, value))

    def pending_orders(self, asset_id: Optional[str] = None) -> List[LimitOrder]:
        return [
            o for o in self.limit_orders
            if o.is_pending and (asset_id is None or o.asset_id == asset_id)
        ]

    def to_dict(self) -> dict:
        return {
            'cash_usd': self.cash_usd,
            'holdings': dict(self.holdings),
            'cost_basis': {k: v.to_dict() for k, v in self.cost_basis.items()},
            'realized_pnl': self.realized_pnl,
            'fees_paid': self.fees_paid,
            'trades': [t.to_dict() for t in self.trades],
            'limit_orders': [o.to_dict() for o in self.limit_orders],
            'operations': [o.to_dict() for o in self.operations],
            'stats': dict(self.stats),
            'blacklisted': self.blacklisted,
            'initial_net_worth': self.initial_net_worth,
            'net_worth_usd': self.net_worth_usd,
            'net_worth_history': [list(p) for p in self.net_worth_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Player':
        return cls(
            cash_usd=float(data['cash_usd']),
            holdings={k: float(v) for k, v in data.get('holdings', {}).items()},
            cost_basis={k: CostBasis.from_dict(v) for k, v in data.get('cost_basis', {}).items()},
            realized_pnl=float(data.get('realized_pnl', 0.0)),
            fees_paid=float(data.get('fees_paid', 0.0)),
            trades=[Trade.from_dict(t) for t in data.get('trades', [])],
            limit_orders=[LimitOrder.from_dict(o) for o in data.get('limit_orders', [])],
            operations=[Operation.from_dict(o) for o in data.get('operations', [])],
            stats={k: float(v) for k, v in data.get('stats', {}).items()},
            blacklisted=bool(data.get('blacklisted', False)),
            initial_net_worth=float(data.get('initial_net_worth', 10_000.0)),
            net_worth_usd=float(data.get('net_worth_usd', data['cash_usd'])),
            net_worth_history=[list(p) for p in data.get('net_worth_history', [])],
        )


@dataclass
class ExecutionResult:
    """Result of a market trade."""
    success: bool
    message: str = ""
    failure: Optional[FailureKind] = None
    trade: Optional[Trade] = None
    player: Optional[Player] = None

    @property
    def error(self) -> Optional[str]:
        return None if self.success else self.message

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'message': self.message,
            'failure': self.failure.value if self.failure else None,
            'trade': self.trade.to_dict() if self.trade else None,
        }


@dataclass
class OrderResult:
    """Result of placing or cancelling a limit order."""
    success: bool
    message: str = ""
    failure: Optional[FailureKind] = None
    order: Optional[LimitOrder] = None
    player: Optional[Player] = None

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'message': self.message,
            'failure': self.failure.value if self.failure else None,
            'order': self.order.to_dict() if self.order else None,
        }


@dataclass
class OperationResult:
    """Result of an operation. `asset` is the updated asset, if one changed."""
    success: bool
    message: str = ""
    failure: Optional[FailureKind] = None
    operation: Optional[Operation] = None
    player: Optional[Player] = None
    asset: Optional[Any] = None

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'message': self.message,
            'failure': self.failure.value if self.failure else None,
            'operation': self.operation.to_dict() if self.operation else None,
        }


@dataclass
class GameEvent:
    """Something worth telling the player about."""
    tick: int
    kind: str       # 'rug', 'flag', 'fill', 'cancel', 'news', 'debunk', 'launch', 'unlock', 'call', 'market', 'op'
    message: str
    asset_id: Optional[str] = None
    severity: str = "info"

    def to_dict(self) -> dict:
        return {
            'tick': self.tick,
            'kind': self.kind,
            'message': self.message,
            'asset_id': self.asset_id,
            'severity': self.severity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GameEvent':
        return cls(
            tick=int(data['tick']),
            kind=data['kind'],
            message=data['message'],
            asset_id=data.get('asset_id'),
            severity=data.get('severity', 'info'),
        )
