"""
Limit Orders - Resting orders matched once per tick.

BUY fires when price <= trigger, SELL when price >= trigger. A fired order
executes as a market trade at the tick's price, the price that crossed
the trigger. Orders are processed in creation order and never partially
filled. A fill that fails for a lasting reason (funds, holdings, rug,
blacklist) cancels the order; a closed market leaves it pending.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..core.asset import Asset
from ..models import (
    FailureKind,
    LimitOrder,
    Order,
    OrderResult,
    OrderSide,
    OrderType,
    Player,
    Trade,
)
from .simulated import TradeExecutor

logger = logging.getLogger(__name__)

CANCELLED_BY_PLAYER = "cancelled_by_player"


@dataclass
class LimitResolution:
    """What one tick of matching did."""
    player: Player
    fills: List[Tuple[LimitOrder, Trade]] = field(default_factory=list)
    cancelled: List[LimitOrder] = field(default_factory=list)


def _replace_order(player: Player, order: LimitOrder):
    for i, existing in enumerate(player.limit_orders):
        if existing.id == order.id:
            player.limit_orders[i] = order
            return
    raise KeyError(order.id)


class LimitOrderBook:

    def __init__(self, executor: TradeExecutor):
        self.executor = executor

    def place(
        self,
        player: Player,
        asset: Optional[Asset],
        side: OrderSide,
        trigger_price: float,
        units: float,
        tick: int,
    ) -> OrderResult:
        if asset is None:
            return OrderResult(False, "unknown asset", FailureKind.VALIDATION)
        if not math.isfinite(trigger_price) or trigger_price <= 0:
            return OrderResult(False, "trigger price must be positive", FailureKind.VALIDATION)
        if not math.isfinite(units) or units <= 0:
            return OrderResult(False, "units must be positive", FailureKind.VALIDATION)
        if player.blacklisted:
            return OrderResult(False, "account is blacklisted from trading", FailureKind.BLACKLISTED)
        if asset.rugged:
            return OrderResult(False, f"{asset.symbol} was rugged. It's over.", FailureKind.ASSET_RUGGED)

        order = LimitOrder(
            id=f"L{len(player.limit_orders) + 1:06d}",
            asset_id=asset.id,
            side=side,
            trigger_price=trigger_price,
            units=units,
            created_tick=tick,
        )
        updated = player.copy()
        updated.limit_orders.append(order)
        logger.info(
            f"Limit {side.value} {units:,.4f} {asset.symbol} @ ${trigger_price:.6f} placed ({order.id})"
        )
        return OrderResult(True, f"Limit order {order.id} placed", order=order, player=updated)

    def cancel(self, player: Player, order_id: str, reason: str = CANCELLED_BY_PLAYER) -> OrderResult:
        order = next((o for o in player.limit_orders if o.id == order_id), None)
        if order is None:
            return OrderResult(False, f"no limit order {order_id!r}", FailureKind.VALIDATION)
        if not order.is_pending:
            return OrderResult(
                False,
                f"order {order_id} is already {order.status.value.lower()}",
                FailureKind.VALIDATION,
                order=order,
            )

        cancelled = order.cancelled(reason)
        updated = player.copy()
        _replace_order(updated, cancelled)
        return OrderResult(True, f"Limit order {order_id} cancelled", order=cancelled, player=updated)

    def cancel_for_asset(self, player: Player, asset_id: str, reason: str) -> Tuple[Player, List[LimitOrder]]:
        """Cancel every pending order on one asset. Returns a new player."""
        pending = player.pending_orders(asset_id)
        if not pending:
            return player, []

        updated = player.copy()
        cancelled = []
        for order in pending:
            done = order.cancelled(reason)
            _replace_order(updated, done)
            cancelled.append(done)
        logger.info(f"Cancelled {len(cancelled)} limit order(s) on {asset_id}: {reason}")
        return updated, cancelled

    def resolve(
        self,
        player: Player,
        get_asset: Callable[[str], Optional[Asset]],
        tick: int,
        market_open: bool = True,
    ) -> LimitResolution:
        """Match pending orders against current prices."""
        resolution = LimitResolution(player=player)
        pending = player.pending_orders()
        if not pending:
            return resolution

        working = player.copy()
        for order in pending:
            asset = get_asset(order.asset_id)
            if asset is None or asset.rugged:
                reason = FailureKind.VALIDATION if asset is None else FailureKind.ASSET_RUGGED
                done = order.cancelled(reason.value)
                _replace_order(working, done)
                resolution.cancelled.append(done)
                continue

            if not order.is_triggered(asset.price):
                continue

            if order.side == OrderSide.BUY:
                market = Order(asset.id, OrderSide.BUY, usd=order.units * asset.price,
                               order_type=OrderType.LIMIT)
            else:
                market = Order(asset.id, OrderSide.SELL, units=order.units,
                               order_type=OrderType.LIMIT)

            result = self.executor.execute(market, asset, working, tick, market_open)
            if result.success:
                working = result.player
                done = order.filled(tick, result.trade.id)
                _replace_order(working, done)
                resolution.fills.append((done, result.trade))
                logger.info(f"Limit {order.id} filled: {result.message}")
            elif result.failure.is_transient:
                continue
            else:
                done = order.cancelled(result.failure.value)
                _replace_order(working, done)
                resolution.cancelled.append(done)
                logger.info(f"Limit {order.id} cancelled: {result.message}")

        resolution.player = working
        return resolution
