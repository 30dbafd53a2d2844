"""
Simulated Executor
==================

Fills market orders instantly at the asset's current price.

Checks run in a fixed order and the first failure wins:
validation, blacklist, market hours, rugged asset, funds or holdings.
The player passed in is never modified; a successful result carries the
updated copy and the caller commits it.

Usage:
    from rugsim.executors import TradeExecutor
    from rugsim.models import Order

    executor = TradeExecutor(config.trading)
    result = executor.execute(Order.buy("pepe", 500), asset, player, tick, market_open=True)
    if result.success:
        player = result.player
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..config import TradingConfig
from ..core.asset import Asset
from ..models import (
    CostBasis,
    ExecutionResult,
    FailureKind,
    Order,
    OrderSide,
    Player,
    Trade,
)

logger = logging.getLogger(__name__)


@dataclass
class FeeModel:
    """Flat per-trade fee, charged on top of a buy and out of sell proceeds."""
    flat_fee_usd: float = 8.0

    def fee_for(self, notional_usd: float) -> float:
        return self.flat_fee_usd


@dataclass
class ExecutionStats:
    attempts: int = 0
    fills: int = 0
    volume_usd: float = 0.0
    fees_usd: float = 0.0
    rejections: Dict[str, int] = field(default_factory=dict)

    @property
    def fill_rate(self) -> float:
        return self.fills / self.attempts if self.attempts > 0 else 0.0


def _fail(kind: FailureKind, message: str) -> ExecutionResult:
    return ExecutionResult(success=False, failure=kind, message=message)


class TradeExecutor:
    """Market order execution against simulated prices."""

    def __init__(self, config: Optional[TradingConfig] = None, fee_model: Optional[FeeModel] = None):
        self.config = config or TradingConfig()
        self.fee_model = fee_model or FeeModel(self.config.trading_fee)
        self.stats = ExecutionStats()

    def validate(self, order: Order, asset: Optional[Asset]) -> Optional[str]:
        """Structural checks only. Returns an error message or None."""
        if asset is None:
            return f"unknown asset {order.asset_id!r}"
        if order.side == OrderSide.BUY:
            if not math.isfinite(order.usd) or order.usd <= 0:
                return "buy amount must be a positive dollar value"
            if order.units:
                return "buy orders are sized in dollars, not units"
        else:
            if not math.isfinite(order.units) or order.units <= 0:
                return "sell amount must be a positive number of units"
            if order.usd:
                return "sell orders are sized in units, not dollars"
        return None

    def execute(
        self,
        order: Order,
        asset: Optional[Asset],
        player: Player,
        tick: int,
        market_open: bool = True,
    ) -> ExecutionResult:
        """
        Execute a market order.

        Args:
            order: Order to execute
            asset: Current asset value, or None if the id is unknown
            player: Current player (not modified)
            tick: Current tick, stamped on the trade
            market_open: External market-hours signal

        Returns:
            ExecutionResult with the updated player on success
        """
        self.stats.attempts += 1
        result = self._execute(order, asset, player, tick, market_open)

        if result.success:
            self.stats.fills += 1
            self.stats.volume_usd += result.trade.total_usd
            self.stats.fees_usd += result.trade.fee
            logger.info(result.message)
        else:
            key = result.failure.value
            self.stats.rejections[key] = self.stats.rejections.get(key, 0) + 1
            logger.debug(f"Rejected {order.side.value} {order.asset_id}: {result.message}")
        return result

    def _execute(
        self,
        order: Order,
        asset: Optional[Asset],
        player: Player,
        tick: int,
        market_open: bool,
    ) -> ExecutionResult:
        error = self.validate(order, asset)
        if error:
            return _fail(FailureKind.VALIDATION, error)
        if player.blacklisted:
            return _fail(FailureKind.BLACKLISTED, "account is blacklisted from trading")
        if not market_open:
            return _fail(FailureKind.MARKET_CLOSED, "market is closed")
        if asset.rugged:
            return _fail(FailureKind.ASSET_RUGGED, f"{asset.symbol} was rugged. It's over.")

        if order.side == OrderSide.BUY:
            return self._buy(order, asset, player, tick)
        return self._sell(order, asset, player, tick)

    def _buy(self, order: Order, asset: Asset, player: Player, tick: int) -> ExecutionResult:
        usd = order.usd
        fee = self.fee_model.fee_for(usd)
        if usd + fee > player.cash_usd + 1e-9:
            return _fail(
                FailureKind.INSUFFICIENT_FUNDS,
                f"need ${usd + fee:,.2f} (incl. ${fee:.2f} fee), have ${player.cash_usd:,.2f}",
            )

        price = asset.price
        units = usd / price

        updated = player.copy()
        updated.cash_usd = player.cash_usd - (usd + fee)
        updated.holdings[asset.id] = player.units_of(asset.id) + units
        basis = player.cost_basis.get(asset.id)
        updated.cost_basis[asset.id] = CostBasis(
            asset_id=asset.id,
            total_units=(basis.total_units if basis else 0.0) + units,
            total_cost_usd=(basis.total_cost_usd if basis else 0.0) + usd,
        )
        updated.fees_paid = player.fees_paid + fee

        trade = Trade(
            id=f"T{len(player.trades) + 1:06d}",
            tick=tick,
            asset_id=asset.id,
            symbol=asset.symbol,
            side=OrderSide.BUY,
            units=units,
            price_per_unit=price,
            total_usd=usd,
            fee=fee,
            order_type=order.order_type,
        )
        updated.trades.append(trade)

        return ExecutionResult(
            success=True,
            message=f"Bought {units:,.4f} {asset.symbol} @ ${price:.6f} for ${usd:,.2f} (fee ${fee:.2f})",
            trade=trade,
            player=updated,
        )

    def _sell(self, order: Order, asset: Asset, player: Player, tick: int) -> ExecutionResult:
        held = player.units_of(asset.id)
        units = order.units
        tolerance = max(1e-12, held * 1e-9)
        if units > held + tolerance:
            return _fail(
                FailureKind.INSUFFICIENT_HOLDINGS,
                f"have {held:,.6f} {asset.symbol}, tried to sell {units:,.6f}",
            )
        units = min(units, held)

        price = asset.price
        gross = units * price
        fee = self.fee_model.fee_for(gross)
        if player.cash_usd + gross - fee < -1e-9:
            return _fail(
                FailureKind.INSUFFICIENT_FUNDS,
                f"proceeds ${gross:,.2f} do not cover the ${fee:.2f} fee",
            )

        basis = player.cost_basis.get(asset.id)
        avg_cost = basis.avg_cost if basis else 0.0
        realized = gross - units * avg_cost - fee

        updated = player.copy()
        updated.cash_usd = player.cash_usd + gross - fee
        updated.realized_pnl = player.realized_pnl + realized
        updated.fees_paid = player.fees_paid + fee

        remaining = held - units
        if remaining <= 0:
            updated.holdings.pop(asset.id, None)
            updated.cost_basis.pop(asset.id, None)
        else:
            updated.holdings[asset.id] = remaining
            if basis:
                updated.cost_basis[asset.id] = CostBasis(
                    asset_id=asset.id,
                    total_units=remaining,
                    total_cost_usd=max(0.0, basis.total_cost_usd - units * avg_cost),
                )

        trade = Trade(
            id=f"T{len(player.trades) + 1:06d}",
            tick=tick,
            asset_id=asset.id,
            symbol=asset.symbol,
            side=OrderSide.SELL,
            units=units,
            price_per_unit=price,
            total_usd=gross,
            fee=fee,
            realized_pnl=realized,
            order_type=order.order_type,
        )
        updated.trades.append(trade)

        return ExecutionResult(
            success=True,
            message=(
                f"Sold {units:,.4f} {asset.symbol} @ ${price:.6f} for ${gross:,.2f} "
                f"(fee ${fee:.2f}, P&L ${realized:+,.2f})"
            ),
            trade=trade,
            player=updated,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get execution statistics"""
        return {
            'attempts': self.stats.attempts,
            'fills': self.stats.fills,
            'fill_rate': self.stats.fill_rate,
            'volume_usd': self.stats.volume_usd,
            'fees_usd': self.stats.fees_usd,
            'rejections': dict(self.stats.rejections),
        }
