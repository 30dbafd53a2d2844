"""
PORTFOLIO ANALYTICS
===================

Read-only views over a player and current prices. Every function is pure:
the same inputs always give the same outputs and nothing is written back.

Usage:
    from rugsim.portfolio import summarize

    summary = summarize(player, registry.all())
    print(f"ROI: {summary.roi:.1%}")
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

import numpy as np

from ..core.asset import Asset
from ..models import OrderSide, Player


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass
class PositionView:
    asset_id: str
    symbol: str
    units: float
    price: float
    avg_cost: float
    value_usd: float
    cost_usd: float
    unrealized_pnl: float
    unrealized_pct: float
    allocation_pct: float = 0.0
    rugged: bool = False

    def to_dict(self) -> dict:
        return {
            'asset_id': self.asset_id,
            'symbol': self.symbol,
            'units': self.units,
            'price': self.price,
            'avg_cost': self.avg_cost,
            'value_usd': self.value_usd,
            'cost_usd': self.cost_usd,
            'unrealized_pnl': self.unrealized_pnl,
            'unrealized_pct': self.unrealized_pct,
            'allocation_pct': self.allocation_pct,
            'rugged': self.rugged,
        }


@dataclass
class WinLoss:
    wins: int
    losses: int

    @property
    def ratio(self) -> float:
        if self.losses == 0:
            return float('inf') if self.wins > 0 else 0.0
        return self.wins / self.losses

    @property
    def win_rate(self) -> float:
        total = self.wins + self.losses
        return self.wins / total if total > 0 else 0.0


@dataclass
class PortfolioSummary:
    cash_usd: float
    holdings_value_usd: float
    net_worth_usd: float
    realized_pnl: float
    unrealized_pnl: float
    total_pnl: float
    roi: float
    fees_paid: float
    win_loss: WinLoss
    max_drawdown: float
    positions: List[PositionView] = field(default_factory=list)
    best: List[PositionView] = field(default_factory=list)
    worst: List[PositionView] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'cash_usd': self.cash_usd,
            'holdings_value_usd': self.holdings_value_usd,
            'net_worth_usd': self.net_worth_usd,
            'realized_pnl': self.realized_pnl,
            'unrealized_pnl': self.unrealized_pnl,
            'total_pnl': self.total_pnl,
            'roi': self.roi,
            'fees_paid': self.fees_paid,
            'wins': self.win_loss.wins,
            'losses': self.win_loss.losses,
            'win_loss_ratio': self.win_loss.ratio,
            'max_drawdown': self.max_drawdown,
            'positions': [p.to_dict() for p in self.positions],
            'best': [p.asset_id for p in self.best],
            'worst': [p.asset_id for p in self.worst],
        }


# ============================================================
# VIEWS
# ============================================================

def _asset_map(assets: Iterable[Asset]) -> Dict[str, Asset]:
    return {a.id: a for a in assets}


def holdings_value(player: Player, prices: Mapping[str, float]) -> float:
    return sum(units * prices.get(asset_id, 0.0) for asset_id, units in player.holdings.items())


def net_worth(player: Player, prices: Mapping[str, float]) -> float:
    """Cash plus holdings marked at current prices."""
    return player.cash_usd + holdings_value(player, prices)


def unrealized_pnl(player: Player, prices: Mapping[str, float]) -> float:
    total = 0.0
    for asset_id, units in player.holdings.items():
        basis = player.cost_basis.get(asset_id)
        cost = basis.total_cost_usd if basis else 0.0
        total += units * prices.get(asset_id, 0.0) - cost
    return total


def total_pnl(player: Player, prices: Mapping[str, float]) -> float:
    return player.realized_pnl + unrealized_pnl(player, prices)


def roi(player: Player, prices: Mapping[str, float]) -> float:
    """Total P&L as a fraction of starting net worth."""
    if player.initial_net_worth <= 0:
        return 0.0
    return total_pnl(player, prices) / player.initial_net_worth


def win_loss(player: Player) -> WinLoss:
    """Count sells that closed in profit vs at a loss."""
    wins = losses = 0
    for trade in player.trades:
        if trade.side != OrderSide.SELL or trade.realized_pnl is None:
            continue
        if trade.realized_pnl > 0:
            wins += 1
        elif trade.realized_pnl < 0:
            losses += 1
    return WinLoss(wins=wins, losses=losses)


def portfolio_table(
    player: Player,
    assets: Iterable[Asset],
    dust_threshold: float = 0.0,
) -> List[PositionView]:
    """
    Open positions with allocation as a share of holdings value.

    Positions below `dust_threshold` units show zero units; their value
    still counts.
    """
    by_id = _asset_map(assets)
    rows = []
    for asset_id, units in player.holdings.items():
        asset = by_id.get(asset_id)
        price = asset.price if asset else 0.0
        basis = player.cost_basis.get(asset_id)
        cost = basis.total_cost_usd if basis else 0.0
        value = units * price
        pnl = value - cost
        rows.append(PositionView(
            asset_id=asset_id,
            symbol=asset.symbol if asset else asset_id.upper(),
            units=0.0 if units < dust_threshold else units,
            price=price,
            avg_cost=basis.avg_cost if basis else 0.0,
            value_usd=value,
            cost_usd=cost,
            unrealized_pnl=pnl,
            unrealized_pct=(pnl / cost * 100) if cost > 0 else 0.0,
            rugged=bool(asset and asset.rugged),
        ))

    total = sum(r.value_usd for r in rows)
    for row in rows:
        row.allocation_pct = row.value_usd / total * 100 if total > 0 else 0.0

    rows.sort(key=lambda r: (-r.value_usd, r.asset_id))
    return rows


def best_worst_performers(player: Player, assets: Iterable[Asset], count: int = 3, dust_threshold: float = 0.0):
    """Top and bottom `count` positions by % unrealized gain."""
    rows = sorted(portfolio_table(player, assets, dust_threshold), key=lambda r: (-r.unrealized_pct, r.asset_id))
    best = rows[:count]
    worst = list(reversed(rows[-count:])) if rows else []
    return best, worst


def max_drawdown(history: List[List[float]]) -> float:
    """Largest peak-to-trough fall of the net worth series, as a fraction."""
    if len(history) < 2:
        return 0.0
    values = np.asarray([point[1] for point in history], dtype=float)
    peaks = np.maximum.accumulate(values)
    drawdowns = np.where(peaks > 0, (peaks - values) / peaks, 0.0)
    return float(drawdowns.max())


def summarize(player: Player, assets: Iterable[Asset], dust_threshold: float = 0.0) -> PortfolioSummary:
    assets = list(assets)
    prices = {a.id: a.price for a in assets}
    positions = portfolio_table(player, assets, dust_threshold)
    best, worst = best_worst_performers(player, assets, dust_threshold=dust_threshold)
    unrealized = unrealized_pnl(player, prices)
    held = holdings_value(player, prices)

    return PortfolioSummary(
        cash_usd=player.cash_usd,
        holdings_value_usd=held,
        net_worth_usd=player.cash_usd + held,
        realized_pnl=player.realized_pnl,
        unrealized_pnl=unrealized,
        total_pnl=player.realized_pnl + unrealized,
        roi=roi(player, prices),
        fees_paid=player.fees_paid,
        win_loss=win_loss(player),
        max_drawdown=max_drawdown(player.net_worth_history),
        positions=positions,
        best=best,
        worst=worst,
    )
