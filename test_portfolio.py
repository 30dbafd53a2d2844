"""
Portfolio analytics over a hand-built player.
"""
import math

import pytest

from rugsim.models import CostBasis, OrderSide, Player, Trade
from rugsim.portfolio import (
    best_worst_performers,
    max_drawdown,
    net_worth,
    portfolio_table,
    roi,
    summarize,
    total_pnl,
    unrealized_pnl,
    win_loss,
)


def sell(trade_id, pnl):
    return Trade(
        id=trade_id, tick=1, asset_id='x', symbol='X', side=OrderSide.SELL,
        units=1, price_per_unit=1, total_usd=1, fee=8, realized_pnl=pnl,
    )


@pytest.fixture
def player():
    buy = Trade(
        id='T000001', tick=0, asset_id='x', symbol='X', side=OrderSide.BUY,
        units=10, price_per_unit=1, total_usd=10, fee=8,
    )
    return Player(
        cash_usd=900,
        holdings={'x': 10, 'y': 5},
        cost_basis={'x': CostBasis('x', 10, 10), 'y': CostBasis('y', 5, 50)},
        realized_pnl=20,
        trades=[buy, sell('T000002', 5), sell('T000003', -3), sell('T000004', 1)],
        initial_net_worth=1000,
    )


@pytest.fixture
def assets(make_asset):
    return [
        make_asset(id='x', symbol='X', base_price=2.0),
        make_asset(id='y', symbol='Y', base_price=5.0),
    ]


PRICES = {'x': 2.0, 'y': 5.0}


def test_pnl_and_roi(player):
    assert net_worth(player, PRICES) == pytest.approx(900 + 20 + 25)
    assert unrealized_pnl(player, PRICES) == pytest.approx(-15)
    assert total_pnl(player, PRICES) == pytest.approx(5)
    assert roi(player, PRICES) == pytest.approx(0.005)


def test_win_loss_counts_only_sells(player):
    record = win_loss(player)

    assert (record.wins, record.losses) == (2, 1)
    assert record.ratio == 2.0
    assert record.win_rate == pytest.approx(2 / 3)


def test_win_loss_without_losses():
    player = Player(trades=[sell('T1', 4)])

    assert math.isinf(win_loss(player).ratio)
    assert win_loss(Player()).ratio == 0.0


def test_table_is_sorted_by_value_with_allocation(player, assets):
    rows = portfolio_table(player, assets)

    assert [r.asset_id for r in rows] == ['y', 'x']
    assert sum(r.allocation_pct for r in rows) == pytest.approx(100)
    x = rows[1]
    assert x.avg_cost == 1.0
    assert x.unrealized_pct == pytest.approx(100)


def test_best_and_worst(player, assets):
    best, worst = best_worst_performers(player, assets, count=1)

    assert [p.asset_id for p in best] == ['x']
    assert [p.asset_id for p in worst] == ['y']


def test_max_drawdown():
    history = [[0, 100], [1, 120], [2, 90], [3, 130], [4, 117]]

    assert max_drawdown(history) == pytest.approx(0.25)
    assert max_drawdown([[0, 100]]) == 0.0
    assert max_drawdown([[0, 100], [1, 110], [2, 120]]) == 0.0


def test_summary_is_idempotent(player, assets):
    first = summarize(player, assets).to_dict()
    second = summarize(player, assets).to_dict()

    assert first == second
    assert first['total_pnl'] == pytest.approx(5)
    assert first['net_worth_usd'] == pytest.approx(945)
    assert player.cash_usd == 900


def test_dust_positions_show_zero_units_but_keep_value(assets):
    player = Player(cash_usd=0, holdings={'x': 0.5, 'y': 5}, initial_net_worth=1000)

    summary = summarize(player, assets, dust_threshold=1.0)

    units = {p.asset_id: p.units for p in summary.positions}
    assert units == {'x': 0.0, 'y': 5}
    assert summary.holdings_value_usd == pytest.approx(0.5 * 2 + 5 * 5)
    assert [p.units for p in portfolio_table(player, assets)] == [5, 0.5]
