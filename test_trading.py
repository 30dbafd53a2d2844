"""
Market orders: fees, cost basis, realized P&L and rejection order.
"""
import math

import pytest

from rugsim.config import TradingConfig
from rugsim.executors import TradeExecutor
from rugsim.models import CostBasis, FailureKind, Order, OrderSide, Player


@pytest.fixture
def executor():
    return TradeExecutor(TradingConfig(trading_fee=8.0))


def test_buy_spends_amount_plus_fee(executor, make_asset):
    player = Player.new(1000)
    asset = make_asset(base_price=1.0)

    result = executor.execute(Order.buy('coin', 500), asset, player, tick=3)

    assert result.success
    assert result.player.cash_usd == pytest.approx(492)
    assert result.player.holdings['coin'] == pytest.approx(500)
    assert result.player.cost_basis['coin'].total_cost_usd == pytest.approx(500)
    assert result.player.fees_paid == pytest.approx(8)
    assert result.trade.side == OrderSide.BUY
    assert result.trade.tick == 3
    assert result.trade.fee == 8


def test_buy_does_not_touch_the_input_player(executor, make_asset):
    player = Player.new(1000)

    executor.execute(Order.buy('coin', 500), make_asset(), player, tick=1)

    assert player.cash_usd == 1000
    assert player.holdings == {}
    assert player.trades == []


def test_buy_check_includes_fee(executor, make_asset):
    player = Player.new(500)

    too_much = executor.execute(Order.buy('coin', 495), make_asset(), player, tick=1)
    just_enough = executor.execute(Order.buy('coin', 492), make_asset(), player, tick=1)

    assert not too_much.success
    assert too_much.failure == FailureKind.INSUFFICIENT_FUNDS
    assert just_enough.success
    assert just_enough.player.cash_usd == pytest.approx(0)


def test_partial_sell_realizes_pnl_and_keeps_average_cost(executor, make_asset):
    player = Player(
        cash_usd=1000,
        holdings={'coin': 100},
        cost_basis={'coin': CostBasis('coin', 100, 200)},
    )
    asset = make_asset(base_price=3.0)

    result = executor.execute(Order.sell('coin', 50), asset, player, tick=10)

    assert result.success
    assert result.trade.realized_pnl == pytest.approx(42)
    assert result.player.realized_pnl == pytest.approx(42)
    assert result.player.cash_usd == pytest.approx(1142)
    assert result.player.holdings['coin'] == pytest.approx(50)
    assert result.player.cost_basis['coin'].avg_cost == pytest.approx(2)


def test_selling_everything_clears_position(executor, make_asset):
    player = Player.new(1000)
    asset = make_asset()
    bought = executor.execute(Order.buy('coin', 100), asset, player, tick=1).player

    sold = executor.execute(Order.sell('coin', bought.units_of('coin')), asset, bought, tick=2).player

    assert 'coin' not in sold.holdings
    assert 'coin' not in sold.cost_basis
    assert sold.realized_pnl == pytest.approx(-8)
    assert sold.cash_usd == pytest.approx(1000 - 16)


def test_cannot_sell_more_than_held(executor, make_asset):
    player = Player(cash_usd=100, holdings={'coin': 10}, cost_basis={'coin': CostBasis('coin', 10, 10)})

    result = executor.execute(Order.sell('coin', 11), make_asset(), player, tick=1)

    assert not result.success
    assert result.failure == FailureKind.INSUFFICIENT_HOLDINGS


def test_sell_rejected_when_proceeds_cannot_cover_fee(executor, make_asset):
    player = Player(cash_usd=0, holdings={'coin': 1}, cost_basis={'coin': CostBasis('coin', 1, 1)})

    result = executor.execute(Order.sell('coin', 1), make_asset(), player, tick=1)

    assert result.failure == FailureKind.INSUFFICIENT_FUNDS
    assert player.holdings == {'coin': 1}


@pytest.mark.parametrize('order', [
    Order.buy('coin', 0),
    Order.buy('coin', -5),
    Order.buy('coin', math.nan),
    Order.buy('coin', math.inf),
    Order.sell('coin', 0),
    Order.sell('coin', math.nan),
])
def test_invalid_amounts_fail_validation(executor, make_asset, order):
    result = executor.execute(order, make_asset(), Player.new(1000), tick=1)

    assert not result.success
    assert result.failure == FailureKind.VALIDATION
    assert result.error


def test_unknown_asset_fails_validation(executor):
    result = executor.execute(Order.buy('nope', 10), None, Player.new(1000), tick=1)

    assert result.failure == FailureKind.VALIDATION


def test_blacklist_is_checked_before_market_hours(executor, make_asset):
    player = Player.new(1000)
    player.blacklisted = True

    result = executor.execute(Order.buy('coin', 10), make_asset(), player, tick=1, market_open=False)

    assert result.failure == FailureKind.BLACKLISTED


def test_market_hours_are_checked_before_rug(executor, make_asset):
    rugged = make_asset(rugged=True, rugged_at_tick=1)

    closed = executor.execute(Order.buy('coin', 10), rugged, Player.new(1000), tick=2, market_open=False)
    opened = executor.execute(Order.buy('coin', 10), rugged, Player.new(1000), tick=2)

    assert closed.failure == FailureKind.MARKET_CLOSED
    assert closed.failure.is_transient
    assert opened.failure == FailureKind.ASSET_RUGGED
    assert not opened.failure.is_transient


def test_rugged_asset_cannot_be_sold(executor, make_asset):
    player = Player(cash_usd=100, holdings={'coin': 10}, cost_basis={'coin': CostBasis('coin', 10, 10)})
    rugged = make_asset(rugged=True, rugged_at_tick=1)

    result = executor.execute(Order.sell('coin', 10), rugged, player, tick=2)

    assert result.failure == FailureKind.ASSET_RUGGED


def test_trade_ids_are_sequential(executor, make_asset):
    player = Player.new(1000)
    asset = make_asset()

    first = executor.execute(Order.buy('coin', 10), asset, player, tick=1)
    second = executor.execute(Order.buy('coin', 10), asset, first.player, tick=1)

    assert first.trade.id == 'T000001'
    assert second.trade.id == 'T000002'
    assert [t.id for t in second.player.trades] == ['T000001', 'T000002']


def test_stats_track_fills_and_rejections(executor, make_asset):
    executor.execute(Order.buy('coin', 10), make_asset(), Player.new(1000), tick=1)
    executor.execute(Order.buy('coin', 10_000), make_asset(), Player.new(1000), tick=1)

    stats = executor.get_stats()
    assert stats['attempts'] == 2
    assert stats['fills'] == 1
    assert stats['rejections'] == {'insufficient_funds': 1}


def test_dust_shows_as_zero():
    player = Player(holdings={'coin': 1e-10, 'other': 3.0})

    assert player.display_holdings() == {'coin': 0.0, 'other': 3.0}


def test_trade_leaves_the_asset_alone(executor, make_asset):
    asset = make_asset(base_price=1.0)

    result = executor.execute(Order.buy('coin', 500), asset, Player.new(1000), tick=1)

    assert asset == make_asset(base_price=1.0)
    assert set(result.to_dict()) == {'success', 'message', 'failure', 'trade'}
