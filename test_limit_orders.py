"""
Limit orders: placement, cancellation and per-tick matching.
"""
import pytest

from rugsim.config import TradingConfig
from rugsim.executors import LimitOrderBook, TradeExecutor
from rugsim.models import (
    CostBasis,
    FailureKind,
    LimitOrderStatus,
    OrderSide,
    OrderType,
    Player,
)


@pytest.fixture
def book():
    return LimitOrderBook(TradeExecutor(TradingConfig(trading_fee=8.0)))


def lookup(*assets):
    by_id = {a.id: a for a in assets}
    return by_id.get


def test_buy_limit_fills_at_crossing_price(book, make_asset):
    asset = make_asset(base_price=1.0)
    placed = book.place(Player.new(1000), asset, OrderSide.BUY, 0.90, 100, tick=0)
    assert placed.success
    player = placed.player

    above = book.resolve(player, lookup(asset.evolve(price=0.95)), tick=1)
    assert above.fills == []
    assert above.player.pending_orders()[0].id == placed.order.id

    crossed = book.resolve(player, lookup(asset.evolve(price=0.85)), tick=2)
    (order, trade), = crossed.fills

    assert order.status == LimitOrderStatus.FILLED
    assert order.filled_tick == 2
    assert order.trade_id == trade.id
    assert trade.price_per_unit == 0.85
    assert trade.units == pytest.approx(100)
    assert trade.order_type == OrderType.LIMIT
    assert crossed.player.cash_usd == pytest.approx(1000 - 85 - 8)
    assert crossed.player.pending_orders() == []


def test_sell_limit_fires_at_or_above_trigger(book, make_asset):
    asset = make_asset(base_price=1.0)
    player = Player(cash_usd=0, holdings={'coin': 100}, cost_basis={'coin': CostBasis('coin', 100, 100)})
    player = book.place(player, asset, OrderSide.SELL, 1.5, 40, tick=0).player

    resolution = book.resolve(player, lookup(asset.evolve(price=1.5)), tick=1)
    (_, trade), = resolution.fills

    assert trade.side == OrderSide.SELL
    assert trade.units == 40
    assert resolution.player.holdings['coin'] == pytest.approx(60)
    assert resolution.player.realized_pnl == pytest.approx(40 * 0.5 - 8)


def test_orders_fill_in_creation_order(book, make_asset):
    asset = make_asset(base_price=1.0)
    player = Player.new(100)
    player = book.place(player, asset, OrderSide.BUY, 2.0, 50, tick=0).player
    player = book.place(player, asset, OrderSide.BUY, 2.0, 50, tick=0).player

    resolution = book.resolve(player, lookup(asset), tick=1)

    assert [o.id for o, _ in resolution.fills] == ['L000001']
    (cancelled,) = resolution.cancelled
    assert cancelled.id == 'L000002'
    assert cancelled.cancel_reason == FailureKind.INSUFFICIENT_FUNDS.value
    assert resolution.player.cash_usd == pytest.approx(42)


def test_closed_market_leaves_orders_pending(book, make_asset):
    asset = make_asset(base_price=1.0)
    player = book.place(Player.new(1000), asset, OrderSide.BUY, 2.0, 10, tick=0).player

    closed = book.resolve(player, lookup(asset), tick=1, market_open=False)
    assert closed.fills == [] and closed.cancelled == []
    assert len(closed.player.pending_orders()) == 1

    reopened = book.resolve(closed.player, lookup(asset), tick=2)
    assert len(reopened.fills) == 1


def test_rugged_asset_cancels_pending_orders(book, make_asset):
    asset = make_asset()
    player = book.place(Player.new(1000), asset, OrderSide.BUY, 0.5, 10, tick=0).player

    resolution = book.resolve(player, lookup(asset.evolve(rugged=True, rugged_at_tick=1)), tick=1)

    (cancelled,) = resolution.cancelled
    assert cancelled.cancel_reason == 'asset_rugged'
    assert resolution.fills == []


def test_order_on_vanished_asset_is_cancelled_as_invalid(book, make_asset):
    player = book.place(Player.new(1000), make_asset(), OrderSide.BUY, 0.5, 10, tick=0).player

    resolution = book.resolve(player, lookup(), tick=1)

    (cancelled,) = resolution.cancelled
    assert cancelled.cancel_reason == 'validation'
    assert resolution.player.pending_orders() == []


def test_cancel_for_asset_only_touches_that_asset(book, make_asset):
    coin = make_asset()
    other = make_asset(id='other', symbol='OTHER')
    player = Player.new(1000)
    player = book.place(player, coin, OrderSide.BUY, 0.5, 10, tick=0).player
    player = book.place(player, other, OrderSide.BUY, 0.5, 10, tick=0).player

    updated, cancelled = book.cancel_for_asset(player, 'coin', 'asset_rugged')

    assert [o.asset_id for o in cancelled] == ['coin']
    assert [o.asset_id for o in updated.pending_orders()] == ['other']
    assert len(player.pending_orders()) == 2


def test_cancel_by_player(book, make_asset):
    player = book.place(Player.new(1000), make_asset(), OrderSide.BUY, 0.5, 10, tick=0).player

    first = book.cancel(player, 'L000001')
    second = book.cancel(first.player, 'L000001')
    missing = book.cancel(player, 'L999999')

    assert first.success
    assert first.order.status == LimitOrderStatus.CANCELLED
    assert first.order.cancel_reason == 'cancelled_by_player'
    assert second.failure == FailureKind.VALIDATION
    assert missing.failure == FailureKind.VALIDATION


@pytest.mark.parametrize('trigger, units', [(0, 10), (-1, 10), (1.0, 0), (1.0, -3), (float('nan'), 1)])
def test_place_rejects_bad_values(book, make_asset, trigger, units):
    result = book.place(Player.new(1000), make_asset(), OrderSide.BUY, trigger, units, tick=0)

    assert result.failure == FailureKind.VALIDATION


def test_place_rejects_rugged_asset_and_blacklisted_player(book, make_asset):
    rugged = book.place(Player.new(1000), make_asset(rugged=True), OrderSide.BUY, 1.0, 1, tick=0)
    banned = Player.new(1000)
    banned.blacklisted = True
    blocked = book.place(banned, make_asset(), OrderSide.BUY, 1.0, 1, tick=0)

    assert rugged.failure == FailureKind.ASSET_RUGGED
    assert blocked.failure == FailureKind.BLACKLISTED
