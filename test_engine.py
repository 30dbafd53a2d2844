"""
Game engine end to end: commands, tick ordering, rugs, news, replay.
"""
import pytest

from rugsim.config import SimConfig
from rugsim.core.asset import AssetTier
from rugsim.engine import GameEngine, GameState
from rugsim.models import FailureKind, LimitOrderStatus, Order
from rugsim.persistence import JsonFileStore
from rugsim.signals import AnalysisCall, NewsTemplate


def make_engine(assets, config, seed=1, **kwargs):
    return GameEngine(GameState.new(assets, seed, config), config, **kwargs)


def test_buy_through_engine(make_asset, quiet_config):
    quiet_config.trading.starting_cash = 1000
    engine = make_engine([make_asset()], quiet_config)

    result = engine.execute_trade(Order.buy('coin', 500))

    assert result.success
    assert engine.player.cash_usd == pytest.approx(492)
    assert engine.player.units_of('coin') == pytest.approx(500)
    assert engine.player.net_worth_usd == pytest.approx(992)
    assert engine.stats.trades == 1


def test_ticks_sample_net_worth(make_asset, quiet_config):
    engine = make_engine([make_asset()], quiet_config)

    results = [engine.advance_tick() for _ in range(3)]

    assert [r.tick for r in results] == [1, 2, 3]
    assert engine.tick == 3
    assert [p[0] for p in engine.player.net_worth_history] == [0, 1, 2, 3]


def test_config_must_match_state_day_length(make_asset):
    state = GameState.new([make_asset()], 1, SimConfig(ticks_per_day=4))

    with pytest.raises(ValueError):
        GameEngine(state, SimConfig(ticks_per_day=24))


def test_rug_cancels_orders_and_blocks_trades(make_asset, make_sketchy, quiet_config, scripted_rng):
    core = make_asset(id='btc', symbol='BTC', tier=AssetTier.CORE)
    engine = make_engine([core, make_sketchy()], quiet_config)
    rng = scripted_rng(rug=False)
    engine.state.rng = rng

    assert engine.execute_trade(Order.buy('rekt', 100)).success
    assert engine.place_limit_order('rekt', 'BUY', 0.5, 10).success
    assert engine.place_limit_order('rekt', 'sell', 2.0, 10).success

    first = engine.advance_tick()
    assert first.flagged == ['rekt']
    for _ in range(4):
        assert engine.advance_tick().rugged == []

    rng.rug = True
    rug_tick = engine.advance_tick()

    assert rug_tick.tick == 6
    assert rug_tick.rugged == ['rekt']
    assert [o.cancel_reason for o in rug_tick.cancelled_orders] == ['asset_rugged', 'asset_rugged']
    assert engine.player.pending_orders() == []
    assert any(e.kind == 'rug' for e in rug_tick.events)

    rekt = engine.asset('rekt')
    assert rekt.rugged and rekt.rugged_at_tick == 6
    assert rekt.price == pytest.approx(0.01)

    buy = engine.execute_trade(Order.buy('rekt', 10))
    sell = engine.execute_trade(Order.sell('rekt', engine.player.units_of('rekt')))
    assert buy.failure == FailureKind.ASSET_RUGGED
    assert sell.failure == FailureKind.ASSET_RUGGED
    assert engine.place_limit_order('rekt', 'BUY', 0.5, 10).failure == FailureKind.ASSET_RUGGED

    candles = len(rekt.history.all_time)
    for _ in range(3):
        engine.advance_tick()
    rekt = engine.asset('rekt')
    assert len(rekt.history.all_time) == candles
    assert rekt.history.last.tick == 6
    assert not engine.asset('btc').rugged


def test_closed_market_holds_orders_until_reopen(make_asset, quiet_config):
    engine = make_engine([make_asset()], quiet_config)
    engine.place_limit_order('coin', 'BUY', 2.0, 10)

    engine.set_market_open(False)
    assert engine.execute_trade(Order.buy('coin', 10)).failure == FailureKind.MARKET_CLOSED
    closed = engine.advance_tick()
    assert closed.fills == []
    assert len(engine.player.pending_orders()) == 1

    engine.set_market_open(True)
    opened = engine.advance_tick()
    (order, trade), = opened.fills
    assert order.status == LimitOrderStatus.FILLED
    assert trade.tick == 2


def test_limit_order_command_validation(make_asset, quiet_config):
    engine = make_engine([make_asset()], quiet_config)

    assert engine.place_limit_order('coin', 'hold', 1.0, 1).failure == FailureKind.VALIDATION
    assert engine.place_limit_order('nope', 'BUY', 1.0, 1).failure == FailureKind.VALIDATION
    assert engine.cancel_limit_order('L000001').failure == FailureKind.VALIDATION

    placed = engine.place_limit_order('coin', 'BUY', 0.5, 1)
    cancelled = engine.cancel_limit_order(placed.order.id)
    assert cancelled.success
    assert engine.player.pending_orders() == []


def test_post_moves_price_from_next_tick(make_asset, quiet_config):
    engine = make_engine([make_asset(id='up', symbol='UP'), make_asset(id='down', symbol='DOWN')], quiet_config)

    assert engine.create_post('shill', 'up', 'wagmi').success
    assert engine.create_post('fud', 'down', 'ngmi').success
    assert engine.asset('up').price == 1.0

    engine.advance_tick()

    assert engine.asset('up').price > 1.0
    assert engine.asset('down').price < 1.0
    assert engine.player.stats['exposure'] == 1.0
    assert engine.player.stats['scrutiny'] == 0.5


def test_post_validation(make_asset, quiet_config):
    engine = make_engine([make_asset(), make_asset(id='dead', symbol='DEAD', rugged=True)], quiet_config)

    assert engine.create_post('spam', 'coin', 'x').failure == FailureKind.VALIDATION
    assert engine.create_post('shill', 'nope', 'x').failure == FailureKind.VALIDATION
    assert engine.create_post('analysis', 'coin', 'x').failure == FailureKind.VALIDATION
    assert engine.create_post('shill', 'dead', 'x').failure == FailureKind.ASSET_RUGGED
    assert engine.create_post('analysis', 'coin', 'x', AnalysisCall('long', '3d')).success


def test_debunked_fake_stops_moving_price(make_asset, quiet_config):
    engine = make_engine([make_asset()], quiet_config)

    published = engine.publish_article('coin', 'COIN listed on Mars', 'bullish', weight=80, is_fake=True)
    assert published.success

    prices = [1.0]
    for _ in range(3):
        engine.advance_tick()
        prices.append(engine.asset('coin').price)
    assert prices == sorted(prices) and len(set(prices)) == 4

    debunked = engine.debunk_article(published.article.id)
    assert debunked.success
    assert debunked.article.debunked_tick == 3

    for _ in range(2):
        engine.advance_tick()
        assert engine.asset('coin').price == prices[-1]

    again = engine.publish_article('coin', 'COIN listed on Mars', 'bullish', weight=80, is_fake=True)
    assert again.article.magnitude == pytest.approx(0.4)


def test_article_and_debunk_validation(make_asset, quiet_config):
    engine = make_engine([make_asset()], quiet_config)
    real = engine.publish_article('coin', 'COIN ships v2', 'bullish')

    assert engine.publish_article('nope', 'x', 'bullish').failure == FailureKind.VALIDATION
    assert engine.publish_article('coin', 'x', 'sideways').failure == FailureKind.VALIDATION
    assert engine.publish_article('coin', '  ', 'bullish').failure == FailureKind.VALIDATION
    assert engine.debunk_article(real.article.id).failure == FailureKind.VALIDATION
    assert engine.debunk_article('N999999').failure == FailureKind.VALIDATION


def test_end_of_day_rolls_news_and_decays_audits(make_asset):
    config = SimConfig(ticks_per_day=4, coin_launches=False, market_events=False)
    templates = [NewsTemplate('{SYMBOL} partners with a bank', 'bullish', 'partnership')]
    engine = make_engine([make_asset()], config, seed=3, news_templates=templates)

    results = [engine.advance_tick() for _ in range(4)]

    assert [r.end_of_day for r in results] == [False, False, False, True]
    articles = results[-1].articles
    assert 2 <= len(articles) <= 5
    assert all(a.day == 2 and a.tick == 4 for a in articles)
    assert articles[0].headline == 'COIN partners with a bank'
    assert engine.asset('coin').audit_score == pytest.approx(0.98)
    assert engine.day == 2


def test_same_seed_same_game():
    config = SimConfig.for_day_length(6)

    def play():
        engine = GameEngine.new_game(seed=11, config=config)
        engine.execute_trade(Order.buy('pepe', 500))
        engine.create_post('shill', 'doge', 'to the moon')
        for _ in range(18):
            engine.advance_tick()
            if engine.tick == 8:
                engine.execute_trade(Order.sell('pepe', engine.player.units_of('pepe') / 2))
        return engine

    a, b = play(), play()

    assert a.state.registry.prices() == b.state.registry.prices()
    assert a.player.to_dict() == b.player.to_dict()
    assert a.state.news.to_dict() == b.state.news.to_dict()
    assert [e.to_dict() for e in a.state.events] == [e.to_dict() for e in b.state.events]


def test_restored_game_continues_identically(tmp_path):
    config = SimConfig.for_day_length(6)
    live = GameEngine.new_game(seed=5, config=config)
    live.execute_trade(Order.buy('bonk', 300))
    for _ in range(10):
        live.advance_tick()

    store = JsonFileStore(tmp_path / 'save.json.gz')
    store.save(live.snapshot())
    restored = GameEngine.from_snapshot(store.load(), config)

    assert restored.tick == 10
    for _ in range(10):
        live.advance_tick()
        restored.advance_tick()

    assert restored.state.registry.prices() == live.state.registry.prices()
    assert restored.player.to_dict() == live.player.to_dict()


def test_summary_matches_player(make_asset, quiet_config):
    engine = make_engine([make_asset()], quiet_config)
    engine.execute_trade(Order.buy('coin', 1000))

    summary = engine.summary()

    assert summary.net_worth_usd == pytest.approx(engine.player.net_worth_usd)
    assert summary.fees_paid == 8
    assert summary.positions[0].asset_id == 'coin'


def test_summary_and_holdings_hide_dust_below_configured_threshold(make_asset, quiet_config):
    quiet_config.trading.dust_threshold = 1.0
    engine = make_engine([make_asset()], quiet_config)
    engine.state.player.holdings['coin'] = 0.5

    summary = engine.summary()

    assert summary.positions[0].units == 0.0
    assert summary.positions[0].value_usd == pytest.approx(0.5)
    assert engine.display_holdings() == {'coin': 0.0}
