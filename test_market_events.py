"""
Market events: exit scams, oracle hacks and whale buybacks.
"""
import pytest

from rugsim.config import EventConfig
from rugsim.core.asset import AssetTier
from rugsim.engine import GameEngine, GameState
from rugsim.models import LimitOrderStatus
from rugsim.simulation import MarketEventKind, MarketEvents


@pytest.fixture
def market(make_asset, make_sketchy):
    whale = make_asset(id='btc', symbol='BTC', tier=AssetTier.CORE)
    return [whale, make_sketchy()]


def test_quiet_roll_only_draws_for_eligible_assets(market, scripted_rng):
    rng = scripted_rng(rug=False)

    roll = MarketEvents().roll(market, rng, tick=1)

    assert roll.events == [] and roll.updated_assets == {}
    # rekt can exit scam, one oracle draw, btc can get a buyback
    assert rng.chance_calls == 3


def test_every_event_fires_in_order(market, scripted_rng):
    roll = MarketEvents().roll(market, scripted_rng(rug=True), tick=7)

    assert [(e.kind, e.asset_id) for e in roll.events] == [
        (MarketEventKind.EXIT_SCAM, 'rekt'),
        (MarketEventKind.ORACLE_HACK, 'btc'),
        (MarketEventKind.WHALE_BUYBACK, 'btc'),
    ]
    assert roll.exit_scams == ['rekt']
    assert roll.scrutiny_delta == pytest.approx(5.0)

    scammed = roll.updated_assets['rekt']
    assert scammed.rugged and scammed.flagged
    assert scammed.rugged_at_tick == 7
    assert scammed.liquidity_usd == 0.0
    assert scammed.price == pytest.approx(0.001)

    # Oracle doubles btc, then the whale doubles it again; one candle holds both
    btc = roll.updated_assets['btc']
    assert btc.price == pytest.approx(4.0)
    assert len(btc.history.all_time) == 1
    assert btc.history.all_time[-1].open == pytest.approx(1.0)
    assert btc.history.all_time[-1].close == pytest.approx(4.0)
    assert roll.events[1].change_pct == pytest.approx(100)
    assert 'WHALE ALERT' in roll.events[2].message


def test_player_tokens_and_small_bags_never_exit_scam(make_sketchy):
    events = MarketEvents(EventConfig(exit_scam_min_dev_pct=35))

    assert events.can_exit_scam(make_sketchy())
    assert not events.can_exit_scam(make_sketchy(is_player_token=True))
    assert not events.can_exit_scam(make_sketchy(dev_tokens_pct=35))
    assert not events.can_exit_scam(make_sketchy(rugged=True))


def test_oracle_crash_stops_at_the_floor(make_asset):
    class Downward:
        def chance(self, probability):
            return probability == 1.0

        def uniform(self, low, high):
            return low

        def choice(self, items):
            return items[0]

    config = EventConfig(oracle_hack_chance=1.0, exit_scam_chance=0.0, whale_buyback_chance=0.0)

    roll = MarketEvents(config, min_price=0.0001).roll([make_asset()], Downward(), tick=3)

    (event,) = roll.events
    assert event.kind == MarketEventKind.ORACLE_HACK
    assert event.new_price == pytest.approx(0.0001)
    assert 'crashed' in event.message


def test_engine_treats_exit_scam_as_rug(market, quiet_config, scripted_rng):
    quiet_config.market_events = True
    engine = GameEngine(GameState.new(market, 1, quiet_config), quiet_config)
    engine.state.rng = scripted_rng(rug=True)
    assert engine.place_limit_order('rekt', 'BUY', 0.5, 10).success

    result = engine.advance_tick()

    assert 'rekt' in result.rugged
    assert 'exit_scam' in result.market_events
    assert engine.asset('rekt').rugged
    assert engine.player.limit_orders[0].status == LimitOrderStatus.CANCELLED
    assert engine.player.stats['scrutiny'] == pytest.approx(5.0)
    assert engine.stats.market_events == len(result.market_events)
    assert any(e.kind == 'market' for e in result.events)


def test_market_events_can_be_switched_off(market, quiet_config, scripted_rng):
    engine = GameEngine(GameState.new(market, 1, quiet_config), quiet_config)
    engine.state.rng = scripted_rng(rug=True)

    result = engine.advance_tick()

    assert result.market_events == []
    assert not engine.asset('rekt').rugged
