"""
Rug model: monotonic risk, flags, core immunity, the crash itself.
"""
import pytest

from rugsim.config import RiskConfig
from rugsim.core.asset import AssetTier, Candle, PriceHistory
from rugsim.core.risk import RugModel


def probabilities(model, make_asset, field_name, values):
    return [model.rug_probability(make_asset(**{field_name: v})) for v in values]


@pytest.fixture
def model():
    return RugModel(RiskConfig())


def test_probability_rises_with_dev_share_and_hype(model, make_asset):
    by_dev = probabilities(model, make_asset, 'dev_tokens_pct', [0, 25, 50, 75, 100])
    by_hype = probabilities(model, make_asset, 'social_hype', [0.0, 0.25, 0.5, 0.75, 1.0])

    assert all(a < b for a, b in zip(by_dev, by_dev[1:]))
    assert all(a < b for a, b in zip(by_hype, by_hype[1:]))


def test_probability_falls_with_audit_and_liquidity(model, make_asset):
    by_audit = probabilities(model, make_asset, 'audit_score', [0.0, 0.25, 0.5, 0.75, 1.0])
    by_liquidity = probabilities(model, make_asset, 'liquidity_usd', [0, 10_000, 100_000, 1e6, 1e7])

    assert all(a > b for a, b in zip(by_audit, by_audit[1:]))
    assert all(a > b for a, b in zip(by_liquidity, by_liquidity[1:]))


def test_probability_is_capped(model, make_sketchy):
    worst = make_sketchy(dev_tokens_pct=100, liquidity_usd=0)
    assert 0 < model.rug_probability(worst) <= RiskConfig().max_rug_probability


def test_core_assets_never_rug(model, make_sketchy, scripted_rng):
    core = make_sketchy(tier=AssetTier.CORE)
    rng = scripted_rng(rug=True)

    assert model.rug_probability(core) == 0.0
    for tick in range(1, 100):
        evaluation = model.evaluate(core, rng, tick)
        assert not evaluation.rugged
    assert rng.chance_calls == 0


def test_flag_is_raised_and_lowered(model, make_sketchy, scripted_rng):
    rng = scripted_rng(rug=False)
    asset = make_sketchy()

    evaluation = model.evaluate(asset, rng, 1)
    assert evaluation.flag_changed
    assert evaluation.asset.flagged
    assert not evaluation.rugged

    cleaned = evaluation.asset.evolve(dev_tokens_pct=0, audit_score=1.0, liquidity_usd=1e8, social_hype=0.5)
    evaluation = model.evaluate(cleaned, rng, 2)
    assert evaluation.flag_changed
    assert not evaluation.asset.flagged


def test_unflagged_asset_does_not_roll(model, make_asset, scripted_rng):
    rng = scripted_rng(forbid_chance=True)
    evaluation = model.evaluate(make_asset(), rng, 1)

    assert not evaluation.rugged
    assert not evaluation.asset.flagged


def test_first_flag_comes_a_tick_before_any_rug(model, make_sketchy, scripted_rng):
    rng = scripted_rng(rug=True)

    first = model.evaluate(make_sketchy(), rng, 1)
    assert first.flag_changed and first.asset.flagged
    assert not first.rugged
    assert rng.chance_calls == 0

    second = model.evaluate(first.asset, rng, 2)
    assert second.rugged
    assert rng.chance_calls == 1


def test_cleared_flag_blocks_the_roll(model, make_sketchy, scripted_rng):
    warned = make_sketchy(flagged=True, dev_tokens_pct=0, audit_score=1.0, liquidity_usd=1e8, social_hype=0.5)

    evaluation = model.evaluate(warned, scripted_rng(forbid_chance=True), 3)

    assert evaluation.flag_changed and not evaluation.asset.flagged
    assert not evaluation.rugged


def test_unflagged_asset_can_roll_when_warning_is_optional(make_asset, scripted_rng):
    model = RugModel(RiskConfig(require_flag_before_rug=False))
    rng = scripted_rng(rug=True)

    evaluation = model.evaluate(make_asset(), rng, 1)

    assert evaluation.rugged
    assert rng.chance_calls == 1


def test_rug_crashes_price_and_liquidity(model, make_sketchy, scripted_rng):
    candle = Candle.from_move(7, 1.1, 1.0)
    asset = make_sketchy(flagged=True, history=PriceHistory(all_time=[candle], intraday=[candle]))

    evaluation = model.evaluate(asset, scripted_rng(rug=True), 7)
    rugged = evaluation.asset

    assert evaluation.rugged
    assert evaluation.crash_ratio == 0.01
    assert rugged.rugged and rugged.rugged_at_tick == 7
    assert rugged.price == pytest.approx(0.01)
    assert rugged.liquidity_usd == pytest.approx(50_000 * 0.05)
    assert not rugged.is_tradable


def test_rug_tick_candle_absorbs_the_crash(model, make_sketchy, scripted_rng):
    candle = Candle.from_move(7, 1.1, 1.0)
    asset = make_sketchy(flagged=True, history=PriceHistory(all_time=[candle], intraday=[candle]))

    rugged = model.evaluate(asset, scripted_rng(rug=True), 7).asset
    last = rugged.history.all_time[-1]

    assert len(rugged.history.all_time) == 1
    assert last.tick == 7
    assert last.open == 1.1
    assert last.high == 1.1
    assert last.close == pytest.approx(0.01)
    assert last.low == last.close
    assert last.is_valid
    assert rugged.history.intraday[-1] == last


def test_rug_respects_price_floor(model, make_sketchy, scripted_rng):
    asset = make_sketchy(base_price=0.0002, flagged=True)
    rugged = model.evaluate(asset, scripted_rng(rug=True), 1).asset

    assert rugged.price == 0.00001


def test_rugged_assets_pass_through(model, make_sketchy, scripted_rng):
    asset = make_sketchy(rugged=True, rugged_at_tick=3, flagged=True)
    evaluation = model.evaluate(asset, scripted_rng(forbid_chance=True), 4)

    assert evaluation.asset is asset
    assert evaluation.probability == 0.0


def test_check_detailed_reasons(model, make_asset, make_sketchy):
    clean = model.check_detailed(make_asset())
    sketchy = model.check_detailed(make_sketchy())

    assert clean.reasons == []
    assert not clean.flagged
    assert len(sketchy.reasons) == 4
    assert sketchy.flagged
    assert sketchy.is_sketchy


def test_audit_decays_toward_zero(model, make_asset):
    asset = make_asset(audit_score=0.03)

    once = model.decay_audit(asset)
    twice = model.decay_audit(once)

    assert once.audit_score == pytest.approx(0.01)
    assert twice.audit_score == 0.0
    assert model.decay_audit(twice) is twice
