#!/usr/bin/env python3
"""
Rug Pull Simulator - Headless Runner
====================================

Runs a seeded game without a UI and prints what happened.

Usage:
    # Ten days with seed 42
    python main.py --days 10 --seed 42

    # Spread $500 into every non-core coin at the open, dump on warnings
    python main.py --days 5 --stake 500

    # Show configuration and the risk board only
    python main.py --show-config
    python main.py --risk-board

    # Save and resume
    python main.py --days 3 --save saves/game.json.gz
    python main.py --days 3 --load saves/game.json.gz
"""
import argparse
import logging
import sys

from rugsim.config import SimConfig, DEFAULT_CONFIG, CALM_CONFIG, RUG_SEASON_CONFIG
from rugsim.core.asset import AssetTier
from rugsim.engine import GameEngine
from rugsim.models import Order
from rugsim.persistence import JsonFileStore, PersistenceError, PersistenceWorker

PRESETS = {
    'default': DEFAULT_CONFIG,
    'calm': CALM_CONFIG,
    'rug-season': RUG_SEASON_CONFIG,
}


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def show_config(config: SimConfig):
    """Display the simulation parameters."""
    print(f"\n{'='*60}")
    print(f"  SIMULATION CONFIGURATION")
    print(f"{'='*60}")

    print(f"\nCLOCK:")
    print(f"  Ticks per Day:    {config.ticks_per_day}")
    print(f"  Daily News:       {config.daily_news}")
    print(f"  Coin Launches:    {config.coin_launches}")

    print(f"\nTRADING:")
    print(f"  Starting Cash:    ${config.trading.starting_cash:,.2f}")
    print(f"  Fee per Trade:    ${config.trading.trading_fee:.2f}")
    print(f"  Price Floor:      ${config.price.min_price}")

    print(f"\nRUG MODEL:")
    print(f"  Max Rug Chance:   {config.risk.max_rug_probability:.2%} per tick")
    print(f"  Flag Threshold:   {config.risk.flag_threshold:.2%} per tick")
    print(f"  Warn Before Rug:  {config.risk.require_flag_before_rug}")

    print(f"\nSHOCKS:")
    print(f"  Drift Scale:      {config.shocks.drift_scale:.3f}")
    print(f"  Decay per Tick:   {config.shocks.decay:.2f}")
    print(f"  Window:           {config.shocks.duration} ticks")

    print(f"\nMARKET EVENTS:")
    print(f"  Enabled:          {config.market_events}")
    print(f"  Exit Scam:        {config.events.exit_scam_chance:.4%} per tick "
          f"(dev bag > {config.events.exit_scam_min_dev_pct:.0f}%)")
    print(f"  Oracle Hack:      {config.events.oracle_hack_chance:.4%} per tick")
    print(f"  Whale Buyback:    {config.events.whale_buyback_chance:.4%} per tick "
          f"(pool >= ${config.events.whale_min_liquidity_usd:,.0f})")

    print(f"\nOPERATIONS:")
    print(f"  Pump Scale:       ${config.operations.pump_budget_scale:,.0f} per +100%")
    print(f"  Audit Boost:      {config.operations.audit_boost_range[0]:.0%}"
          f"-{config.operations.audit_boost_range[1]:.0%}")
    print(f"  Rug Payout:       ${config.operations.rug_payout_range[0]:,.0f}"
          f"-${config.operations.rug_payout_range[1]:,.0f}")

    print(f"{'='*60}\n")


def show_risk_board(engine: GameEngine):
    """Rug odds for every asset."""
    print(f"\n{'='*80}")
    print(f"  RISK BOARD (tick {engine.tick})")
    print(f"{'='*80}")
    for asset in engine.state.registry.all():
        risk = engine.rug_model.check_detailed(asset)
        status = "RUGGED" if asset.rugged else ("FLAG" if risk.flagged else "ok")
        reasons = "; ".join(risk.reasons) or "-"
        print(
            f"  {asset.symbol:8} | {asset.tier.value:10} | "
            f"p={risk.probability:7.3%} | gov={asset.gov_favor_score:4.2f} | {status:6} | {reasons}"
        )
    print(f"{'='*80}\n")


def run_game(engine: GameEngine, days: int, stake: float):
    """Advance the game day by day, printing a line per day."""
    if stake > 0:
        for asset in engine.state.registry.live():
            if asset.tier != AssetTier.CORE:
                engine.execute_trade(Order.buy(asset.id, stake))

    ticks = days * engine.config.ticks_per_day
    for _ in range(ticks):
        result = engine.advance_tick()

        # Dump anything that just got flagged
        if stake > 0:
            for asset_id in result.flagged:
                units = engine.player.units_of(asset_id)
                if units > 0:
                    engine.execute_trade(Order.sell(asset_id, units))

        for event in result.events:
            if event.kind in ('rug', 'market', 'debunk', 'launch', 'unlock'):
                print(f"  [tick {event.tick:5}] {event.message}")

        if result.end_of_day:
            summary = engine.summary()
            print(
                f"Day {result.day:3} | "
                f"Net worth: ${summary.net_worth_usd:>12,.2f} | "
                f"P&L: ${summary.total_pnl:+,.2f} ({summary.roi:+.1%}) | "
                f"W/L: {summary.win_loss.wins}/{summary.win_loss.losses}"
            )


def print_report(engine: GameEngine):
    summary = engine.summary()
    social = engine.state.social.stats

    print(f"\n{'='*60}")
    print(f"  FINAL REPORT (day {engine.day}, tick {engine.tick})")
    print(f"{'='*60}")
    print(f"  Cash:             ${summary.cash_usd:,.2f}")
    print(f"  Holdings:         ${summary.holdings_value_usd:,.2f}")
    print(f"  Net Worth:        ${summary.net_worth_usd:,.2f}")
    print(f"  Realized P&L:     ${summary.realized_pnl:+,.2f}")
    print(f"  Unrealized P&L:   ${summary.unrealized_pnl:+,.2f}")
    print(f"  ROI:              {summary.roi:+.2%}")
    print(f"  Fees Paid:        ${summary.fees_paid:,.2f}")
    print(f"  Max Drawdown:     {summary.max_drawdown:.2%}")
    print(f"  Followers:        {social.followers:,}")
    print(f"  Credibility:      {social.credibility:.2f}")

    if summary.positions:
        print(f"\nPOSITIONS:")
        for p in summary.positions:
            flag = " (rugged)" if p.rugged else ""
            print(
                f"  {p.symbol:8} {p.units:>16,.4f} | ${p.value_usd:>10,.2f} | "
                f"{p.unrealized_pct:+7.1f}% | {p.allocation_pct:5.1f}%{flag}"
            )

    stats = engine.stats.to_dict()
    print(f"\nENGINE:")
    print(f"  Ticks: {stats['ticks']} | Trades: {stats['trades']} | "
          f"Rejected: {stats['rejected_trades']} | Rugs: {stats['rugs']} | "
          f"Events: {stats['market_events']}")
    print(f"{'='*60}\n")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rug Pull Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --days 10 --seed 42
  python main.py --days 5 --stake 500 --preset rug-season
  python main.py --show-config --preset calm
        """,
    )

    parser.add_argument(
        "--days",
        type=int,
        default=7,
        help="In-game days to simulate (default: 7)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible run",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Configuration preset (default: default)",
    )
    parser.add_argument(
        "--ticks-per-day",
        type=int,
        default=None,
        help="Override day length; rug odds and shock windows are rescaled",
    )
    parser.add_argument(
        "--stake",
        type=float,
        default=0.0,
        help="USD to buy of every non-core coin at the start (default: 0)",
    )
    parser.add_argument(
        "--save",
        type=str,
        default=None,
        help="Snapshot file written in the background (.gz to compress)",
    )
    parser.add_argument(
        "--load",
        type=str,
        default=None,
        help="Resume from a snapshot file",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show configuration and exit",
    )
    parser.add_argument(
        "--risk-board",
        action="store_true",
        help="Print rug odds for every asset and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.ticks_per_day:
        config = SimConfig.for_day_length(args.ticks_per_day)
    else:
        config = PRESETS[args.preset]

    if args.show_config:
        show_config(config)
        return 0

    worker = None
    if args.save:
        worker = PersistenceWorker(JsonFileStore(args.save))

    if args.load:
        try:
            snapshot = JsonFileStore(args.load).load()
        except PersistenceError as e:
            logging.error(f"Cannot load {args.load}: {e}")
            return 1
        if snapshot is None:
            logging.error(f"No snapshot at {args.load}")
            return 1
        engine = GameEngine.from_snapshot(snapshot, config, persistence=worker)
    else:
        engine = GameEngine.new_game(seed=args.seed, config=config, persistence=worker)

    if args.risk_board:
        show_risk_board(engine)
        return 0

    try:
        run_game(engine, args.days, args.stake)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
    finally:
        if worker is not None:
            worker.close()
            if worker.errors:
                logging.error(f"{len(worker.errors)} snapshot save(s) failed")
        print_report(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
