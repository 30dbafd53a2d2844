"""
Game Engine - Command surface and tick orchestration
====================================================

All game state lives in one explicit GameState value. Every command runs
behind a single lock, so a tick always completes before a trade or post
is accepted and vice versa.

Tick order:
    1. hype nudges due this tick
    2. price pass
    3. rug pass (a rug cancels that asset's limit orders)
    4. market events: exit scams, oracle hacks, whale buybacks
    5. limit order matching
    6. analysis call resolution
    7. net worth sample, shock pruning
    8. end of day on the last tick of a day: debunks, daily news, coin
       launches, audit decay, unlocks

Usage:
    from rugsim import GameEngine, Order

    engine = GameEngine.new_game(seed=42)
    engine.execute_trade(Order.buy("pepe", 500))
    for _ in range(24):
        engine.advance_tick()
    print(engine.summary().roi)
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .catalog import load_asset_catalog, load_news_catalog
from .config import SimConfig, DEFAULT_CONFIG
from .core.asset import Asset, Candle
from .core.clock import Clock
from .core.launch import days_since_last_launch, generate_new_coin, should_launch_coin
from .core.registry import AssetRegistry
from .core.risk import RugModel
from .core.rng import SeededRNG
from .executors.limit_orders import LimitOrderBook
from .executors.operations import OperationsDesk, player_token_id
from .executors.simulated import TradeExecutor
from .models import (
    ExecutionResult,
    FailureKind,
    GameEvent,
    LimitOrder,
    OperationKind,
    OperationResult,
    Order,
    OrderResult,
    OrderSide,
    Player,
    Trade,
)
from .persistence import GameSnapshot, PersistenceWorker
from .portfolio.analytics import PortfolioSummary, net_worth, summarize
from .signals.news import DEFAULT_ACTOR, NewsArticle, NewsDesk, NewsTemplate
from .signals.shocks import SENTIMENT_DIRECTION, ShockBook
from .signals.social import AnalysisCall, PostType, SocialFeed, SocialPost
from .simulation.events import MarketEvents
from .simulation.price_engine import PriceEngine
from .unlocks import UnlockTracker

logger = logging.getLogger(__name__)


# ============================================================
# STATE
# ============================================================

@dataclass
class GameState:
    """Everything that changes while a game runs."""
    clock: Clock
    registry: AssetRegistry
    player: Player
    shocks: ShockBook
    social: SocialFeed
    news: NewsDesk
    unlocks: UnlockTracker
    rng: SeededRNG
    events: List[GameEvent] = field(default_factory=list)

    @classmethod
    def new(cls, assets: List[Asset], seed: Optional[int], config: SimConfig) -> 'GameState':
        return cls(
            clock=Clock(ticks_per_day=config.ticks_per_day),
            registry=AssetRegistry(assets),
            player=Player.new(config.trading.starting_cash),
            shocks=ShockBook(config.shocks),
            social=SocialFeed(config.social, config.ticks_per_day),
            news=NewsDesk(config.news),
            unlocks=UnlockTracker(),
            rng=SeededRNG(seed),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'clock': self.clock.to_dict(),
            'assets': self.registry.to_list(),
            'player': self.player.to_dict(),
            'shocks': self.shocks.to_dict(),
            'social': self.social.to_dict(),
            'news': self.news.to_dict(),
            'unlocks': self.unlocks.to_dict(),
            'rng': self.rng.get_state(),
            'events': [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: SimConfig) -> 'GameState':
        clock = Clock.from_dict(data['clock'])
        return cls(
            clock=clock,
            registry=AssetRegistry.from_list(data['assets']),
            player=Player.from_dict(data['player']),
            shocks=ShockBook.from_dict(data.get('shocks', {}), config.shocks),
            social=SocialFeed.from_dict(data['social'], config.social, clock.ticks_per_day),
            news=NewsDesk.from_dict(data.get('news', {}), config.news),
            unlocks=UnlockTracker.from_dict(data.get('unlocks', {})),
            rng=SeededRNG.from_state(data['rng']),
            events=[GameEvent.from_dict(e) for e in data.get('events', [])],
        )


# ============================================================
# RESULTS
# ============================================================

@dataclass
class TickResult:
    """Everything one tick changed."""
    tick: int
    day: int
    candles: Dict[str, Candle] = field(default_factory=dict)
    flagged: List[str] = field(default_factory=list)
    rugged: List[str] = field(default_factory=list)
    market_events: List[str] = field(default_factory=list)
    fills: List[Tuple[LimitOrder, Trade]] = field(default_factory=list)
    cancelled_orders: List[LimitOrder] = field(default_factory=list)
    resolved_calls: List[SocialPost] = field(default_factory=list)
    end_of_day: bool = False
    debunked: List[NewsArticle] = field(default_factory=list)
    articles: List[NewsArticle] = field(default_factory=list)
    launched: List[Asset] = field(default_factory=list)
    unlocked: List[str] = field(default_factory=list)
    events: List[GameEvent] = field(default_factory=list)
    net_worth_usd: float = 0.0

    def to_dict(self) -> dict:
        return {
            'tick': self.tick,
            'day': self.day,
            'prices': {k: c.close for k, c in self.candles.items()},
            'flagged': list(self.flagged),
            'rugged': list(self.rugged),
            'market_events': list(self.market_events),
            'fills': [o.id for o, _ in self.fills],
            'cancelled_orders': [o.id for o in self.cancelled_orders],
            'resolved_calls': [p.id for p in self.resolved_calls],
            'end_of_day': self.end_of_day,
            'debunked': [a.id for a in self.debunked],
            'articles': [a.id for a in self.articles],
            'launched': [a.id for a in self.launched],
            'unlocked': list(self.unlocked),
            'net_worth_usd': self.net_worth_usd,
        }


@dataclass
class PostResult:
    success: bool
    message: str = ""
    failure: Optional[FailureKind] = None
    post: Optional[SocialPost] = None


@dataclass
class ArticleResult:
    success: bool
    message: str = ""
    failure: Optional[FailureKind] = None
    article: Optional[NewsArticle] = None


@dataclass
class EngineStats:
    """Game engine statistics"""
    ticks: int = 0
    trades: int = 0
    rejected_trades: int = 0
    limit_fills: int = 0
    rugs: int = 0
    posts: int = 0
    articles: int = 0
    market_events: int = 0
    operations: int = 0

    def to_dict(self) -> dict:
        return {
            'ticks': self.ticks,
            'trades': self.trades,
            'rejected_trades': self.rejected_trades,
            'limit_fills': self.limit_fills,
            'rugs': self.rugs,
            'posts': self.posts,
            'articles': self.articles,
            'market_events': self.market_events,
            'operations': self.operations,
        }


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


# ============================================================
# ENGINE
# ============================================================

class GameEngine:
    """
    Single entry point for a running game.

    Commands return result objects; expected failures never raise.
    """

    def __init__(
        self,
        state: GameState,
        config: Optional[SimConfig] = None,
        news_templates: Optional[List[NewsTemplate]] = None,
        persistence: Optional[PersistenceWorker] = None,
    ):
        """
        Args:
            state: Game state to drive
            config: Simulation configuration
            news_templates: Catalog for the daily news roll
            persistence: Background saver notified after each commit
        """
        self.state = state
        self.config = config or DEFAULT_CONFIG
        self.news_templates = news_templates or []
        self.persistence = persistence

        if state.clock.ticks_per_day != self.config.ticks_per_day:
            raise ValueError(
                f"state runs {state.clock.ticks_per_day} ticks/day, "
                f"config expects {self.config.ticks_per_day}"
            )

        # Components
        self.price_engine = PriceEngine(self.config.price, self.config.ticks_per_day)
        self.rug_model = RugModel(self.config.risk, self.config.price.min_price)
        self.executor = TradeExecutor(self.config.trading)
        self.limit_book = LimitOrderBook(self.executor)
        self.event_engine = MarketEvents(self.config.events, self.config.price.min_price)
        self.ops_desk = OperationsDesk(self.config.operations, self.rug_model)

        self.stats = EngineStats()
        self._lock = threading.RLock()

    @classmethod
    def new_game(
        cls,
        assets: Optional[List[Asset]] = None,
        news_templates: Optional[List[NewsTemplate]] = None,
        seed: Optional[int] = None,
        config: Optional[SimConfig] = None,
        persistence: Optional[PersistenceWorker] = None,
    ) -> 'GameEngine':
        """Start a fresh game; bundled catalogs fill in what is not given."""
        config = config or DEFAULT_CONFIG
        if assets is None:
            assets = load_asset_catalog()
        if news_templates is None and config.daily_news:
            news_templates = load_news_catalog()
        state = GameState.new(assets, seed, config)
        logger.info(f"New game: {len(assets)} assets, seed={seed}")
        return cls(state, config, news_templates, persistence)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: GameSnapshot,
        config: Optional[SimConfig] = None,
        news_templates: Optional[List[NewsTemplate]] = None,
        persistence: Optional[PersistenceWorker] = None,
    ) -> 'GameEngine':
        """Cold start from a saved snapshot."""
        config = config or DEFAULT_CONFIG
        if news_templates is None and config.daily_news:
            news_templates = load_news_catalog()
        state = GameState.from_dict(snapshot.state, config)
        logger.info(f"Restored game at tick {state.clock.tick}")
        return cls(state, config, news_templates, persistence)

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    @property
    def tick(self) -> int:
        return self.state.clock.tick

    @property
    def day(self) -> int:
        return self.state.clock.day

    @property
    def player(self) -> Player:
        return self.state.player

    def asset(self, asset_id: str) -> Optional[Asset]:
        return self.state.registry.get(asset_id)

    def summary(self) -> PortfolioSummary:
        with self._lock:
            return summarize(self.state.player, self.state.registry.all(),
                             self.config.trading.dust_threshold)

    def display_holdings(self) -> Dict[str, float]:
        """Holdings with dust below the configured threshold shown as zero."""
        with self._lock:
            return self.state.player.display_holdings(self.config.trading.dust_threshold)

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return GameSnapshot(state=self.state.to_dict())

    # ------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------

    def set_market_open(self, is_open: bool):
        with self._lock:
            self.state.clock.market_open = bool(is_open)

    def advance_tick(self) -> TickResult:
        """Run one full tick."""
        with self._lock:
            s = self.state
            tick = s.clock.next_tick
            result = TickResult(tick=tick, day=s.clock.day_of(tick))

            # Step 1: Hype nudges from posts and news
            for asset_id, delta in s.shocks.take_hype(tick):
                asset = s.registry.get(asset_id)
                if asset is None or asset.rugged:
                    continue
                s.registry.update(asset.evolve(social_hype=_clamp01(asset.social_hype + delta)))

            # Step 2: Prices
            priced = self.price_engine.advance_tick(s.registry.all(), s.shocks.shocks, s.rng, tick)
            s.registry.update_many(priced.updated_assets)
            result.candles = priced.new_candles

            # Step 3: Rugs and flags
            for asset in s.registry.all():
                evaluation = self.rug_model.evaluate(asset, s.rng, tick)
                if evaluation.asset is asset:
                    continue
                s.registry.update(evaluation.asset)

                if evaluation.rugged:
                    self.stats.rugs += 1
                    result.rugged.append(asset.id)
                    s.player, cancelled = self.limit_book.cancel_for_asset(
                        s.player, asset.id, FailureKind.ASSET_RUGGED.value
                    )
                    result.cancelled_orders.extend(cancelled)
                    self._emit(result, 'rug', f"{asset.symbol} got rugged. Liquidity is gone.",
                               asset.id, 'error')
                elif evaluation.flag_changed and evaluation.asset.flagged:
                    result.flagged.append(asset.id)
                    self._emit(result, 'flag', f"{asset.symbol} is looking sketchy "
                               f"({evaluation.probability:.2%} rug risk per tick)", asset.id, 'warning')

            # Step 4: Market events
            if self.config.market_events:
                roll = self.event_engine.roll(s.registry.all(), s.rng, tick)
                s.registry.update_many(roll.updated_assets)
                for event in roll.events:
                    self.stats.market_events += 1
                    result.market_events.append(event.kind.value)
                    severity = 'success' if event.new_price > event.old_price else 'error'
                    self._emit(result, 'market', event.message, event.asset_id, severity)
                for asset_id in roll.exit_scams:
                    self.stats.rugs += 1
                    result.rugged.append(asset_id)
                    s.player, cancelled = self.limit_book.cancel_for_asset(
                        s.player, asset_id, FailureKind.ASSET_RUGGED.value
                    )
                    result.cancelled_orders.extend(cancelled)
                if roll.scrutiny_delta:
                    s.player.adjust_stat('scrutiny', roll.scrutiny_delta)

            # Step 5: Limit orders
            resolution = self.limit_book.resolve(s.player, s.registry.get, tick, s.clock.market_open)
            s.player = resolution.player
            result.fills = resolution.fills
            result.cancelled_orders.extend(resolution.cancelled)
            for order, trade in resolution.fills:
                self.stats.limit_fills += 1
                self._emit(result, 'fill', f"Limit {order.side.value} {trade.symbol} filled "
                           f"@ ${trade.price_per_unit:.6f}", order.asset_id)
            for order in resolution.cancelled:
                self._emit(result, 'cancel', f"Limit order {order.id} cancelled: {order.cancel_reason}",
                           order.asset_id, 'warning')

            # Step 6: Analysis calls
            result.resolved_calls = s.social.resolve_analysis_calls(tick, s.registry.prices())
            for post in result.resolved_calls:
                verdict = "Correct call!" if post.call.correct else "Wrong call."
                self._emit(result, 'call', f"{verdict} {post.call.direction} "
                           f"{post.asset_id} moved {post.call.change_pct:+.1f}%", post.asset_id,
                           'success' if post.call.correct else 'warning')
            self._sync_influence()

            # Step 7: Bookkeeping
            s.clock.advance()
            self._sample_net_worth(tick)
            s.shocks.prune(tick)

            # Step 8: End of day
            if s.clock.is_last_of_day(tick):
                self._end_of_day(result)

            result.net_worth_usd = s.player.net_worth_usd
            self.stats.ticks += 1
            self._persist()
            return result

    def execute_trade(self, order: Order) -> ExecutionResult:
        """Market buy or sell at the current price."""
        with self._lock:
            s = self.state
            asset = s.registry.get(order.asset_id)
            result = self.executor.execute(order, asset, s.player, s.clock.tick, s.clock.market_open)

            if result.success:
                player = result.player
                player.net_worth_usd = net_worth(player, s.registry.prices())
                s.player = player
                self.stats.trades += 1
                self._persist()
                return result

            self.stats.rejected_trades += 1
            if result.failure == FailureKind.ASSET_RUGGED:
                s.player, _ = self.limit_book.cancel_for_asset(
                    s.player, order.asset_id, FailureKind.ASSET_RUGGED.value
                )
            return result

    def place_limit_order(
        self,
        asset_id: str,
        side: Union[OrderSide, str],
        trigger_price: float,
        units: float,
    ) -> OrderResult:
        with self._lock:
            s = self.state
            try:
                side = OrderSide(side.upper()) if isinstance(side, str) else side
            except ValueError:
                return OrderResult(False, f"unknown side {side!r}", FailureKind.VALIDATION)

            result = self.limit_book.place(
                s.player, s.registry.get(asset_id), side, trigger_price, units, s.clock.tick
            )
            if result.success:
                s.player = result.player
                self._persist()
            return result

    def cancel_limit_order(self, order_id: str) -> OrderResult:
        with self._lock:
            result = self.limit_book.cancel(self.state.player, order_id)
            if result.success:
                self.state.player = result.player
                self._persist()
            return result

    def create_post(
        self,
        post_type: Union[PostType, str],
        asset_id: str,
        content: str,
        call: Optional[AnalysisCall] = None,
    ) -> PostResult:
        """Publish a social post; its shock lands on the next tick."""
        with self._lock:
            s = self.state
            try:
                post_type = PostType(post_type) if isinstance(post_type, str) else post_type
            except ValueError:
                return PostResult(False, f"unknown post type {post_type!r}", FailureKind.VALIDATION)

            asset = s.registry.get(asset_id)
            error = s.social.validate(post_type, asset, call)
            if error:
                return PostResult(False, error, FailureKind.VALIDATION)
            if asset.rugged:
                return PostResult(False, f"{asset.symbol} was rugged. Nobody is listening.",
                                  FailureKind.ASSET_RUGGED)

            post = s.social.create_post(
                post_type, asset, content, s.clock.tick, s.clock.day, s.rng, s.shocks, call
            )
            if post_type == PostType.SHILL:
                s.player.adjust_stat('exposure', 1.0)
            elif post_type == PostType.FUD:
                s.player.adjust_stat('scrutiny', 0.5)
            self._sync_influence()

            self.stats.posts += 1
            self._persist()
            return PostResult(True, f"Posted {post_type.value} on {asset.symbol} "
                              f"(+{post.followers_delta:,} followers)", post=post)

    def publish_article(
        self,
        asset_id: str,
        headline: str,
        sentiment: str,
        weight: int = 50,
        category: str = "general",
        is_fake: bool = False,
        actor: str = DEFAULT_ACTOR,
    ) -> ArticleResult:
        with self._lock:
            s = self.state
            asset = s.registry.get(asset_id)
            if asset is None:
                return ArticleResult(False, f"unknown asset {asset_id!r}", FailureKind.VALIDATION)
            if sentiment not in SENTIMENT_DIRECTION:
                return ArticleResult(False, f"unknown sentiment {sentiment!r}", FailureKind.VALIDATION)
            if not headline.strip():
                return ArticleResult(False, "headline is empty", FailureKind.VALIDATION)
            if asset.rugged:
                return ArticleResult(False, f"{asset.symbol} was rugged", FailureKind.ASSET_RUGGED)

            article = s.news.publish_article(
                asset, headline, sentiment, weight, category, is_fake,
                s.clock.tick, s.clock.day, s.shocks, actor,
            )
            self.stats.articles += 1
            self._persist()
            return ArticleResult(True, "published", article=article)

    def debunk_article(self, article_id: str) -> ArticleResult:
        """Expose a fake; its remaining shock stops from the next tick."""
        with self._lock:
            s = self.state
            try:
                article = s.news.debunk(article_id, s.clock.tick, s.clock.day, s.shocks)
            except KeyError:
                return ArticleResult(False, f"no article {article_id!r}", FailureKind.VALIDATION)
            except ValueError as e:
                return ArticleResult(False, str(e), FailureKind.VALIDATION)
            self._persist()
            return ArticleResult(True, "debunked", article=article)

    def run_operation(
        self,
        kind: Union[OperationKind, str],
        asset_id: Optional[str] = None,
        budget: float = 0.0,
        recipient: str = 'minister',
    ) -> OperationResult:
        """Pump, wash, audit or bribe. Needs the operations unlock."""
        with self._lock:
            s = self.state
            try:
                kind = OperationKind(kind.lower()) if isinstance(kind, str) else kind
            except ValueError:
                return OperationResult(False, f"unknown operation {kind!r}", FailureKind.VALIDATION)
            if kind in (OperationKind.LAUNCH_TOKEN, OperationKind.RUG_OWN_TOKEN):
                return OperationResult(False, f"use {kind.value}() for that", FailureKind.VALIDATION)
            if not s.unlocks.is_unlocked('operations'):
                return OperationResult(False, "Operations Console is locked", FailureKind.LOCKED)

            asset = s.registry.get(asset_id) if asset_id else None
            tick = s.clock.tick
            if kind == OperationKind.PUMP:
                result = self.ops_desk.pump(asset, s.player, budget, s.rng, tick)
            elif kind == OperationKind.WASH:
                result = self.ops_desk.wash(asset, s.player, budget, tick)
            elif kind == OperationKind.AUDIT:
                result = self.ops_desk.audit(asset, s.player, budget, s.rng, tick)
            else:
                result = self.ops_desk.bribe(s.player, budget, recipient, s.rng, tick)

            if result.success:
                self._commit_operation(result)
            return result

    def launch_token(
        self,
        symbol: str,
        name: str,
        dev_reserve_pct: float,
        liquidity_usd: float,
        audit_budget: float = 0.0,
    ) -> OperationResult:
        """List the player's own token. Needs the influencer unlock."""
        with self._lock:
            s = self.state
            if not s.unlocks.is_unlocked('influencer'):
                return OperationResult(False, "Influencer Toolkit is locked", FailureKind.LOCKED)
            if player_token_id(symbol.strip()) in s.registry or s.registry.by_symbol(symbol.strip()):
                return OperationResult(False, f"symbol {symbol!r} is taken", FailureKind.VALIDATION)

            result = self.ops_desk.launch_token(
                s.player, symbol, name, dev_reserve_pct, liquidity_usd, audit_budget,
                s.social.stats.followers, s.rng, s.clock.tick,
            )
            if result.success:
                self._commit_operation(result)
            return result

    def rug_own_token(self, asset_id: str) -> OperationResult:
        """Pull the player token's liquidity. The player is blacklisted afterwards."""
        with self._lock:
            s = self.state
            result = self.ops_desk.rug_own_token(s.registry.get(asset_id), s.player, s.rng, s.clock.tick)
            if result.success:
                self._commit_operation(result)
                s.player, _ = self.limit_book.cancel_for_asset(
                    s.player, asset_id, FailureKind.ASSET_RUGGED.value
                )
                self.stats.rugs += 1
            return result

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _end_of_day(self, result: TickResult):
        s = self.state
        tick = s.clock.tick
        day = s.clock.day          # The day about to start
        result.end_of_day = True

        # Fake news gets caught
        for article_id in s.news.debunk_candidates(day, s.rng):
            article = s.news.debunk(article_id, tick, day, s.shocks)
            result.debunked.append(article)
            self._emit(result, 'debunk', f"DEBUNKED: {article.headline}", article.asset_id, 'warning')

        # Tomorrow's headlines
        if self.config.daily_news and self.news_templates:
            articles = s.news.roll_daily_news(
                s.registry.all(), self.news_templates, tick, day, s.rng, s.shocks
            )
            result.articles.extend(articles)
            for article in articles:
                self._emit(result, 'news', article.headline, article.asset_id)

        # New coins
        if self.config.coin_launches:
            since = days_since_last_launch(s.registry.all(), day)
            if should_launch_coin(since, s.rng):
                coin = generate_new_coin(day, s.rng)
                if coin.id not in s.registry:
                    s.registry.add(coin)
                    result.launched.append(coin)
                    self._emit(result, 'launch', f"New coin launched: {coin.name} ({coin.symbol})", coin.id)

        # Audits go stale
        for asset in s.registry.live():
            decayed = self.rug_model.decay_audit(asset)
            if decayed is not asset:
                s.registry.update(decayed)

        # Unlocks
        stats = s.social.stats
        metrics = {
            'followers': stats.followers,
            'engagement': stats.engagement,
            'credibility': stats.credibility,
            'influence': stats.influence,
            'net_worth': s.player.net_worth_usd,
        }
        for feature in s.unlocks.check(metrics):
            result.unlocked.append(feature.id)
            self._emit(result, 'unlock', f"Unlocked {feature.name}: {feature.perk}", severity='success')

        logger.info(f"Day {day - 1} closed | net worth ${s.player.net_worth_usd:,.2f}")

    def _commit_operation(self, result: OperationResult):
        s = self.state
        if result.asset is not None:
            if result.asset.id in s.registry:
                s.registry.update(result.asset)
            else:
                s.registry.add(result.asset)
        player = result.player
        player.net_worth_usd = net_worth(player, s.registry.prices())
        s.player = player
        severity = 'error' if result.operation.kind == OperationKind.RUG_OWN_TOKEN else 'info'
        self._emit(None, 'op', result.message, result.operation.asset_id, severity)
        self.stats.operations += 1
        self._persist()

    def _sample_net_worth(self, tick: int):
        s = self.state
        player = s.player
        player.net_worth_usd = net_worth(player, s.registry.prices())
        player.net_worth_history.append([tick, player.net_worth_usd])
        cap = self.config.trading.max_history_points
        if len(player.net_worth_history) > cap:
            del player.net_worth_history[:-cap]

    def _sync_influence(self):
        self.state.player.set_stat('influence', self.state.social.stats.influence * 10)

    def _emit(
        self,
        result: Optional[TickResult],
        kind: str,
        message: str,
        asset_id: Optional[str] = None,
        severity: str = "info",
    ):
        event = GameEvent(
            tick=self.state.clock.tick if result is None else result.tick,
            kind=kind,
            message=message,
            asset_id=asset_id,
            severity=severity,
        )
        events = self.state.events
        events.append(event)
        if len(events) > self.config.max_events:
            del events[:-self.config.max_events]
        if result is not None:
            result.events.append(event)

    def _persist(self):
        if self.persistence is None:
            return
        self.persistence.submit(GameSnapshot(state=self.state.to_dict()))
