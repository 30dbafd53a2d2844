"""
Rug Pull Simulator - Market Simulation & Trading Engine
=======================================================

Tick-driven crypto market for a satirical trading game: prices, rug
pulls, market and limit orders, social posts and news that move sentiment,
market events and paid operations.

Usage:
    from rugsim import GameEngine, Order

    engine = GameEngine.new_game(seed=42)
    engine.execute_trade(Order.buy("pepe", 500))
    result = engine.advance_tick()

Determinism: every random draw goes through the game's SeededRNG, so the
same seed and the same commands replay the same game.
"""

# Engine
from .engine import GameEngine, GameState, TickResult, PostResult, ArticleResult, EngineStats

# Configuration
from .config import (
    SimConfig,
    PriceConfig,
    RiskConfig,
    TradingConfig,
    ShockConfig,
    SocialConfig,
    NewsConfig,
    EventConfig,
    OperationsConfig,
    DEFAULT_CONFIG,
    CALM_CONFIG,
    RUG_SEASON_CONFIG,
)

# Data models
from .models import (
    Order,
    OrderSide,
    OrderType,
    FailureKind,
    Trade,
    CostBasis,
    LimitOrder,
    LimitOrderStatus,
    Player,
    ExecutionResult,
    OrderResult,
    OperationKind,
    Operation,
    OperationResult,
    GameEvent,
)

# Core
from .core import Asset, AssetTier, Candle, AssetRegistry, Clock, RugModel, SeededRNG

# Simulation and operations
from .simulation import MarketEvents
from .executors import OperationsDesk

# Signals
from .signals import PostType, AnalysisCall, NewsTemplate

# Persistence
from .persistence import (
    GameSnapshot,
    SnapshotStore,
    JsonFileStore,
    MemoryStore,
    PersistenceWorker,
    PersistenceError,
)

# Catalogs
from .catalog import load_asset_catalog, load_news_catalog, CatalogError


__all__ = [
    # Engine
    'GameEngine',
    'GameState',
    'TickResult',
    'PostResult',
    'ArticleResult',
    'EngineStats',

    # Config
    'SimConfig',
    'PriceConfig',
    'RiskConfig',
    'TradingConfig',
    'ShockConfig',
    'SocialConfig',
    'NewsConfig',
    'EventConfig',
    'OperationsConfig',
    'DEFAULT_CONFIG',
    'CALM_CONFIG',
    'RUG_SEASON_CONFIG',

    # Models
    'Order',
    'OrderSide',
    'OrderType',
    'FailureKind',
    'Trade',
    'CostBasis',
    'LimitOrder',
    'LimitOrderStatus',
    'Player',
    'ExecutionResult',
    'OrderResult',
    'OperationKind',
    'Operation',
    'OperationResult',
    'GameEvent',

    # Core
    'Asset',
    'AssetTier',
    'Candle',
    'AssetRegistry',
    'Clock',
    'RugModel',
    'SeededRNG',

    # Simulation and operations
    'MarketEvents',
    'OperationsDesk',

    # Signals
    'PostType',
    'AnalysisCall',
    'NewsTemplate',

    # Persistence
    'GameSnapshot',
    'SnapshotStore',
    'JsonFileStore',
    'MemoryStore',
    'PersistenceWorker',
    'PersistenceError',

    # Catalogs
    'load_asset_catalog',
    'load_news_catalog',
    'CatalogError',
]
