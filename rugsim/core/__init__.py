"""
Core simulation modules.
"""
from .asset import Asset, AssetTier, Candle, PriceHistory, MIN_PRICE, aggregate_candles
from .clock import Clock
from .registry import AssetRegistry
from .risk import RugModel, RugEvaluation, RiskResult
from .rng import SeededRNG
from .launch import generate_new_coin, should_launch_coin, days_since_last_launch

__all__ = [
    'Asset', 'AssetTier', 'Candle', 'PriceHistory', 'MIN_PRICE', 'aggregate_candles',
    'Clock',
    'AssetRegistry',
    'RugModel', 'RugEvaluation', 'RiskResult',
    'SeededRNG',
    'generate_new_coin', 'should_launch_coin', 'days_since_last_launch',
]
