"""
Market simulation.
"""
from .price_engine import PriceEngine, PriceTickResult, price_path
from .events import MarketEvents, MarketEvent, MarketEventKind, MarketEventRoll

__all__ = [
    'PriceEngine', 'PriceTickResult', 'price_path',
    'MarketEvents', 'MarketEvent', 'MarketEventKind', 'MarketEventRoll',
]
