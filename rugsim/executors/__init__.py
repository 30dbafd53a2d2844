"""
Executors Module
================

Trade execution and paid operations against simulated prices.

Usage:
    from rugsim.executors import TradeExecutor, LimitOrderBook

    executor = TradeExecutor(config.trading)
    book = LimitOrderBook(executor)
"""

from .simulated import TradeExecutor, FeeModel, ExecutionStats
from .limit_orders import LimitOrderBook, LimitResolution, CANCELLED_BY_PLAYER
from .operations import OperationsDesk, BRIBE_RECIPIENTS, player_token_id

__all__ = [
    # Market orders
    'TradeExecutor',
    'FeeModel',
    'ExecutionStats',
    # Limit orders
    'LimitOrderBook',
    'LimitResolution',
    'CANCELLED_BY_PLAYER',
    # Operations
    'OperationsDesk',
    'BRIBE_RECIPIENTS',
    'player_token_id',
]
