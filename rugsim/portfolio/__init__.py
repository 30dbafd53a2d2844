from .analytics import (
    PositionView,
    WinLoss,
    PortfolioSummary,
    holdings_value,
    net_worth,
    unrealized_pnl,
    total_pnl,
    roi,
    win_loss,
    portfolio_table,
    best_worst_performers,
    max_drawdown,
    summarize,
)

__all__ = [
    'PositionView',
    'WinLoss',
    'PortfolioSummary',
    'holdings_value',
    'net_worth',
    'unrealized_pnl',
    'total_pnl',
    'roi',
    'win_loss',
    'portfolio_table',
    'best_worst_performers',
    'max_drawdown',
    'summarize',
]
