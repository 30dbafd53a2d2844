"""
Sentiment Signals Module
========================

Social posts and news articles turned into price shocks.

Components:
- ShockBook: queue of decaying drifts consumed by the price engine
- SocialFeed: player posts, followers, credibility, analysis calls
- NewsDesk: articles, fakes and debunks
"""

from .shocks import ShockBook, SentimentShock, sentiment_direction
from .social import SocialFeed, SocialPost, SocialStats, PostType, AnalysisCall
from .news import NewsDesk, NewsArticle, NewsTemplate

__all__ = [
    'ShockBook',
    'SentimentShock',
    'sentiment_direction',
    'SocialFeed',
    'SocialPost',
    'SocialStats',
    'PostType',
    'AnalysisCall',
    'NewsDesk',
    'NewsArticle',
    'NewsTemplate',
]
