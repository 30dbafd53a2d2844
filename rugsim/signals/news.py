"""
News Desk - Articles, fake news and debunks.

Every article queues a sentiment shock scaled by its weight. Fakes are
eventually debunked: the remaining shock is zeroed, part of the hype is
taken back, and the next identical fake from the same actor is damped.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..config import NewsConfig
from ..core.asset import Asset
from .shocks import ShockBook, sentiment_direction

logger = logging.getLogger(__name__)

DEFAULT_ACTOR = "newswire"


@dataclass(frozen=True)
class NewsTemplate:
    """Catalog entry; `{SYMBOL}` in the headline is replaced on publish."""
    headline: str
    sentiment: str
    category: str
    is_fake: bool = False
    weight: int = 50

    def render(self, symbol: str) -> str:
        return self.headline.replace('{SYMBOL}', symbol)


@dataclass
class NewsArticle:
    id: str
    tick: int
    day: int
    asset_id: str
    asset_symbol: str
    headline: str
    sentiment: str
    weight: int
    magnitude: float
    category: str
    is_fake: bool = False
    actor: str = DEFAULT_ACTOR
    hype_delta: float = 0.0
    debunked_day: Optional[int] = None
    debunked_tick: Optional[int] = None

    @property
    def is_debunked(self) -> bool:
        return self.debunked_day is not None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'tick': self.tick,
            'day': self.day,
            'asset_id': self.asset_id,
            'asset_symbol': self.asset_symbol,
            'headline': self.headline,
            'sentiment': self.sentiment,
            'weight': self.weight,
            'magnitude': self.magnitude,
            'category': self.category,
            'is_fake': self.is_fake,
            'actor': self.actor,
            'hype_delta': self.hype_delta,
            'debunked_day': self.debunked_day,
            'debunked_tick': self.debunked_tick,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'NewsArticle':
        return cls(**data)


def _twin_key(actor: str, headline: str) -> str:
    return f"{actor}|{headline.strip().lower()}"


class NewsDesk:
    """Append-only article log plus debunk bookkeeping."""

    def __init__(self, config: Optional[NewsConfig] = None):
        self.config = config or NewsConfig()
        self.articles: List[NewsArticle] = []
        self.debunked_twins: Dict[str, int] = {}

    def get(self, article_id: str) -> Optional[NewsArticle]:
        for article in self.articles:
            if article.id == article_id:
                return article
        return None

    def damping_for(self, actor: str, headline: str) -> float:
        prior = self.debunked_twins.get(_twin_key(actor, headline), 0)
        return self.config.fake_damping ** prior

    def publish_article(
        self,
        asset: Asset,
        headline: str,
        sentiment: str,
        weight: int,
        category: str,
        is_fake: bool,
        tick: int,
        day: int,
        shocks: ShockBook,
        actor: str = DEFAULT_ACTOR,
    ) -> NewsArticle:
        direction = sentiment_direction(sentiment)
        weight = int(max(0, min(100, weight)))
        magnitude = weight / 100
        if is_fake:
            magnitude *= self.damping_for(actor, headline)

        article_id = f"N{len(self.articles) + 1:06d}"
        shock = shocks.enqueue(asset.id, article_id, direction, magnitude, tick)
        article = NewsArticle(
            id=article_id,
            tick=tick,
            day=day,
            asset_id=asset.id,
            asset_symbol=asset.symbol,
            headline=headline,
            sentiment=sentiment,
            weight=weight,
            magnitude=magnitude,
            category=category,
            is_fake=is_fake,
            actor=actor,
            hype_delta=shock.hype_delta,
        )
        self.articles.append(article)
        logger.info(f"NEWS [{article.asset_symbol}] {headline} ({sentiment}, w={weight})")
        return article

    def debunk(self, article_id: str, tick: int, day: int, shocks: ShockBook) -> NewsArticle:
        """
        Debunk a fake article.

        Raises:
            KeyError: unknown article
            ValueError: article is real or already debunked
        """
        article = self.get(article_id)
        if article is None:
            raise KeyError(article_id)
        if not article.is_fake:
            raise ValueError(f"{article_id} is not fake news")
        if article.is_debunked:
            raise ValueError(f"{article_id} was already debunked")

        article.debunked_day = day
        article.debunked_tick = tick

        hype_dropped = shocks.void_source(article.id, tick)
        if not hype_dropped and article.hype_delta:
            reversal = -article.hype_delta * self.config.hype_reversal_ratio
            shocks.schedule_hype(article.asset_id, reversal, tick + 1, f"{article.id}:debunk")

        key = _twin_key(article.actor, article.headline)
        self.debunked_twins[key] = self.debunked_twins.get(key, 0) + 1
        logger.info(f"DEBUNKED: {article.headline}")
        return article

    def debunk_candidates(self, day: int, rng) -> List[str]:
        """Roll a debunk for every live fake; odds grow with age."""
        c = self.config
        found = []
        for article in self.articles:
            if not article.is_fake or article.is_debunked:
                continue
            days_since = day - article.day
            if days_since < 1:
                continue
            chance = min(c.max_debunk_chance, days_since * c.debunk_chance_per_day)
            if rng.chance(chance):
                found.append(article.id)
        return found

    def roll_daily_news(
        self,
        assets: List[Asset],
        templates: List[NewsTemplate],
        tick: int,
        day: int,
        rng,
        shocks: ShockBook,
    ) -> List[NewsArticle]:
        live = [a for a in assets if not a.rugged]
        if not live or not templates:
            return []

        count = rng.integers(*self.config.daily_articles)
        articles = []
        for _ in range(count):
            asset = rng.choice(live)
            template = rng.choice(templates)
            articles.append(self.publish_article(
                asset=asset,
                headline=template.render(asset.symbol),
                sentiment=template.sentiment,
                weight=template.weight,
                category=template.category,
                is_fake=template.is_fake,
                tick=tick,
                day=day,
                shocks=shocks,
            ))
        return articles

    def latest(self, count: int = 10) -> List[NewsArticle]:
        return list(reversed(self.articles[-count:]))

    def to_dict(self) -> dict:
        return {
            'articles': [a.to_dict() for a in self.articles],
            'debunked_twins': dict(self.debunked_twins),
        }

    @classmethod
    def from_dict(cls, data: dict, config: Optional[NewsConfig] = None) -> 'NewsDesk':
        desk = cls(config)
        desk.articles = [NewsArticle.from_dict(a) for a in data.get('articles', [])]
        desk.debunked_twins = {k: int(v) for k, v in data.get('debunked_twins', {}).items()}
        return desk
