"""
Social Feed - Player posts that move sentiment and build a following.

Usage:
    from rugsim.signals import SocialFeed, PostType, AnalysisCall

    feed = SocialFeed(config.social, ticks_per_day=24)
    post = feed.create_post(PostType.SHILL, asset, "wagmi", tick, day, rng, shocks)

    # Every tick
    resolved = feed.resolve_analysis_calls(tick, registry.prices())

Posting fatigue: the nth post of a day is scaled by 1.0, 0.6, 0.3, 0.15,
then halves for every post after that.
"""
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..config import SocialConfig
from ..core.asset import Asset
from .shocks import ShockBook, sentiment_direction

logger = logging.getLogger(__name__)


class PostType(Enum):
    SHILL = "shill"
    ANALYSIS = "analysis"
    MEME = "meme"
    FUD = "fud"


POST_SENTIMENT = {
    PostType.SHILL: 'bullish',
    PostType.MEME: 'bullish',
    PostType.FUD: 'bearish',
}

CALL_DIRECTIONS = ('long', 'short')


@dataclass
class AnalysisCall:
    """Directional call attached to an analysis post."""
    direction: str              # 'long' | 'short'
    timeframe: str              # '1d' | '3d' | '1w'
    entry_price: float = 0.0
    resolve_tick: int = 0
    resolved: bool = False
    correct: Optional[bool] = None
    change_pct: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            'direction': self.direction,
            'timeframe': self.timeframe,
            'entry_price': self.entry_price,
            'resolve_tick': self.resolve_tick,
            'resolved': self.resolved,
            'correct': self.correct,
            'change_pct': self.change_pct,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AnalysisCall':
        return cls(**data)


@dataclass
class SocialPost:
    id: str
    tick: int
    day: int
    post_type: PostType
    asset_id: str
    content: str
    sentiment: str
    magnitude: float
    engagement: float
    fatigue: float
    followers_delta: int
    viral: bool = False
    call: Optional[AnalysisCall] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'tick': self.tick,
            'day': self.day,
            'post_type': self.post_type.value,
            'asset_id': self.asset_id,
            'content': self.content,
            'sentiment': self.sentiment,
            'magnitude': self.magnitude,
            'engagement': self.engagement,
            'fatigue': self.fatigue,
            'followers_delta': self.followers_delta,
            'viral': self.viral,
            'call': self.call.to_dict() if self.call else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SocialPost':
        call = data.get('call')
        return cls(
            id=data['id'],
            tick=int(data['tick']),
            day=int(data['day']),
            post_type=PostType(data['post_type']),
            asset_id=data['asset_id'],
            content=data['content'],
            sentiment=data['sentiment'],
            magnitude=float(data['magnitude']),
            engagement=float(data['engagement']),
            fatigue=float(data['fatigue']),
            followers_delta=int(data['followers_delta']),
            viral=bool(data.get('viral', False)),
            call=AnalysisCall.from_dict(call) if call else None,
        )


@dataclass
class SocialStats:
    followers: int = 100
    engagement: float = 0.05        # Moving average
    credibility: float = 0.5
    influence: float = 0.0          # 0-10
    posts_today: int = 0
    last_post_day: int = 0
    total_posts: int = 0
    correct_calls: int = 0
    total_calls: int = 0

    @property
    def call_accuracy(self) -> float:
        return self.correct_calls / self.total_calls if self.total_calls > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            'followers': self.followers,
            'engagement': self.engagement,
            'credibility': self.credibility,
            'influence': self.influence,
            'posts_today': self.posts_today,
            'last_post_day': self.last_post_day,
            'total_posts': self.total_posts,
            'correct_calls': self.correct_calls,
            'total_calls': self.total_calls,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SocialStats':
        return cls(**data)


class SocialFeed:
    """Post creation, follower growth and analysis call scoring."""

    def __init__(self, config: Optional[SocialConfig] = None, ticks_per_day: int = 24):
        self.config = config or SocialConfig()
        self.ticks_per_day = ticks_per_day
        self.stats = SocialStats(
            followers=self.config.starting_followers,
            engagement=self.config.starting_engagement,
            credibility=self.config.starting_credibility,
        )
        self.posts: List[SocialPost] = []

    def fatigue_factor(self, post_number: int) -> float:
        """Multiplier for the nth post of a day (1-based)."""
        schedule = self.config.fatigue_schedule
        if post_number <= len(schedule):
            return schedule[max(post_number, 1) - 1]
        extra = post_number - len(schedule)
        return schedule[-1] * (self.config.fatigue_tail_decay ** extra)

    def validate(
        self,
        post_type: PostType,
        asset: Optional[Asset],
        call: Optional[AnalysisCall],
    ) -> Optional[str]:
        """Return an error message, or None if the post is acceptable."""
        if asset is None:
            return "unknown asset"
        if post_type == PostType.ANALYSIS:
            if call is None:
                return "analysis posts need a direction and timeframe"
            if call.direction not in CALL_DIRECTIONS:
                return f"unknown direction {call.direction!r}"
            if call.timeframe not in self.config.timeframe_days:
                return f"unknown timeframe {call.timeframe!r}"
        return None

    def create_post(
        self,
        post_type: PostType,
        asset: Asset,
        content: str,
        tick: int,
        day: int,
        rng,
        shocks: ShockBook,
        call: Optional[AnalysisCall] = None,
    ) -> SocialPost:
        """
        Publish a post and queue its sentiment shock for the next tick.

        Args:
            tick: Current clock tick (last processed)
            day: Day the post lands in
        """
        c = self.config
        s = self.stats

        # Step 1: Fatigue
        if day != s.last_post_day:
            s.posts_today = 0
            s.last_post_day = day
        s.posts_today += 1
        fatigue = self.fatigue_factor(s.posts_today)

        # Step 2: Engagement for this post
        engagement = rng.uniform(*c.engagement_range) * fatigue

        # Step 3: Followers (uses the running engagement average)
        viral_chance = c.viral_base_chance * (s.engagement * 10) / (s.posts_today ** 1.5)
        viral = rng.chance(viral_chance)
        spike = rng.uniform(*c.viral_spike_range) * (0.5 + s.credibility) if viral else 0.0
        base = c.follower_base[post_type.value]
        followers_delta = int(math.floor(
            base * s.engagement * (0.6 + 0.8 * s.credibility) * fatigue + spike
        ))

        # Step 4: Sentiment shock
        if post_type == PostType.ANALYSIS:
            sentiment = 'bullish' if call.direction == 'long' else 'bearish'
        else:
            sentiment = POST_SENTIMENT[post_type]
        reach = min(1.5, math.log10(s.followers + 1) / 3)
        magnitude = min(1.0, c.post_magnitude[post_type.value] * fatigue * reach * (0.5 + s.credibility))

        post_id = f"P{s.total_posts + 1:06d}"
        if call is not None:
            call = AnalysisCall(
                direction=call.direction,
                timeframe=call.timeframe,
                entry_price=asset.price,
                resolve_tick=tick + c.timeframe_days[call.timeframe] * self.ticks_per_day,
            )

        post = SocialPost(
            id=post_id,
            tick=tick,
            day=day,
            post_type=post_type,
            asset_id=asset.id,
            content=content,
            sentiment=sentiment,
            magnitude=magnitude,
            engagement=engagement,
            fatigue=fatigue,
            followers_delta=followers_delta,
            viral=viral,
            call=call,
        )
        self.posts.append(post)
        shocks.enqueue(asset.id, post_id, sentiment_direction(sentiment), magnitude, tick)

        # Step 5: Running stats
        s.followers = max(0, s.followers + followers_delta)
        s.engagement = c.engagement_smoothing * s.engagement + (1 - c.engagement_smoothing) * engagement
        s.total_posts += 1
        s.influence = self.influence()

        if viral:
            logger.info(f"Viral post {post_id}! +{followers_delta:,} followers")
        else:
            logger.debug(f"Posted {post_type.value} on {asset.symbol} (+{followers_delta} followers)")
        return post

    def influence(self) -> float:
        s = self.stats
        value = math.log10(s.followers + 1) * s.engagement * (0.5 + s.credibility)
        return max(0.0, min(10.0, value))

    def resolve_analysis_calls(self, tick: int, prices: Dict[str, float]) -> List[SocialPost]:
        """Score every call whose timeframe ran out by `tick`."""
        resolved = []
        for post in self.posts:
            call = post.call
            if call is None or call.resolved or tick < call.resolve_tick:
                continue
            price = prices.get(post.asset_id)
            if price is None or call.entry_price <= 0:
                continue

            change_pct = (price - call.entry_price) / call.entry_price * 100
            threshold = self.config.call_threshold_pct
            if call.direction == 'long':
                correct = change_pct >= threshold
            else:
                correct = change_pct <= -threshold

            call.resolved = True
            call.correct = correct
            call.change_pct = change_pct
            self._update_credibility(post, correct)
            resolved.append(post)
        return resolved

    def _update_credibility(self, post: SocialPost, correct: bool):
        c = self.config
        s = self.stats
        high_engagement = post.engagement > 0.08
        engagement_weight = 1.5 if high_engagement else 1.0
        k = 0.12 if high_engagement else 0.08
        timeframe_weight = c.timeframe_weights.get(post.call.timeframe, 1.0)
        impact = k * (1 if correct else -1) * engagement_weight * timeframe_weight

        low, high = c.credibility_bounds
        s.credibility = max(low, min(high, s.credibility + impact))
        s.total_calls += 1
        if correct:
            s.correct_calls += 1
        s.influence = self.influence()
        logger.info(
            f"Call {post.id} {'correct' if correct else 'wrong'} "
            f"({post.call.change_pct:+.1f}%), credibility {s.credibility:.2f}"
        )

    def to_dict(self) -> dict:
        return {
            'stats': self.stats.to_dict(),
            'posts': [p.to_dict() for p in self.posts],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        config: Optional[SocialConfig] = None,
        ticks_per_day: int = 24,
    ) -> 'SocialFeed':
        feed = cls(config, ticks_per_day)
        feed.stats = SocialStats.from_dict(data['stats'])
        feed.posts = [SocialPost.from_dict(p) for p in data.get('posts', [])]
        return feed
