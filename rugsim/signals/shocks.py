"""
Sentiment Shocks - Queue of price drifts injected by posts and news.

A shock created while the clock reads tick T starts at T+1, so nothing
lands mid-tick. Its drift decays exponentially and stops after a bounded
window:

    drift(t) = direction * magnitude * drift_scale * decay ** (t - start)

for start <= t < start + duration, zero elsewhere, and zero from
`voided_from` onward once the source is debunked.
"""
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from ..config import ShockConfig

logger = logging.getLogger(__name__)


SENTIMENT_DIRECTION = {
    'bullish': 1,
    'neutral': 0,
    'bearish': -1,
}


def sentiment_direction(sentiment: str) -> int:
    try:
        return SENTIMENT_DIRECTION[sentiment]
    except KeyError:
        raise ValueError(f"unknown sentiment: {sentiment!r}")


@dataclass(frozen=True)
class SentimentShock:
    id: str
    asset_id: str
    source_id: str
    direction: int
    magnitude: float
    start_tick: int
    duration: int
    decay: float
    drift_scale: float
    hype_delta: float = 0.0
    voided_from: Optional[int] = None

    @property
    def end_tick(self) -> int:
        """First tick with no contribution."""
        return self.start_tick + self.duration

    def drift_at(self, tick: int) -> float:
        if tick < self.start_tick or tick >= self.end_tick:
            return 0.0
        if self.voided_from is not None and tick >= self.voided_from:
            return 0.0
        age = tick - self.start_tick
        return self.direction * self.magnitude * self.drift_scale * (self.decay ** age)

    def is_spent(self, tick: int) -> bool:
        """No contribution at any tick after `tick`."""
        if tick + 1 >= self.end_tick:
            return True
        return self.voided_from is not None and tick + 1 >= self.voided_from

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'asset_id': self.asset_id,
            'source_id': self.source_id,
            'direction': self.direction,
            'magnitude': self.magnitude,
            'start_tick': self.start_tick,
            'duration': self.duration,
            'decay': self.decay,
            'drift_scale': self.drift_scale,
            'hype_delta': self.hype_delta,
            'voided_from': self.voided_from,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SentimentShock':
        return cls(
            id=data['id'],
            asset_id=data['asset_id'],
            source_id=data['source_id'],
            direction=int(data['direction']),
            magnitude=float(data['magnitude']),
            start_tick=int(data['start_tick']),
            duration=int(data['duration']),
            decay=float(data['decay']),
            drift_scale=float(data['drift_scale']),
            hype_delta=float(data.get('hype_delta', 0.0)),
            voided_from=data.get('voided_from'),
        )


class ShockBook:
    """
    Pending and active shocks plus queued social hype nudges.

    Hype nudges are applied once, at the start of the tick they are due.
    """

    def __init__(self, config: Optional[ShockConfig] = None):
        self.config = config or ShockConfig()
        self.shocks: List[SentimentShock] = []
        self.pending_hype: List[Dict] = []     # {'tick', 'asset_id', 'delta', 'source_id'}
        self.next_seq = 1

    def enqueue(
        self,
        asset_id: str,
        source_id: str,
        direction: int,
        magnitude: float,
        now_tick: int,
    ) -> SentimentShock:
        c = self.config
        magnitude = max(0.0, magnitude)
        shock = SentimentShock(
            id=f"S{self.next_seq:06d}",
            asset_id=asset_id,
            source_id=source_id,
            direction=direction,
            magnitude=magnitude,
            start_tick=now_tick + 1,
            duration=c.duration,
            decay=c.decay,
            drift_scale=c.drift_scale,
            hype_delta=direction * magnitude * c.hype_scale,
        )
        self.next_seq += 1
        self.shocks.append(shock)
        if shock.hype_delta:
            self.schedule_hype(asset_id, shock.hype_delta, shock.start_tick, source_id)
        logger.debug(
            f"Shock {shock.id} on {asset_id}: dir={direction:+d} mag={magnitude:.3f} "
            f"from tick {shock.start_tick}"
        )
        return shock

    def schedule_hype(self, asset_id: str, delta: float, tick: int, source_id: str = ""):
        self.pending_hype.append({
            'tick': tick,
            'asset_id': asset_id,
            'delta': delta,
            'source_id': source_id,
        })

    def take_hype(self, tick: int) -> List[Tuple[str, float]]:
        """Pop hype nudges due at or before `tick`, in queue order."""
        due = [h for h in self.pending_hype if h['tick'] <= tick]
        self.pending_hype = [h for h in self.pending_hype if h['tick'] > tick]
        return [(h['asset_id'], h['delta']) for h in due]

    def active(self, tick: int) -> List[SentimentShock]:
        return [s for s in self.shocks if s.drift_at(tick) != 0.0]

    def drift_for(self, asset_id: str, tick: int) -> float:
        return sum(s.drift_at(tick) for s in self.shocks if s.asset_id == asset_id)

    def void_source(self, source_id: str, now_tick: int) -> bool:
        """
        Zero every shock from `source_id` from the next tick on.

        Returns True if the source's hype nudge had not been applied yet
        (it is dropped instead).
        """
        voided_from = now_tick + 1
        self.shocks = [
            replace(s, voided_from=voided_from)
            if s.source_id == source_id and s.voided_from is None else s
            for s in self.shocks
        ]
        before = len(self.pending_hype)
        self.pending_hype = [h for h in self.pending_hype if h['source_id'] != source_id]
        return len(self.pending_hype) < before

    def prune(self, tick: int) -> int:
        before = len(self.shocks)
        self.shocks = [s for s in self.shocks if not s.is_spent(tick)]
        return before - len(self.shocks)

    def __len__(self) -> int:
        return len(self.shocks)

    def to_dict(self) -> dict:
        return {
            'shocks': [s.to_dict() for s in self.shocks],
            'pending_hype': [dict(h) for h in self.pending_hype],
            'next_seq': self.next_seq,
        }

    @classmethod
    def from_dict(cls, data: dict, config: Optional[ShockConfig] = None) -> 'ShockBook':
        book = cls(config)
        book.shocks = [SentimentShock.from_dict(s) for s in data.get('shocks', [])]
        book.pending_hype = [dict(h) for h in data.get('pending_hype', [])]
        book.next_seq = int(data.get('next_seq', len(book.shocks) + 1))
        return book
