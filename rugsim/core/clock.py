"""
Clock - Discrete tick counter.

Tick 0 means nothing has been simulated yet. Ticks are numbered from 1;
ticks 1..N form day 1 when N is ticks_per_day.
"""
from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class Clock:
    """Game clock plus the external market-open signal."""

    ticks_per_day: int = 24
    tick: int = 0
    market_open: bool = True

    def __post_init__(self):
        if self.ticks_per_day < 1:
            raise ValueError(f"ticks_per_day must be >= 1, got {self.ticks_per_day}")

    def day_of(self, tick: int) -> int:
        """Day a processed tick belongs to."""
        return (max(tick, 1) - 1) // self.ticks_per_day + 1

    @property
    def day(self) -> int:
        """Day of the upcoming tick; commands issued now land in it."""
        return self.day_of(self.tick + 1)

    @property
    def next_tick(self) -> int:
        return self.tick + 1

    def is_first_of_day(self, tick: int) -> bool:
        return (tick - 1) % self.ticks_per_day == 0

    def is_last_of_day(self, tick: int) -> bool:
        return tick > 0 and tick % self.ticks_per_day == 0

    def advance(self) -> int:
        self.tick += 1
        return self.tick

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ticks_per_day': self.ticks_per_day,
            'tick': self.tick,
            'market_open': self.market_open,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Clock':
        return cls(
            ticks_per_day=int(data['ticks_per_day']),
            tick=int(data['tick']),
            market_open=bool(data.get('market_open', True)),
        )
