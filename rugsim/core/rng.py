"""
Seeded RNG - The only source of randomness in the simulation.

Wraps a numpy Generator so that a game replays identically for a seed and
its state can be stored in a snapshot and restored on cold start.

Usage:
    from rugsim.core import SeededRNG

    rng = SeededRNG(42)
    z = rng.normal(0.0, 1.0)
    if rng.chance(0.1):
        ...

    state = rng.get_state()
    rng.set_state(state)
"""
from typing import Any, Dict, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar('T')


class SeededRNG:
    """Thin wrapper around numpy's PCG64 generator."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._gen = np.random.Generator(np.random.PCG64(seed))

    def random(self) -> float:
        return float(self._gen.random())

    def uniform(self, low: float, high: float) -> float:
        return float(self._gen.uniform(low, high))

    def normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        return float(self._gen.normal(mean, std))

    def chance(self, probability: float) -> bool:
        """Bernoulli draw. Always consumes one number."""
        return self.random() < probability

    def integers(self, low: int, high: int) -> int:
        """Integer in [low, high], both inclusive."""
        return int(self._gen.integers(low, high, endpoint=True))

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("cannot choose from an empty sequence")
        return items[self.integers(0, len(items) - 1)]

    def get_state(self) -> Dict[str, Any]:
        return {
            'seed': self.seed,
            'bit_generator': self._gen.bit_generator.state,
        }

    def set_state(self, state: Dict[str, Any]):
        self.seed = state.get('seed')
        self._gen.bit_generator.state = state['bit_generator']

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> 'SeededRNG':
        rng = cls(state.get('seed'))
        rng.set_state(state)
        return rng
