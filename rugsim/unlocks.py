"""
Feature Unlocks - Progressive features revealed one step ahead.

Each feature has OR-groups of requirements; any fully met group unlocks
it. Only the next locked feature in the chain is visible.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# (metric, minimum)
Requirement = Tuple[str, float]


@dataclass(frozen=True)
class FeatureSpec:
    id: str
    name: str
    perk: str
    requirements: Tuple[Tuple[Requirement, ...], ...]


FEATURES: Tuple[FeatureSpec, ...] = (
    FeatureSpec(
        id='influencer',
        name='Influencer Toolkit',
        perk='Sponsored posts, collabs, Spaces, token launch',
        requirements=(
            (('followers', 10_000), ('engagement', 0.06)),
            (('credibility', 0.55),),
        ),
    ),
    FeatureSpec(
        id='operations',
        name='Operations Console',
        perk='Pump, wash trade, audit and bribe',
        requirements=(
            (('net_worth', 15_000),),
        ),
    ),
    FeatureSpec(
        id='offers',
        name='Offers Desk',
        perk='Whale OTC, gov bumps, SEC investigations',
        requirements=(
            (('net_worth', 50_000), ('influence', 3.0)),
        ),
    ),
)


class UnlockTracker:

    def __init__(self):
        self.unlocked: Dict[str, bool] = {f.id: False for f in FEATURES}

    def is_unlocked(self, feature_id: str) -> bool:
        return self.unlocked.get(feature_id, False)

    def visible(self) -> List[str]:
        """Unlocked features plus the next locked one."""
        shown = []
        for feature in FEATURES:
            shown.append(feature.id)
            if not self.unlocked[feature.id]:
                break
        return shown

    def next_unlock(self) -> Optional[FeatureSpec]:
        for feature in FEATURES:
            if not self.unlocked[feature.id]:
                return feature
        return None

    @staticmethod
    def requirements_met(feature: FeatureSpec, metrics: Mapping[str, float]) -> bool:
        return any(
            all(metrics.get(metric, 0.0) >= minimum for metric, minimum in group)
            for group in feature.requirements
        )

    def check(self, metrics: Mapping[str, float]) -> List[FeatureSpec]:
        """Unlock the visible feature while its requirements hold; returns new unlocks."""
        newly = []
        feature = self.next_unlock()
        while feature is not None and self.requirements_met(feature, metrics):
            self.unlocked[feature.id] = True
            newly.append(feature)
            logger.info(f"Unlocked {feature.name}: {feature.perk}")
            feature = self.next_unlock()
        return newly

    def to_dict(self) -> dict:
        return {'unlocked': dict(self.unlocked)}

    @classmethod
    def from_dict(cls, data: dict) -> 'UnlockTracker':
        tracker = cls()
        for feature_id, flag in data.get('unlocked', {}).items():
            if feature_id in tracker.unlocked:
                tracker.unlocked[feature_id] = bool(flag)
        return tracker
