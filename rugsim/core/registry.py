"""
Asset Registry - Single owner of all tradable assets.

Iteration order is insertion order, which keeps per-tick RNG consumption
stable across runs.
"""
import logging
from typing import Dict, Iterator, List, Optional

from .asset import Asset

logger = logging.getLogger(__name__)


class AssetRegistry:
    """Holds assets by id. Rugged assets are frozen."""

    def __init__(self, assets: Optional[List[Asset]] = None):
        self._assets: Dict[str, Asset] = {}
        for asset in assets or []:
            self.add(asset)

    def add(self, asset: Asset):
        if asset.id in self._assets:
            raise ValueError(f"duplicate asset id: {asset.id}")
        self._assets[asset.id] = asset
        logger.debug(f"Registered {asset!r}")

    def get(self, asset_id: str) -> Optional[Asset]:
        return self._assets.get(asset_id)

    def update(self, asset: Asset):
        """Replace an asset with its new value."""
        current = self._assets.get(asset.id)
        if current is None:
            raise KeyError(asset.id)
        if current.rugged and asset != current:
            raise ValueError(f"{current.symbol} is rugged; its state is final")
        self._assets[asset.id] = asset

    def update_many(self, assets: Dict[str, Asset]):
        for asset in assets.values():
            self.update(asset)

    def all(self) -> List[Asset]:
        return list(self._assets.values())

    def live(self) -> List[Asset]:
        return [a for a in self._assets.values() if not a.rugged]

    def prices(self) -> Dict[str, float]:
        return {a.id: a.price for a in self._assets.values()}

    def by_symbol(self, symbol: str) -> Optional[Asset]:
        symbol = symbol.upper()
        for asset in self._assets.values():
            if asset.symbol.upper() == symbol:
                return asset
        return None

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def __iter__(self) -> Iterator[Asset]:
        return iter(list(self._assets.values()))

    def __len__(self) -> int:
        return len(self._assets)

    def to_list(self) -> List[dict]:
        return [a.to_dict() for a in self._assets.values()]

    @classmethod
    def from_list(cls, records: List[dict]) -> 'AssetRegistry':
        return cls([Asset.from_dict(r) for r in records])
