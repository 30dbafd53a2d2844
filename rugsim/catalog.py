"""
Seed Catalogs - Load and validate asset and news seed data.

Usage:
    from rugsim.catalog import load_asset_catalog, load_news_catalog

    assets = load_asset_catalog()                  # bundled defaults
    assets = load_asset_catalog("my_assets.json")
    templates = load_news_catalog()
"""
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .core.asset import Asset, AssetTier, MIN_PRICE
from .signals.news import NewsTemplate
from .signals.shocks import SENTIMENT_DIRECTION

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_ASSETS = DATA_DIR / "assets.seed.json"
DEFAULT_NEWS = DATA_DIR / "news.seed.json"

ASSET_FIELDS = (
    'symbol', 'name', 'tier', 'basePrice', 'baseVolatility', 'liquidityUSD',
    'devTokensPct', 'auditScore', 'launchedDaysAgo',
)
NEWS_FIELDS = ('sentiment', 'category', 'isFake')

Source = Union[str, Path, List[Dict[str, Any]], None]


class CatalogError(ValueError):
    """Malformed seed data."""


def _read(source: Source, default: Path) -> List[Dict[str, Any]]:
    if source is None:
        source = default
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"cannot read catalog {path}: {e}") from e
    else:
        records = source
    if not isinstance(records, list):
        raise CatalogError("catalog must be a JSON array")
    return records


def _number(record: Dict[str, Any], key: str, where: str) -> float:
    value = record[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise CatalogError(f"{where}: {key} must be a finite number, got {value!r}")
    return float(value)


def validate_asset_record(record: Dict[str, Any], index: int = 0) -> Optional[str]:
    """Return the first problem with an asset record, or None."""
    where = f"asset #{index}"
    if not isinstance(record, dict):
        return f"{where}: not an object"
    missing = [k for k in ASSET_FIELDS if k not in record]
    if missing:
        return f"{where}: missing {', '.join(missing)}"

    valid_tiers = {t.value for t in AssetTier}
    if record['tier'] not in valid_tiers:
        return f"{where}: tier {record['tier']!r} not in {sorted(valid_tiers)}"

    try:
        if _number(record, 'basePrice', where) < MIN_PRICE:
            return f"{where}: basePrice below floor {MIN_PRICE}"
        if _number(record, 'baseVolatility', where) < 0:
            return f"{where}: baseVolatility must be >= 0"
        if _number(record, 'liquidityUSD', where) < 0:
            return f"{where}: liquidityUSD must be >= 0"
        if not 0 <= _number(record, 'devTokensPct', where) <= 100:
            return f"{where}: devTokensPct must be within 0-100"
        if not 0 <= _number(record, 'auditScore', where) <= 1:
            return f"{where}: auditScore must be within 0-1"
        for key in ('socialHype', 'govFavorScore'):
            if key in record and not 0 <= _number(record, key, where) <= 1:
                return f"{where}: {key} must be within 0-1"
    except CatalogError as e:
        return str(e)
    return None


def load_asset_catalog(source: Source = None) -> List[Asset]:
    """
    Load asset seed records.

    Raises:
        CatalogError: unreadable file, bad record or duplicate id
    """
    assets = []
    seen = set()
    for i, record in enumerate(_read(source, DEFAULT_ASSETS)):
        problem = validate_asset_record(record, i)
        if problem:
            raise CatalogError(problem)
        asset = Asset.from_seed(record)
        if asset.id in seen:
            raise CatalogError(f"asset #{i}: duplicate id {asset.id!r}")
        seen.add(asset.id)
        assets.append(asset)
    logger.debug(f"Loaded {len(assets)} assets")
    return assets


def load_news_catalog(source: Source = None) -> List[NewsTemplate]:
    """
    Load news templates. Accepts `headline` or `template` for the text.

    Raises:
        CatalogError: unreadable file or bad record
    """
    templates = []
    for i, record in enumerate(_read(source, DEFAULT_NEWS)):
        where = f"news #{i}"
        if not isinstance(record, dict):
            raise CatalogError(f"{where}: not an object")
        headline = record.get('headline', record.get('template'))
        missing = [k for k in NEWS_FIELDS if k not in record]
        if headline is None:
            missing.insert(0, 'headline')
        if missing:
            raise CatalogError(f"{where}: missing {', '.join(missing)}")
        if record['sentiment'] not in SENTIMENT_DIRECTION:
            raise CatalogError(f"{where}: unknown sentiment {record['sentiment']!r}")
        weight = record.get('weight', 50)
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not 0 <= weight <= 100:
            raise CatalogError(f"{where}: weight must be within 0-100")

        templates.append(NewsTemplate(
            headline=str(headline),
            sentiment=record['sentiment'],
            category=str(record['category']),
            is_fake=bool(record['isFake']),
            weight=int(weight),
        ))
    logger.debug(f"Loaded {len(templates)} news templates")
    return templates
