"""
Operations Desk
===============

Paid market operations and the player's own token:

    pump            budget buys a price jump, raises exposure and scrutiny
    wash            fake volume, only raises exposure and scrutiny
    audit           raises an asset's audit score
    bribe           lowers scrutiny
    launch_token    lists a player token, paid for by its liquidity
    rug_own_token   pulls the player token's liquidity and blacklists the player

Like the trade executor, nothing passed in is modified: a successful result
carries the updated player copy and, where one changed, the updated asset.
Checks run in a fixed order and the first failure wins: validation, rugged
asset, funds.

Usage:
    from rugsim.executors import OperationsDesk

    desk = OperationsDesk(config.operations, rug_model)
    result = desk.pump(asset, player, 2_000, rng, tick)
    if result.success:
        player, asset = result.player, result.asset
"""

import logging
import math
from typing import Optional

from ..config import OperationsConfig
from ..core.asset import Asset, AssetTier
from ..core.risk import RugModel
from ..models import FailureKind, Operation, OperationKind, OperationResult, Player

logger = logging.getLogger(__name__)

BRIBE_RECIPIENTS = ('minister', 'auditor', 'exchange')
PLAYER_TOKEN_PREFIX = "player_"


def _fail(kind: FailureKind, message: str) -> OperationResult:
    return OperationResult(success=False, failure=kind, message=message)


def player_token_id(symbol: str) -> str:
    return f"{PLAYER_TOKEN_PREFIX}{symbol.lower()}"


class OperationsDesk:
    """Operations against simulated assets."""

    def __init__(self, config: Optional[OperationsConfig] = None, rug_model: Optional[RugModel] = None):
        self.config = config or OperationsConfig()
        self.rug_model = rug_model or RugModel()

    # ------------------------------------------------------------
    # Market operations
    # ------------------------------------------------------------

    def pump(self, asset: Optional[Asset], player: Player, budget: float, rng, tick: int) -> OperationResult:
        error = self._check(asset, player, budget)
        if error:
            return error

        c = self.config
        multiplier = 1 + budget / c.pump_budget_scale + rng.uniform(*c.pump_noise)
        pumped = asset.repriced(tick, asset.price * multiplier)

        updated = self._charge(player, budget)
        updated.adjust_stat('exposure', c.pump_exposure * budget / 1000)
        updated.adjust_stat('scrutiny', c.pump_scrutiny * budget / 1000)
        operation = self._record(updated, OperationKind.PUMP, tick, budget, asset.id,
                                 old_price=asset.price, new_price=pumped.price)

        return OperationResult(
            success=True,
            message=f"Pumped {asset.symbol} ({(multiplier - 1) * 100:+.1f}%)",
            operation=operation,
            player=updated,
            asset=pumped,
        )

    def wash(self, asset: Optional[Asset], player: Player, budget: float, tick: int) -> OperationResult:
        error = self._check(asset, player, budget)
        if error:
            return error

        c = self.config
        updated = self._charge(player, budget)
        updated.adjust_stat('exposure', c.wash_exposure * budget / 1000)
        updated.adjust_stat('scrutiny', c.wash_scrutiny * budget / 1000)
        operation = self._record(updated, OperationKind.WASH, tick, budget, asset.id)

        return OperationResult(
            success=True,
            message=f"Wash traded {asset.symbol} with ${budget:,.2f}",
            operation=operation,
            player=updated,
        )

    def audit(self, asset: Optional[Asset], player: Player, budget: float, rng, tick: int) -> OperationResult:
        error = self._check(asset, player, budget)
        if error:
            return error

        boost = rng.uniform(*self.config.audit_boost_range)
        audited = asset.evolve(audit_score=min(1.0, asset.audit_score + boost))

        updated = self._charge(player, budget)
        operation = self._record(updated, OperationKind.AUDIT, tick, budget, asset.id,
                                 audit_score=audited.audit_score)

        return OperationResult(
            success=True,
            message=f"Audited {asset.symbol} (+{boost * 100:.0f}% audit score)",
            operation=operation,
            player=updated,
            asset=audited,
        )

    def bribe(self, player: Player, budget: float, recipient: str, rng, tick: int) -> OperationResult:
        if recipient not in BRIBE_RECIPIENTS:
            return _fail(FailureKind.VALIDATION, f"nobody called {recipient!r} takes bribes")
        error = self._check_budget(player, budget)
        if error:
            return error

        relief = rng.uniform(*self.config.bribe_relief_range)
        updated = self._charge(player, budget)
        updated.adjust_stat('scrutiny', -relief)
        operation = self._record(updated, OperationKind.BRIBE, tick, budget, None,
                                 recipient=recipient, relief=relief)

        return OperationResult(
            success=True,
            message=f"Bribed the {recipient} (-{relief:.0f} scrutiny)",
            operation=operation,
            player=updated,
        )

    # ------------------------------------------------------------
    # Player token
    # ------------------------------------------------------------

    def launch_token(
        self,
        player: Player,
        symbol: str,
        name: str,
        dev_reserve_pct: float,
        liquidity_usd: float,
        audit_budget: float,
        followers: int,
        rng,
        tick: int,
    ) -> OperationResult:
        """List a new player token. The caller checks the id is free."""
        symbol = symbol.strip().upper()
        if not symbol.isalnum() or len(symbol) > 10:
            return _fail(FailureKind.VALIDATION, "symbol must be 1-10 letters or digits")
        if not name.strip():
            return _fail(FailureKind.VALIDATION, "token needs a name")
        if not math.isfinite(dev_reserve_pct) or not 0 <= dev_reserve_pct <= 100:
            return _fail(FailureKind.VALIDATION, "dev reserve must be between 0 and 100%")
        if not math.isfinite(audit_budget) or audit_budget < 0:
            return _fail(FailureKind.VALIDATION, "audit budget cannot be negative")
        error = self._check_budget(player, liquidity_usd, extra=audit_budget)
        if error:
            return error

        c = self.config
        audit_score = rng.uniform(*c.token_audit_range) if audit_budget > 0 else 0.0
        token = Asset(
            id=player_token_id(symbol),
            symbol=symbol,
            name=name.strip(),
            tier=AssetTier.BASE,
            is_player_token=True,
            base_price=c.token_price,
            base_volatility=c.token_volatility,
            liquidity_usd=liquidity_usd,
            dev_tokens_pct=dev_reserve_pct,
            audit_score=audit_score,
            social_hype=min(1.0, followers / 100_000),
            gov_favor_score=0.0,
        )

        cost = liquidity_usd + audit_budget
        updated = self._charge(player, cost)
        operation = self._record(updated, OperationKind.LAUNCH_TOKEN, tick, cost, token.id,
                                 liquidity_usd=liquidity_usd, audit_budget=audit_budget)

        return OperationResult(
            success=True,
            message=f"Launched {symbol} with ${liquidity_usd:,.0f} liquidity",
            operation=operation,
            player=updated,
            asset=token,
        )

    def rug_own_token(self, asset: Optional[Asset], player: Player, rng, tick: int) -> OperationResult:
        """Pull the liquidity of the player's own token. Blacklists the player for good."""
        if asset is None:
            return _fail(FailureKind.VALIDATION, "unknown asset")
        if not asset.is_player_token:
            return _fail(FailureKind.VALIDATION, f"{asset.symbol} is not your token")
        if asset.rugged:
            return _fail(FailureKind.ASSET_RUGGED, f"{asset.symbol} was already rugged")

        c = self.config
        crash_ratio = rng.uniform(*self.rug_model.config.crash_range)
        rugged = self.rug_model.apply_rug(asset, rng, tick, crash_ratio)
        payout = rng.uniform(*c.rug_payout_range)

        updated = player.copy()
        updated.cash_usd = player.cash_usd + payout
        updated.adjust_stat('scrutiny', rng.uniform(*c.rug_scrutiny_range))
        updated.adjust_stat('reputation', -rng.uniform(*c.rug_reputation_loss_range))
        updated.blacklisted = True
        operation = self._record(updated, OperationKind.RUG_OWN_TOKEN, tick, 0.0, asset.id, payout=payout)

        logger.warning(f"Player rugged {asset.symbol} for ${payout:,.0f} and is now blacklisted")
        return OperationResult(
            success=True,
            message=f"Rugged {asset.symbol} for ${payout:,.0f} (BLACKLISTED!)",
            operation=operation,
            player=updated,
            asset=rugged,
        )

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _check(self, asset: Optional[Asset], player: Player, budget: float) -> Optional[OperationResult]:
        if asset is None:
            return _fail(FailureKind.VALIDATION, "unknown asset")
        if not math.isfinite(budget) or budget <= 0:
            return _fail(FailureKind.VALIDATION, "budget must be a positive dollar value")
        if asset.rugged:
            return _fail(FailureKind.ASSET_RUGGED, f"{asset.symbol} was rugged. It's over.")
        return self._check_budget(player, budget)

    @staticmethod
    def _check_budget(player: Player, budget: float, extra: float = 0.0) -> Optional[OperationResult]:
        if not math.isfinite(budget) or budget <= 0:
            return _fail(FailureKind.VALIDATION, "budget must be a positive dollar value")
        if budget + extra > player.cash_usd + 1e-9:
            return _fail(
                FailureKind.INSUFFICIENT_FUNDS,
                f"need ${budget + extra:,.2f}, have ${player.cash_usd:,.2f}",
            )
        return None

    @staticmethod
    def _charge(player: Player, cost: float) -> Player:
        updated = player.copy()
        updated.cash_usd = player.cash_usd - cost
        return updated

    @staticmethod
    def _record(
        player: Player,
        kind: OperationKind,
        tick: int,
        cost: float,
        asset_id: Optional[str],
        **detail,
    ) -> Operation:
        operation = Operation(
            id=f"O{len(player.operations) + 1:06d}",
            tick=tick,
            kind=kind,
            cost_usd=cost,
            asset_id=asset_id,
            detail=detail,
        )
        player.operations.append(operation)
        logger.info(f"Operation {operation.id}: {kind.value} ${cost:,.2f}")
        return operation
