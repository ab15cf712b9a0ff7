"""Fail-fast checks of deployment intent against protocol invariants."""
from __future__ import annotations

from typing import Optional, Sequence

from .errors import (
    InvalidLaunchBuy,
    InvalidPoolGeometry,
    InvalidSplit,
    InvalidVaultConfig,
    TooManyRecipients,
    ValidationError,
)
from .models import DeploymentIntent, LaunchBuyConfig, LiquidityPosition, RewardRecipient, VaultLockConfig
from .presets import (
    DEFAULT_POSITIONS,
    DEFAULT_STARTING_TICK,
    DEFAULT_TICK_SPACING,
    MAX_DURATION_SECONDS,
    MAX_RECIPIENTS,
    MAX_TICK,
    MIN_LOCKUP_SECONDS,
    TOTAL_BPS,
)


def validate_recipients(recipients: Sequence[RewardRecipient]) -> Optional[ValidationError]:
    """Check each share, the reward split, then the recipient count."""

    for index, recipient in enumerate(recipients):
        if not 0 <= recipient.bps <= TOTAL_BPS:
            return InvalidSplit(
                got=recipient.bps,
                reason=f"Recipient {index} bps must be between 0 and {TOTAL_BPS}, got {recipient.bps}",
            )
    total = sum(recipient.bps for recipient in recipients)
    if total != TOTAL_BPS:
        return InvalidSplit(got=total)
    if len(recipients) > MAX_RECIPIENTS:
        return TooManyRecipients(got=len(recipients), limit=MAX_RECIPIENTS)
    return None


def validate_positions(
    positions: Sequence[LiquidityPosition],
    starting_tick: int,
    tick_spacing: int = DEFAULT_TICK_SPACING,
) -> Optional[ValidationError]:
    if not positions:
        return InvalidPoolGeometry("at least one position is required")
    for index, position in enumerate(positions):
        if not 0 <= position.position_bps <= TOTAL_BPS:
            return InvalidPoolGeometry(
                f"position {index}: bps must be between 0 and {TOTAL_BPS}, got {position.position_bps}"
            )
    total = sum(position.position_bps for position in positions)
    if total != TOTAL_BPS:
        return InvalidPoolGeometry(f"position bps must sum to {TOTAL_BPS}, got {total}")
    for index, position in enumerate(positions):
        if position.tick_lower >= position.tick_upper:
            return InvalidPoolGeometry(
                f"position {index}: tickLower {position.tick_lower} must be below tickUpper {position.tick_upper}"
            )
        for tick in (position.tick_lower, position.tick_upper):
            if not -MAX_TICK <= tick <= MAX_TICK:
                return InvalidPoolGeometry(f"position {index}: tick {tick} is outside +/-{MAX_TICK}")
            if tick % tick_spacing:
                return InvalidPoolGeometry(f"position {index}: tick {tick} is not a multiple of {tick_spacing}")
    if not -MAX_TICK <= starting_tick <= MAX_TICK:
        return InvalidPoolGeometry(f"starting tick {starting_tick} is outside +/-{MAX_TICK}")
    if starting_tick % tick_spacing:
        return InvalidPoolGeometry(f"starting tick {starting_tick} is not a multiple of {tick_spacing}")
    lowest = min(position.tick_lower for position in positions)
    if starting_tick > lowest:
        return InvalidPoolGeometry(f"starting tick {starting_tick} is above the lowest tickLower {lowest}")
    return None


def validate_vault(vault: VaultLockConfig, min_lockup_seconds: int = MIN_LOCKUP_SECONDS) -> Optional[ValidationError]:
    if not 0 < vault.percentage <= 100:
        return InvalidVaultConfig(f"percentage must be in (0, 100], got {vault.percentage}")
    if vault.lockup_seconds < min_lockup_seconds:
        return InvalidVaultConfig(
            f"lockup of {vault.lockup_seconds}s is below the {min_lockup_seconds}s minimum"
        )
    for label, seconds in (("lockup", vault.lockup_seconds), ("vesting", vault.vesting_seconds)):
        if not 0 <= seconds <= MAX_DURATION_SECONDS:
            return InvalidVaultConfig(f"{label} of {seconds}s is outside 0..{MAX_DURATION_SECONDS}")
    return None


def validate_launch_buy(launch_buy: LaunchBuyConfig) -> Optional[ValidationError]:
    if launch_buy.native_asset_amount < 0:
        return InvalidLaunchBuy(f"amount must not be negative, got {launch_buy.native_asset_amount}")
    if launch_buy.minimum_tokens_out < 0:
        return InvalidLaunchBuy(f"minimum tokens out must not be negative, got {launch_buy.minimum_tokens_out}")
    return None


def validate_intent(
    intent: DeploymentIntent,
    *,
    tick_spacing: int = DEFAULT_TICK_SPACING,
    min_lockup_seconds: int = MIN_LOCKUP_SECONDS,
) -> Optional[ValidationError]:
    """Return the first violated invariant of ``intent``, or ``None``.

    Checks run in a fixed order (recipient shares and split, recipient count,
    pool geometry, vault lock, launch buy) and stop at the first failure. The
    error is returned, not raised, so callers can branch on its type; the
    input is never modified.
    """

    error = validate_recipients(intent.recipients)
    if error is not None:
        return error

    if intent.positions is not None or intent.starting_tick is not None:
        positions = intent.positions if intent.positions is not None else DEFAULT_POSITIONS
        starting_tick = intent.starting_tick if intent.starting_tick is not None else DEFAULT_STARTING_TICK
        error = validate_positions(positions, starting_tick, tick_spacing)
        if error is not None:
            return error

    if intent.vault is not None:
        error = validate_vault(intent.vault, min_lockup_seconds)
        if error is not None:
            return error

    if intent.launch_buy is not None:
        error = validate_launch_buy(intent.launch_buy)
        if error is not None:
            return error

    return None


__all__ = [
    "validate_intent",
    "validate_launch_buy",
    "validate_positions",
    "validate_recipients",
    "validate_vault",
]
