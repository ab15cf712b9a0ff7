"""Protocol constants and ready-made pool, fee and vault presets."""
from __future__ import annotations

from typing import Dict, Tuple

from .models import DynamicFeePolicy, FeePolicy, LiquidityPosition, StaticFeePolicy, VaultLockConfig

TOTAL_BPS = 10_000
MAX_RECIPIENTS = 7
DEFAULT_TICK_SPACING = 200
DEFAULT_STARTING_TICK = -230_400
MIN_LOCKUP_SECONDS = 7 * 24 * 60 * 60
MAX_TICK = 887_272
MAX_DURATION_SECONDS = 2**32 - 1

POOL_POSITIONS: Dict[str, Tuple[LiquidityPosition, ...]] = {
    # Five-position meme token curve: floor, core, growth, expansion, moon.
    "Standard": (
        LiquidityPosition(-230_400, -214_200, 1_000),
        LiquidityPosition(-214_200, -160_000, 5_000),
        LiquidityPosition(-160_000, -120_000, 1_500),
        LiquidityPosition(-120_000, -92_200, 2_000),
        LiquidityPosition(-92_200, -60_000, 500),
    ),
    "Project": (
        LiquidityPosition(-230_400, -200_000, 500),
        LiquidityPosition(-200_000, -160_000, 2_500),
        LiquidityPosition(-160_000, -120_000, 4_000),
        LiquidityPosition(-120_000, -100_000, 2_000),
        LiquidityPosition(-100_000, -80_000, 1_000),
    ),
    # Single full-range position.
    "Legacy": (LiquidityPosition(-887_200, 887_200, 10_000),),
}

FEE_PRESETS: Dict[str, FeePolicy] = {
    "DynamicBasic": DynamicFeePolicy(start_fee_bps=10_000, end_fee_bps=100, decay_seconds=3_600),
    "DynamicSlow": DynamicFeePolicy(start_fee_bps=10_000, end_fee_bps=100, decay_seconds=86_400),
    "Static1Percent": StaticFeePolicy(clanker_fee_bps=100, paired_fee_bps=100),
    "Static03Percent": StaticFeePolicy(clanker_fee_bps=30, paired_fee_bps=30),
}

DEFAULT_FEE_POLICY: FeePolicy = FEE_PRESETS["DynamicBasic"]
DEFAULT_POSITIONS: Tuple[LiquidityPosition, ...] = POOL_POSITIONS["Standard"]

VAULT_PRESETS: Dict[str, VaultLockConfig] = {
    "ShortLock": VaultLockConfig(percentage=20, lockup_seconds=604_800, vesting_seconds=0),
    "MediumVest": VaultLockConfig(percentage=30, lockup_seconds=2_592_000, vesting_seconds=7_776_000),
    "LongVest": VaultLockConfig(percentage=50, lockup_seconds=7_776_000, vesting_seconds=15_552_000),
}

__all__ = [
    "DEFAULT_FEE_POLICY",
    "DEFAULT_POSITIONS",
    "DEFAULT_STARTING_TICK",
    "DEFAULT_TICK_SPACING",
    "FEE_PRESETS",
    "MAX_DURATION_SECONDS",
    "MAX_RECIPIENTS",
    "MAX_TICK",
    "MIN_LOCKUP_SECONDS",
    "POOL_POSITIONS",
    "TOTAL_BPS",
    "VAULT_PRESETS",
]
