"""Value objects describing deployment and tokenization intent."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from web3 import Web3


class FeePreference(IntEnum):
    """Which side of the pair a recipient's fee share is paid in."""

    BOTH = 0
    PAIRED = 1
    PROJECT = 2

    @classmethod
    def parse(cls, value: Any) -> "FeePreference":
        if isinstance(value, FeePreference):
            return value
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            text = value.strip().lower()
            aliases = {
                "both": cls.BOTH,
                "paired": cls.PAIRED,
                "pairedasset": cls.PAIRED,
                "project": cls.PROJECT,
                "projectasset": cls.PROJECT,
                "clanker": cls.PROJECT,
            }
            if text in aliases:
                return aliases[text]
        raise ValueError(f"Unknown fee preference: {value!r}")


class DeploymentVersion(Enum):
    V4 = "v4"
    V3_1 = "v3.1.0"


@dataclass(frozen=True)
class RewardRecipient:
    """One share of the trading-fee distribution."""

    recipient: str
    admin: str
    bps: int
    fee_preference: FeePreference = FeePreference.BOTH

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RewardRecipient":
        return cls(
            recipient=str(payload["recipient"]),
            admin=str(payload.get("admin") or payload["recipient"]),
            bps=int(payload["bps"]),
            fee_preference=FeePreference.parse(payload.get("token", payload.get("fee_preference", 0))),
        )


@dataclass(frozen=True)
class LiquidityPosition:
    tick_lower: int
    tick_upper: int
    position_bps: int

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LiquidityPosition":
        return cls(
            tick_lower=int(payload.get("tickLower", payload.get("tick_lower"))),
            tick_upper=int(payload.get("tickUpper", payload.get("tick_upper"))),
            position_bps=int(payload.get("positionBps", payload.get("position_bps"))),
        )


@dataclass(frozen=True)
class StaticFeePolicy:
    clanker_fee_bps: int = 100
    paired_fee_bps: int = 100


@dataclass(frozen=True)
class DynamicFeePolicy:
    """Launch fee that decays from ``start_fee_bps`` to ``end_fee_bps``."""

    start_fee_bps: int = 10000
    end_fee_bps: int = 100
    decay_seconds: int = 3600


FeePolicy = Union[StaticFeePolicy, DynamicFeePolicy]


def parse_fee_policy(payload: Mapping[str, Any]) -> FeePolicy:
    kind = str(payload.get("type", "dynamic")).lower()
    if kind == "static":
        return StaticFeePolicy(
            clanker_fee_bps=int(payload.get("clankerFee", 100)),
            paired_fee_bps=int(payload.get("pairedFee", 100)),
        )
    if kind == "dynamic":
        return DynamicFeePolicy(
            start_fee_bps=int(payload.get("startFee", 10000)),
            end_fee_bps=int(payload.get("endFee", 100)),
            decay_seconds=int(payload.get("decayDuration", 3600)),
        )
    raise ValueError(f"Unknown fee policy type: {kind!r}")


@dataclass(frozen=True)
class VaultLockConfig:
    """Portion of supply locked, then vested, for ``recipient``."""

    percentage: int
    lockup_seconds: int
    vesting_seconds: int
    recipient: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "VaultLockConfig":
        return cls(
            percentage=int(payload["percentage"]),
            lockup_seconds=int(payload.get("lockupDuration", payload.get("lockup_seconds", 0))),
            vesting_seconds=int(payload.get("vestingDuration", payload.get("vesting_seconds", 0))),
            recipient=payload.get("recipient"),
        )


@dataclass(frozen=True)
class LaunchBuyConfig:
    """Buy executed in the deploy transaction; ``native_asset_amount`` is in wei."""

    native_asset_amount: int
    minimum_tokens_out: int = 0

    @classmethod
    def from_ether(cls, amount: Union[Decimal, str, int], minimum_tokens_out: int = 0) -> "LaunchBuyConfig":
        return cls(
            native_asset_amount=int(Web3.to_wei(Decimal(str(amount)), "ether")),
            minimum_tokens_out=int(minimum_tokens_out),
        )


@dataclass(frozen=True)
class TokenMetadata:
    description: str = ""
    social_media_urls: Tuple[str, ...] = ()
    audit_urls: Tuple[str, ...] = ()

    def to_json(self) -> str:
        return _compact_json(
            {
                "description": self.description,
                "socialMediaUrls": list(self.social_media_urls),
                "auditUrls": list(self.audit_urls),
            }
        )


@dataclass(frozen=True)
class ProvenanceContext:
    """Where a deployment came from (interface, platform, message)."""

    interface: str = "PoolFans SDK"
    platform: str = "sdk"
    message_id: str = ""
    id: str = ""

    def to_json(self) -> str:
        return _compact_json(
            {
                "interface": self.interface,
                "platform": self.platform,
                "messageId": self.message_id,
                "id": self.id,
            }
        )


def _compact_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class DeploymentIntent:
    """Everything a caller decides about a new token launch."""

    name: str
    symbol: str
    token_admin: str
    recipients: Tuple[RewardRecipient, ...]
    image: str = ""
    metadata: TokenMetadata = field(default_factory=TokenMetadata)
    context: ProvenanceContext = field(default_factory=ProvenanceContext)
    fee_policy: Optional[FeePolicy] = None
    positions: Optional[Tuple[LiquidityPosition, ...]] = None
    vault: Optional[VaultLockConfig] = None
    launch_buy: Optional[LaunchBuyConfig] = None
    paired_asset: Optional[str] = None
    starting_tick: Optional[int] = None

    def __post_init__(self) -> None:
        # Accept lists from callers while keeping the value hashable.
        object.__setattr__(self, "recipients", tuple(self.recipients))
        if self.positions is not None:
            object.__setattr__(self, "positions", tuple(self.positions))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DeploymentIntent":
        """Parse the camelCase JSON shape used by the PoolFans SDK."""

        rewards = payload.get("rewards", {})
        raw_recipients: Sequence[Mapping[str, Any]]
        if isinstance(rewards, Mapping):
            raw_recipients = rewards.get("recipients", [])
        else:
            raw_recipients = rewards
        metadata = payload.get("metadata") or {}
        context = payload.get("context") or {}
        pool = payload.get("pool") or {}
        fees = payload.get("fees")
        vault = payload.get("vault")
        dev_buy = payload.get("devBuy") or payload.get("launchBuy")
        positions = pool.get("positions")
        starting_tick = pool.get("tickIfToken0IsClanker")

        launch_buy = None
        if dev_buy and Decimal(str(dev_buy.get("ethAmount") or 0)) != 0:
            launch_buy = LaunchBuyConfig.from_ether(
                dev_buy["ethAmount"],
                minimum_tokens_out=int(dev_buy.get("amountOutMin", 0)),
            )

        return cls(
            name=str(payload["name"]),
            symbol=str(payload["symbol"]),
            token_admin=str(payload["tokenAdmin"]),
            recipients=tuple(RewardRecipient.from_dict(item) for item in raw_recipients),
            image=str(payload.get("image") or ""),
            metadata=TokenMetadata(
                description=str(metadata.get("description") or ""),
                social_media_urls=tuple(metadata.get("socialMediaUrls") or ()),
                audit_urls=tuple(metadata.get("auditUrls") or ()),
            ),
            context=ProvenanceContext(
                interface=str(context.get("interface") or "PoolFans SDK"),
                platform=str(context.get("platform") or "sdk"),
                message_id=str(context.get("messageId") or ""),
                id=str(context.get("id") or ""),
            ),
            fee_policy=parse_fee_policy(fees) if fees else None,
            positions=tuple(LiquidityPosition.from_dict(item) for item in positions) if positions else None,
            vault=VaultLockConfig.from_dict(vault) if vault else None,
            launch_buy=launch_buy,
            paired_asset=pool.get("pairedToken"),
            starting_tick=int(starting_tick) if starting_tick is not None else None,
        )


@dataclass(frozen=True)
class TokenizationRequest:
    """Retrofit ``token`` with vault-based fee sharing."""

    token: str
    recipients: Tuple[RewardRecipient, ...]
    version: DeploymentVersion = DeploymentVersion.V4
    paired_asset: Optional[str] = None
    vault_preference: FeePreference = FeePreference.BOTH

    def __post_init__(self) -> None:
        object.__setattr__(self, "recipients", tuple(self.recipients))


@dataclass(frozen=True)
class PendingTokenization:
    """Handle between the initialize and finalize steps.

    ``pending_id`` is ``None`` until the caller reads it from the initialize
    receipt; a handle in that state cannot be finalized.
    """

    source_token: str
    predicted_vault_address: str
    version: DeploymentVersion = DeploymentVersion.V4
    pending_id: Optional[int] = None

    @property
    def is_resolved(self) -> bool:
        return self.pending_id is not None

    def with_pending_id(self, pending_id: int) -> "PendingTokenization":
        return PendingTokenization(
            source_token=self.source_token,
            predicted_vault_address=self.predicted_vault_address,
            version=self.version,
            pending_id=int(pending_id),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "source_token": self.source_token,
            "predicted_vault_address": self.predicted_vault_address,
            "version": self.version.value,
            "pending_id": self.pending_id,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PendingTokenization":
        pending_id = payload.get("pending_id")
        return cls(
            source_token=str(payload["source_token"]),
            predicted_vault_address=str(payload["predicted_vault_address"]),
            version=DeploymentVersion(payload.get("version", DeploymentVersion.V4.value)),
            pending_id=int(pending_id) if pending_id is not None else None,
        )


@dataclass(frozen=True)
class PredictedAddresses:
    """Addresses derived before submission; recomputed on every build."""

    token: Optional[str]
    vaults: Mapping[FeePreference, str] = field(default_factory=dict)

    def vault_for(self, preference: FeePreference) -> str:
        return self.vaults[preference]


__all__ = [
    "DeploymentIntent",
    "DeploymentVersion",
    "DynamicFeePolicy",
    "FeePolicy",
    "FeePreference",
    "LaunchBuyConfig",
    "LiquidityPosition",
    "PendingTokenization",
    "PredictedAddresses",
    "ProvenanceContext",
    "RewardRecipient",
    "StaticFeePolicy",
    "TokenMetadata",
    "TokenizationRequest",
    "VaultLockConfig",
    "parse_fee_policy",
]
