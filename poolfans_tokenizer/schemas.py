"""Record schemas of the receiving contracts and the layouts that fill them.

Two deploy layouts exist and are selected by :class:`DeploymentSchema`:

* ``FACTORY_V4``: the nested ``deployToken`` record of the token factory.
  Reward admins and recipients point at predicted vault addresses; the end
  users behind them travel in the locker data.
* ``TOKENIZER_V4``: the flat ``tokenizeAndDeployV4Clanker`` params of the
  tokenizer contract, which creates the vault itself and therefore takes
  end-user recipients directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .addresses import predict_token_address
from .config import NetworkConfig
from .encoding import Field, Param, RecordSchema, encode_record
from .models import (
    DeploymentIntent,
    DynamicFeePolicy,
    FeePolicy,
    FeePreference,
    LiquidityPosition,
    StaticFeePolicy,
)

# --- shared -----------------------------------------------------------------

REWARD_RECIPIENT = RecordSchema(
    "RewardRecipient",
    (
        Field("recipient", "address"),
        Field("admin", "address"),
        Field("bps", "uint16"),
        Field("token", "uint8"),
    ),
)

REWARDS = RecordSchema("RewardsConfig", (Field("recipients", REWARD_RECIPIENT, array=True),))

POSITION = RecordSchema(
    "PoolPosition",
    (
        Field("tickLower", "int24"),
        Field("tickUpper", "int24"),
        Field("positionBps", "uint16"),
    ),
)

# --- factory (nested) layout ------------------------------------------------

TOKEN_CONFIG = RecordSchema(
    "TokenConfig",
    (
        Field("tokenAdmin", "address"),
        Field("name", "string"),
        Field("symbol", "string"),
        Field("salt", "bytes32"),
        Field("image", "string"),
        Field("metadata", "string"),
        Field("context", "string"),
        Field("originatingChainId", "uint256"),
    ),
)

POOL_CONFIG = RecordSchema(
    "PoolConfig",
    (
        Field("hook", "address"),
        Field("pairedToken", "address"),
        Field("tickIfToken0IsClanker", "int24"),
        Field("tickSpacing", "int24"),
        Field("poolData", "bytes"),
    ),
)

LOCKER_CONFIG = RecordSchema(
    "LockerConfig",
    (
        Field("locker", "address"),
        Field("rewardAdmins", "address", array=True),
        Field("rewardRecipients", "address", array=True),
        Field("rewardBps", "uint16", array=True),
        Field("tickLower", "int24", array=True),
        Field("tickUpper", "int24", array=True),
        Field("positionBps", "uint16", array=True),
        Field("lockerData", "bytes"),
    ),
)

MEV_MODULE_CONFIG = RecordSchema(
    "MevModuleConfig",
    (
        Field("mevModule", "address"),
        Field("mevModuleData", "bytes"),
    ),
)

EXTENSION_CONFIG = RecordSchema(
    "ExtensionConfig",
    (
        Field("extension", "address"),
        Field("msgValue", "uint256"),
        Field("extensionBps", "uint16"),
        Field("extensionData", "bytes"),
    ),
)

DEPLOYMENT_CONFIG = RecordSchema(
    "DeploymentConfig",
    (
        Field("tokenConfig", TOKEN_CONFIG),
        Field("poolConfig", POOL_CONFIG),
        Field("lockerConfig", LOCKER_CONFIG),
        Field("mevModuleConfig", MEV_MODULE_CONFIG),
        Field("extensionConfigs", EXTENSION_CONFIG, array=True),
    ),
)

STATIC_POOL_DATA = RecordSchema("StaticFeeData", (Field("clankerFee", "uint24"), Field("pairedFee", "uint24")))

FEE_DECAY_DATA = RecordSchema(
    "FeeDecayData",
    (
        Field("startFee", "uint24"),
        Field("endFee", "uint24"),
        Field("decaySeconds", "uint32"),
    ),
)

VAULT_LOCK = RecordSchema(
    "VaultLock",
    (
        Field("percentage", "uint8"),
        Field("lockupDuration", "uint32"),
        Field("vestingDuration", "uint32"),
        Field("recipient", "address"),
    ),
)

# Reward rows of the locker point at vaults; ``beneficiaries`` names the end
# users (and their admins) who hold each vault's shares, row for row.
LOCKER_DATA = RecordSchema(
    "LockerData",
    (
        Field("feePreferences", "uint8", array=True),
        Field("beneficiaries", REWARD_RECIPIENT, array=True),
        Field("vaultLock", VAULT_LOCK),
    ),
)

LAUNCH_BUY_DATA = RecordSchema(
    "LaunchBuyData",
    (
        Field("recipient", "address"),
        Field("amountOutMin", "uint256"),
    ),
)

# --- tokenizer (flat) layout ------------------------------------------------

FLAT_FEES = RecordSchema(
    "FeeConfig",
    (
        Field("feeType", "uint8"),
        Field("clankerFee", "uint24"),
        Field("pairedFee", "uint24"),
    ),
)

FLAT_POOL = RecordSchema(
    "PoolConfig",
    (
        Field("pairedToken", "address"),
        Field("tickIfToken0IsClanker", "int24"),
        Field("positions", POSITION, array=True),
    ),
)

FLAT_DEV_BUY = RecordSchema("DevBuyConfig", (Field("ethAmount", "uint256"), Field("amountOutMin", "uint256")))

TOKENIZE_AND_DEPLOY_PARAMS = RecordSchema(
    "TokenizeAndDeployParams",
    (
        Field("name", "string"),
        Field("symbol", "string"),
        Field("image", "string"),
        Field("metadata", "string"),
        Field("context", "string"),
        Field("tokenAdmin", "address"),
        Field("rewards", REWARDS),
        Field("fees", FLAT_FEES),
        Field("vault", VAULT_LOCK),
        Field("pool", FLAT_POOL),
        Field("devBuy", FLAT_DEV_BUY),
    ),
)

# --- tokenization -----------------------------------------------------------

INIT_TOKENIZATION_PARAMS: Tuple[Param, ...] = ("address", REWARDS)
FINALIZE_TOKENIZATION_PARAMS: Tuple[Param, ...] = ("uint256", "address")

FEE_TYPE_STATIC = 0
FEE_TYPE_DYNAMIC = 1


def reward_entries(recipients, vaults: Optional[Mapping[FeePreference, str]] = None):
    """Reward rows; with ``vaults`` each row points at its preference's vault."""

    entries = []
    for recipient in recipients:
        if vaults is None:
            target, admin = recipient.recipient, recipient.admin
        else:
            target = admin = vaults[recipient.fee_preference]
        entries.append(
            {
                "recipient": target,
                "admin": admin,
                "bps": recipient.bps,
                "token": int(recipient.fee_preference),
            }
        )
    return entries


class DeploymentSchema(Enum):
    FACTORY_V4 = "factory-v4"
    TOKENIZER_V4 = "tokenizer-v4"


@dataclass(frozen=True)
class BuildContext:
    """Intent with every default resolved, plus predicted addresses."""

    intent: DeploymentIntent
    config: NetworkConfig
    nonce: bytes
    paired_asset: str
    starting_tick: int
    fee_policy: FeePolicy
    positions: Tuple[LiquidityPosition, ...]
    vaults: Mapping[FeePreference, str]

    @property
    def vault_recipient(self) -> str:
        vault = self.intent.vault
        if vault is not None and vault.recipient:
            return vault.recipient
        return self.intent.token_admin

    def vault_lock(self) -> Dict[str, Any]:
        vault = self.intent.vault
        return {
            "percentage": vault.percentage if vault else 0,
            "lockupDuration": vault.lockup_seconds if vault else 0,
            "vestingDuration": vault.vesting_seconds if vault else 0,
            "recipient": self.vault_recipient,
        }


class RecordLayout:
    """How one receiving contract wants a deployment expressed."""

    schema: DeploymentSchema
    function_name: str
    params: Tuple[Param, ...]
    uses_vaults: bool = False

    def target(self, config: NetworkConfig) -> str:
        raise NotImplementedError

    def predict_token_address(self, config: NetworkConfig, intent: DeploymentIntent, nonce: bytes) -> Optional[str]:
        return None

    def assemble(self, context: BuildContext) -> Dict[str, Any]:
        raise NotImplementedError


class FactoryV4Layout(RecordLayout):
    schema = DeploymentSchema.FACTORY_V4
    function_name = "deployToken"
    params = (DEPLOYMENT_CONFIG,)
    uses_vaults = True

    def target(self, config: NetworkConfig) -> str:
        return config.require("token_factory")

    def predict_token_address(self, config: NetworkConfig, intent: DeploymentIntent, nonce: bytes) -> Optional[str]:
        return predict_token_address(
            config.require("token_factory"),
            intent.token_admin,
            nonce,
            config.require("token_init_code_hash"),
        )

    def assemble(self, context: BuildContext) -> Dict[str, Any]:
        intent = context.intent
        config = context.config
        rewards = reward_entries(intent.recipients, context.vaults)
        return {
            "tokenConfig": {
                "tokenAdmin": intent.token_admin,
                "name": intent.name,
                "symbol": intent.symbol,
                "salt": context.nonce,
                "image": intent.image,
                "metadata": intent.metadata.to_json(),
                "context": intent.context.to_json(),
                "originatingChainId": config.chain_id,
            },
            "poolConfig": self._pool_config(context),
            "lockerConfig": {
                "locker": config.require("lp_locker"),
                "rewardAdmins": [entry["admin"] for entry in rewards],
                "rewardRecipients": [entry["recipient"] for entry in rewards],
                "rewardBps": [entry["bps"] for entry in rewards],
                "tickLower": [position.tick_lower for position in context.positions],
                "tickUpper": [position.tick_upper for position in context.positions],
                "positionBps": [position.position_bps for position in context.positions],
                "lockerData": encode_record(
                    LOCKER_DATA,
                    {
                        "feePreferences": [entry["token"] for entry in rewards],
                        "beneficiaries": reward_entries(intent.recipients),
                        "vaultLock": context.vault_lock(),
                    },
                ),
            },
            "mevModuleConfig": self._mev_module_config(context),
            "extensionConfigs": self._extensions(context),
        }

    def _pool_config(self, context: BuildContext) -> Dict[str, Any]:
        policy = context.fee_policy
        if isinstance(policy, StaticFeePolicy):
            hook = context.config.require("static_fee_hook")
            pool_data = encode_record(
                STATIC_POOL_DATA,
                {"clankerFee": policy.clanker_fee_bps, "pairedFee": policy.paired_fee_bps},
            )
        else:
            hook = context.config.require("dynamic_fee_hook")
            # The pool settles at the end fee on both sides.
            pool_data = encode_record(
                STATIC_POOL_DATA,
                {"clankerFee": policy.end_fee_bps, "pairedFee": policy.end_fee_bps},
            )
        return {
            "hook": hook,
            "pairedToken": context.paired_asset,
            "tickIfToken0IsClanker": context.starting_tick,
            "tickSpacing": context.config.tick_spacing,
            "poolData": pool_data,
        }

    def _mev_module_config(self, context: BuildContext) -> Dict[str, Any]:
        policy = context.fee_policy
        data = b""
        if isinstance(policy, DynamicFeePolicy):
            data = encode_record(
                FEE_DECAY_DATA,
                {
                    "startFee": policy.start_fee_bps,
                    "endFee": policy.end_fee_bps,
                    "decaySeconds": policy.decay_seconds,
                },
            )
        return {"mevModule": context.config.require("mev_module"), "mevModuleData": data}

    def _extensions(self, context: BuildContext):
        launch_buy = context.intent.launch_buy
        if launch_buy is None or launch_buy.native_asset_amount == 0:
            return []
        return [
            {
                "extension": context.config.require("launch_buy_extension"),
                "msgValue": launch_buy.native_asset_amount,
                "extensionBps": 0,
                "extensionData": encode_record(
                    LAUNCH_BUY_DATA,
                    {"recipient": context.intent.token_admin, "amountOutMin": launch_buy.minimum_tokens_out},
                ),
            }
        ]


class TokenizerV4Layout(RecordLayout):
    schema = DeploymentSchema.TOKENIZER_V4
    function_name = "tokenizeAndDeployV4Clanker"
    params = (TOKENIZE_AND_DEPLOY_PARAMS,)

    def target(self, config: NetworkConfig) -> str:
        return config.require("tokenizer_v4")

    def assemble(self, context: BuildContext) -> Dict[str, Any]:
        intent = context.intent
        policy = context.fee_policy
        if isinstance(policy, StaticFeePolicy):
            fees = {"feeType": FEE_TYPE_STATIC, "clankerFee": policy.clanker_fee_bps, "pairedFee": policy.paired_fee_bps}
        else:
            fees = {"feeType": FEE_TYPE_DYNAMIC, "clankerFee": 0, "pairedFee": 0}
        launch_buy = intent.launch_buy
        return {
            "name": intent.name,
            "symbol": intent.symbol,
            "image": intent.image,
            "metadata": intent.metadata.to_json(),
            "context": intent.context.to_json(),
            "tokenAdmin": intent.token_admin,
            "rewards": {"recipients": reward_entries(intent.recipients)},
            "fees": fees,
            "vault": context.vault_lock(),
            "pool": {
                "pairedToken": context.paired_asset,
                "tickIfToken0IsClanker": context.starting_tick,
                "positions": [
                    {
                        "tickLower": position.tick_lower,
                        "tickUpper": position.tick_upper,
                        "positionBps": position.position_bps,
                    }
                    for position in context.positions
                ],
            },
            "devBuy": {
                "ethAmount": launch_buy.native_asset_amount if launch_buy else 0,
                "amountOutMin": launch_buy.minimum_tokens_out if launch_buy else 0,
            },
        }


LAYOUTS: Dict[DeploymentSchema, RecordLayout] = {
    DeploymentSchema.FACTORY_V4: FactoryV4Layout(),
    DeploymentSchema.TOKENIZER_V4: TokenizerV4Layout(),
}


def get_layout(schema: DeploymentSchema) -> RecordLayout:
    return LAYOUTS[DeploymentSchema(schema)]


__all__ = [
    "BuildContext",
    "DEPLOYMENT_CONFIG",
    "DeploymentSchema",
    "EXTENSION_CONFIG",
    "FEE_DECAY_DATA",
    "FINALIZE_TOKENIZATION_PARAMS",
    "FactoryV4Layout",
    "INIT_TOKENIZATION_PARAMS",
    "LAUNCH_BUY_DATA",
    "LAYOUTS",
    "LOCKER_CONFIG",
    "LOCKER_DATA",
    "MEV_MODULE_CONFIG",
    "POOL_CONFIG",
    "POSITION",
    "REWARDS",
    "REWARD_RECIPIENT",
    "RecordLayout",
    "STATIC_POOL_DATA",
    "TOKENIZE_AND_DEPLOY_PARAMS",
    "TOKEN_CONFIG",
    "TokenizerV4Layout",
    "VAULT_LOCK",
    "get_layout",
    "reward_entries",
]
