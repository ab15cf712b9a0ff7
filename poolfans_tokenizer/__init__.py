"""Deploy and tokenize tokens whose trading fees are shared through vaults."""
from __future__ import annotations

from .addresses import (
    VaultAddressResolver,
    derive_salt,
    generate_nonce,
    predict_deploy_address,
    predict_token_address,
)
from .builder import BuiltDeployment, DeploymentBuilder, build_deployment
from .config import NETWORK_CONFIGS, NetworkConfig, load_network_config
from .encoding import Field, RecordSchema, decode_record, encode_record, keccak256
from .errors import (
    AddressResolutionError,
    ConfigurationError,
    EncodingError,
    InvalidLaunchBuy,
    InvalidPoolGeometry,
    InvalidSplit,
    InvalidVaultConfig,
    PoolFansError,
    TokenizationStateError,
    TooManyRecipients,
    ValidationError,
)
from .models import (
    DeploymentIntent,
    DeploymentVersion,
    DynamicFeePolicy,
    FeePreference,
    LaunchBuyConfig,
    LiquidityPosition,
    PendingTokenization,
    PredictedAddresses,
    ProvenanceContext,
    RewardRecipient,
    StaticFeePolicy,
    TokenMetadata,
    TokenizationRequest,
    VaultLockConfig,
)
from .presets import FEE_PRESETS, POOL_POSITIONS, VAULT_PRESETS
from .schemas import DeploymentSchema
from .tokenization import (
    InitializeTokenization,
    TokenizationCoordinator,
    TokenizationState,
    build_finalize_tokenization,
    build_initialize_tokenization,
)
from .transactions import PreparedCall
from .validation import validate_intent

__version__ = "0.2.0"

__all__ = [
    "AddressResolutionError",
    "BuiltDeployment",
    "ConfigurationError",
    "DeploymentBuilder",
    "DeploymentIntent",
    "DeploymentSchema",
    "DeploymentVersion",
    "DynamicFeePolicy",
    "EncodingError",
    "FEE_PRESETS",
    "FeePreference",
    "Field",
    "InitializeTokenization",
    "InvalidLaunchBuy",
    "InvalidPoolGeometry",
    "InvalidSplit",
    "InvalidVaultConfig",
    "LaunchBuyConfig",
    "LiquidityPosition",
    "NETWORK_CONFIGS",
    "NetworkConfig",
    "POOL_POSITIONS",
    "PendingTokenization",
    "PoolFansError",
    "PredictedAddresses",
    "PreparedCall",
    "ProvenanceContext",
    "RecordSchema",
    "RewardRecipient",
    "StaticFeePolicy",
    "TokenMetadata",
    "TokenizationCoordinator",
    "TokenizationRequest",
    "TokenizationState",
    "TokenizationStateError",
    "TooManyRecipients",
    "VAULT_PRESETS",
    "ValidationError",
    "VaultAddressResolver",
    "VaultLockConfig",
    "build_deployment",
    "build_finalize_tokenization",
    "build_initialize_tokenization",
    "decode_record",
    "derive_salt",
    "encode_record",
    "generate_nonce",
    "keccak256",
    "load_network_config",
    "predict_deploy_address",
    "predict_token_address",
    "validate_intent",
]
