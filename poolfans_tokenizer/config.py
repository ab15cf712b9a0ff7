"""Per-network contract addresses and environment overrides."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .presets import DEFAULT_TICK_SPACING

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "POOLFANS_"
DEFAULT_NETWORK = "base"


@dataclass(frozen=True)
class NetworkConfig:
    """Contract addresses for one chain.

    Addresses that have not been published for a network are ``None``;
    operations that need them raise :class:`ConfigurationError` instead of
    silently targeting a zero address.
    """

    name: str
    chain_id: int
    rpc_url: str
    weth: str
    tokenizer_v4: Optional[str] = None
    tokenizer_v3_1: Optional[str] = None
    token_factory: Optional[str] = None
    token_init_code_hash: Optional[str] = None
    lp_locker: Optional[str] = None
    static_fee_hook: Optional[str] = None
    dynamic_fee_hook: Optional[str] = None
    mev_module: Optional[str] = None
    launch_buy_extension: Optional[str] = None
    tick_spacing: int = DEFAULT_TICK_SPACING

    def require(self, field_name: str) -> str:
        """Return the configured value of ``field_name`` or fail loudly."""

        value = getattr(self, field_name)
        if value in (None, ""):
            raise ConfigurationError(f"{self.name}: {field_name} is not configured (set {ENV_PREFIX}{field_name.upper()})")
        return value

    def with_overrides(self, **overrides: object) -> "NetworkConfig":
        return replace(self, **overrides)


NETWORK_CONFIGS: Dict[str, NetworkConfig] = {
    "base": NetworkConfig(
        name="base",
        chain_id=8453,
        rpc_url="https://mainnet.base.org",
        weth="0x4200000000000000000000000000000000000006",
        tokenizer_v4="0xea8127533f7be6d04b3dba8f0a496f2dcfd27728",
        tokenizer_v3_1="0x50e2a7193c4ad03221f4b4e3e33cdf1a46671ced",
    ),
    "base-sepolia": NetworkConfig(
        name="base-sepolia",
        chain_id=84532,
        rpc_url="https://sepolia.base.org",
        weth="0x4200000000000000000000000000000000000006",
    ),
}


def _get_env() -> Mapping[str, str]:
    load_dotenv()
    return os.environ


def _coerce(field_name: str, raw: str) -> object:
    if field_name in ("chain_id", "tick_spacing"):
        return int(raw, 0)
    return raw.strip()


def load_network_config(name: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> NetworkConfig:
    """Resolve the network configuration, applying ``POOLFANS_*`` overrides.

    Parameters
    ----------
    name:
        Network key in :data:`NETWORK_CONFIGS`. Defaults to
        ``POOLFANS_NETWORK`` or ``base``.
    env:
        Mapping used for overrides. When omitted ``os.environ`` (after
        ``load_dotenv``) is used.
    """

    if env is None:
        env = _get_env()

    network = name or env.get(f"{ENV_PREFIX}NETWORK") or DEFAULT_NETWORK
    try:
        config = NETWORK_CONFIGS[network]
    except KeyError as exc:
        supported = ", ".join(sorted(NETWORK_CONFIGS))
        raise ConfigurationError(f"Unsupported network {network!r} (supported: {supported})") from exc

    overrides: Dict[str, object] = {}
    for config_field in fields(NetworkConfig):
        if config_field.name == "name":
            continue
        raw = env.get(f"{ENV_PREFIX}{config_field.name.upper()}")
        if raw:
            overrides[config_field.name] = _coerce(config_field.name, raw)

    if overrides:
        _LOGGER.debug("Applying %d environment overrides to %s", len(overrides), network)
        config = config.with_overrides(**overrides)
    return config


__all__ = [
    "DEFAULT_NETWORK",
    "ENV_PREFIX",
    "NETWORK_CONFIGS",
    "NetworkConfig",
    "load_network_config",
]
