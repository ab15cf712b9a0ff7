"""Deterministic address prediction for tokens and reward vaults."""
from __future__ import annotations

import asyncio
import logging
import secrets
from typing import Any, Dict, Iterable, List, Protocol, Sequence, Tuple, Union

from eth_utils import is_address, to_bytes, to_canonical_address, to_checksum_address

from .encoding import Field, RecordSchema, encode_record, keccak256
from .errors import AddressResolutionError, EncodingError
from .models import FeePreference

_LOGGER = logging.getLogger(__name__)

CREATE2_PREFIX = b"\xff"
NONCE_SIZE = 32

SALT_SCHEMA = RecordSchema(
    "DeploySalt",
    (
        Field("admin", "address"),
        Field("nonce", "bytes32"),
    ),
)

PREDICT_VAULT_FUNCTION = "predictVaultAddress"
PREDICT_VAULT_PARAMS: Tuple[str, ...] = ("address", "address", "uint8")

Bytes32 = Union[bytes, str]


def _as_bytes32(value: Bytes32, label: str) -> bytes:
    raw = to_bytes(hexstr=value) if isinstance(value, str) else bytes(value)
    if len(raw) != 32:
        raise EncodingError(f"{label} must be 32 bytes, got {len(raw)}")
    return raw


def generate_nonce() -> bytes:
    """Fresh 32-byte nonce from a cryptographically secure source."""

    return secrets.token_bytes(NONCE_SIZE)


def derive_salt(admin: str, nonce: Bytes32) -> bytes:
    """Deploy salt: ``keccak256(abi.encode(admin, nonce))``.

    Binding the admin into the salt makes nonce reuse across different admins
    harmless; reusing a nonce for the same admin yields the same address.
    """

    return keccak256(encode_record(SALT_SCHEMA, {"admin": admin, "nonce": _as_bytes32(nonce, "nonce")}))


def predict_deploy_address(deployer: str, init_code_hash: Bytes32, salt: Bytes32) -> str:
    """CREATE2 address: last 20 bytes of ``keccak256(0xff ++ deployer ++ salt ++ init_code_hash)``."""

    if not is_address(deployer):
        raise EncodingError(f"Invalid deployer address: {deployer!r}")
    preimage = (
        CREATE2_PREFIX
        + to_canonical_address(deployer)
        + _as_bytes32(salt, "salt")
        + _as_bytes32(init_code_hash, "init code hash")
    )
    return to_checksum_address(keccak256(preimage)[12:])


def predict_token_address(deployer: str, admin: str, nonce: Bytes32, init_code_hash: Bytes32) -> str:
    return predict_deploy_address(deployer, init_code_hash, derive_salt(admin, nonce))


class ContractReader(Protocol):
    """Read-only contract call collaborator."""

    async def call(
        self,
        contract_address: str,
        function_name: str,
        input_types: Sequence[str],
        args: Sequence[Any],
        output_types: Sequence[str],
    ) -> Tuple[Any, ...]:
        ...


def distinct_preferences(preferences: Iterable[FeePreference]) -> List[FeePreference]:
    """Unique preferences in first-seen order."""

    seen: List[FeePreference] = []
    for preference in preferences:
        preference = FeePreference.parse(preference)
        if preference not in seen:
            seen.append(preference)
    return seen


class VaultAddressResolver:
    """Ask the tokenizer factory where each reward vault will live.

    Recipients sharing a fee preference share a vault, so exactly one read is
    issued per distinct preference. Reads run concurrently; a transport error
    reaches the caller unchanged and cancels the reads still in flight.
    """

    def __init__(self, reader: ContractReader, factory_address: str) -> None:
        self._reader = reader
        self._factory_address = factory_address

    async def resolve_one(self, token: str, paired_asset: str, preference: FeePreference) -> str:
        result = await self._reader.call(
            self._factory_address,
            PREDICT_VAULT_FUNCTION,
            PREDICT_VAULT_PARAMS,
            (token, paired_asset, int(preference)),
            ("address",),
        )
        if not result or not isinstance(result[0], str) or not is_address(result[0]):
            raise AddressResolutionError(
                f"{PREDICT_VAULT_FUNCTION} returned an unusable payload: {result!r}",
                contract=self._factory_address,
            )
        vault = to_checksum_address(result[0])
        if int(vault, 16) == 0:
            raise AddressResolutionError(
                f"{PREDICT_VAULT_FUNCTION} returned the zero address for preference {preference.name}",
                contract=self._factory_address,
            )
        return vault

    async def resolve(
        self,
        token: str,
        paired_asset: str,
        preferences: Iterable[FeePreference],
    ) -> Dict[FeePreference, str]:
        unique = distinct_preferences(preferences)
        tasks = [asyncio.ensure_future(self.resolve_one(token, paired_asset, pref)) for pref in unique]
        try:
            vaults = await asyncio.gather(*tasks)
        except BaseException:
            # One read failed: stop the others and collect their outcome.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        resolved = dict(zip(unique, vaults))
        _LOGGER.debug("Resolved %d vault address(es) for %s: %s", len(resolved), token, resolved)
        return resolved


__all__ = [
    "ContractReader",
    "PREDICT_VAULT_FUNCTION",
    "PREDICT_VAULT_PARAMS",
    "SALT_SCHEMA",
    "VaultAddressResolver",
    "derive_salt",
    "distinct_preferences",
    "generate_nonce",
    "predict_deploy_address",
    "predict_token_address",
]
