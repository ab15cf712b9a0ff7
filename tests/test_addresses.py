from __future__ import annotations

import asyncio

import pytest
from eth_abi import encode

from poolfans_tokenizer.addresses import (
    VaultAddressResolver,
    derive_salt,
    distinct_preferences,
    generate_nonce,
    predict_deploy_address,
    predict_token_address,
)
from poolfans_tokenizer.encoding import keccak256
from poolfans_tokenizer.errors import AddressResolutionError, EncodingError
from poolfans_tokenizer.models import FeePreference

from .fakes import ADMIN, ADMIN_2, EXISTING_TOKEN, TOKEN_FACTORY, TOKEN_INIT_CODE_HASH, VAULTS, FakeReader

INIT_CODE_HASH_OF_ZERO_BYTE = keccak256(b"\x00")
ZERO_SALT = b"\x00" * 32
NONCE = bytes.fromhex("11" * 32)
WETH = "0x4200000000000000000000000000000000000006"


@pytest.mark.parametrize(
    "deployer, salt, expected",
    [
        (
            "0x0000000000000000000000000000000000000000",
            ZERO_SALT,
            "0x4D1A2e2bB4F88F0250f26Ffff098B0b30B26BF38",
        ),
        (
            "0xdeadbeef00000000000000000000000000000000",
            ZERO_SALT,
            "0xB928f69Bb1D91Cd65274e3c79d8986362984fDA3",
        ),
        (
            "0xdeadbeef00000000000000000000000000000000",
            "0x000000000000000000000000feed000000000000000000000000000000000000",
            "0xD04116cDd17beBE565EB2422F2497E06cC1C9833",
        ),
    ],
)
def test_predict_deploy_address_matches_create2_vectors(deployer, salt, expected) -> None:
    predicted = predict_deploy_address(deployer, INIT_CODE_HASH_OF_ZERO_BYTE, salt)

    assert predicted.lower() == expected.lower()


def test_derive_salt_hashes_abi_encoded_admin_and_nonce() -> None:
    expected = keccak256(encode(["address", "bytes32"], [ADMIN, NONCE]))

    assert derive_salt(ADMIN, NONCE) == expected
    assert derive_salt(ADMIN, "0x" + NONCE.hex()) == expected


def test_predict_token_address_is_deterministic() -> None:
    first = predict_token_address(TOKEN_FACTORY, ADMIN, NONCE, TOKEN_INIT_CODE_HASH)
    second = predict_token_address(TOKEN_FACTORY, ADMIN, NONCE, TOKEN_INIT_CODE_HASH)

    assert first == second
    assert first == predict_deploy_address(TOKEN_FACTORY, TOKEN_INIT_CODE_HASH, derive_salt(ADMIN, NONCE))


def test_predict_token_address_changes_with_each_input() -> None:
    baseline = predict_token_address(TOKEN_FACTORY, ADMIN, NONCE, TOKEN_INIT_CODE_HASH)

    assert predict_token_address(TOKEN_FACTORY, ADMIN_2, NONCE, TOKEN_INIT_CODE_HASH) != baseline
    assert predict_token_address(TOKEN_FACTORY, ADMIN, b"\x22" * 32, TOKEN_INIT_CODE_HASH) != baseline
    assert predict_token_address(ADMIN_2, ADMIN, NONCE, TOKEN_INIT_CODE_HASH) != baseline
    assert predict_token_address(TOKEN_FACTORY, ADMIN, NONCE, "0x" + "cd" * 32) != baseline


def test_short_salt_is_rejected() -> None:
    with pytest.raises(EncodingError, match="salt must be 32 bytes"):
        predict_deploy_address(TOKEN_FACTORY, TOKEN_INIT_CODE_HASH, b"\x01" * 31)


def test_invalid_deployer_is_rejected() -> None:
    with pytest.raises(EncodingError, match="Invalid deployer address"):
        predict_deploy_address("0x1234", TOKEN_INIT_CODE_HASH, ZERO_SALT)


def test_generate_nonce_is_32_random_bytes() -> None:
    first = generate_nonce()
    second = generate_nonce()

    assert len(first) == 32
    assert first != second


def test_distinct_preferences_keeps_first_seen_order() -> None:
    preferences = [FeePreference.PAIRED, FeePreference.BOTH, FeePreference.PAIRED, 0]

    assert distinct_preferences(preferences) == [FeePreference.PAIRED, FeePreference.BOTH]


@pytest.mark.asyncio
async def test_resolver_issues_one_read_per_distinct_preference() -> None:
    reader = FakeReader()
    resolver = VaultAddressResolver(reader, TOKEN_FACTORY)

    vaults = await resolver.resolve(
        EXISTING_TOKEN,
        WETH,
        [FeePreference.BOTH, FeePreference.BOTH, FeePreference.PROJECT],
    )

    assert vaults == {FeePreference.BOTH: VAULTS[FeePreference.BOTH], FeePreference.PROJECT: VAULTS[FeePreference.PROJECT]}
    assert sorted(call[2][2] for call in reader.calls_to("predictVaultAddress")) == [0, 2]
    assert all(call[0] == TOKEN_FACTORY for call in reader.calls)


@pytest.mark.asyncio
async def test_resolver_propagates_transport_errors_unchanged() -> None:
    failure = ConnectionError("rpc down")
    resolver = VaultAddressResolver(FakeReader(error=failure), TOKEN_FACTORY)

    with pytest.raises(ConnectionError) as excinfo:
        await resolver.resolve(EXISTING_TOKEN, WETH, [FeePreference.BOTH])

    assert excinfo.value is failure


@pytest.mark.asyncio
async def test_resolver_rejects_zero_address() -> None:
    reader = FakeReader(responses={"predictVaultAddress": ("0x0000000000000000000000000000000000000000",)})
    resolver = VaultAddressResolver(reader, TOKEN_FACTORY)

    with pytest.raises(AddressResolutionError) as excinfo:
        await resolver.resolve_one(EXISTING_TOKEN, WETH, FeePreference.BOTH)

    assert excinfo.value.contract == TOKEN_FACTORY


@pytest.mark.asyncio
async def test_resolver_rejects_malformed_payload() -> None:
    resolver = VaultAddressResolver(FakeReader(responses={"predictVaultAddress": ()}), TOKEN_FACTORY)

    with pytest.raises(AddressResolutionError, match="unusable payload"):
        await resolver.resolve_one(EXISTING_TOKEN, WETH, FeePreference.PAIRED)


class StallingReader:
    """Fails the BOTH read and stalls every other one until cancelled."""

    def __init__(self, failure: Exception) -> None:
        self.failure = failure
        self.started: list[int] = []
        self.cancelled: list[int] = []

    async def call(self, contract_address, function_name, input_types, args, output_types):
        preference = args[2]
        self.started.append(preference)
        if preference == FeePreference.BOTH:
            await asyncio.sleep(0)
            raise self.failure
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            self.cancelled.append(preference)
            raise
        return (VAULTS[FeePreference(preference)],)


@pytest.mark.asyncio
async def test_failed_read_cancels_sibling_reads() -> None:
    failure = ConnectionError("rpc down")
    reader = StallingReader(failure)
    resolver = VaultAddressResolver(reader, TOKEN_FACTORY)

    with pytest.raises(ConnectionError) as excinfo:
        await resolver.resolve(EXISTING_TOKEN, WETH, [FeePreference.BOTH, FeePreference.PAIRED, FeePreference.PROJECT])

    assert excinfo.value is failure
    assert sorted(reader.started) == [0, 1, 2]
    assert sorted(reader.cancelled) == [1, 2]
