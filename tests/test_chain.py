from __future__ import annotations

from types import SimpleNamespace

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address

from poolfans_tokenizer.addresses import PREDICT_VAULT_PARAMS
from poolfans_tokenizer.chain import Web3ContractReader
from poolfans_tokenizer.encoding import encode_call
from poolfans_tokenizer.errors import AddressResolutionError

from .fakes import EXISTING_TOKEN, TOKEN_FACTORY

WETH = "0x4200000000000000000000000000000000000006"
VAULT = "0xa0a0a0a0a0a0a0a0a0a0a0a0a0a0a0a0a0a0a0a0"


class DummyEth:
    def __init__(self, response: bytes) -> None:
        self.response = response
        self.requests: list[tuple[dict, object]] = []

    async def call(self, transaction, block_identifier=None):  # noqa: D401 - test double
        self.requests.append((transaction, block_identifier))
        return self.response


@pytest.mark.asyncio
async def test_call_encodes_request_and_decodes_result() -> None:
    eth = DummyEth(encode(["address"], [VAULT]))
    reader = Web3ContractReader(SimpleNamespace(eth=eth))

    result = await reader.call(TOKEN_FACTORY, "predictVaultAddress", PREDICT_VAULT_PARAMS, (EXISTING_TOKEN, WETH, 1), ("address",))

    assert result == (to_checksum_address(VAULT),)
    ((transaction, block),) = eth.requests
    assert transaction["to"] == to_checksum_address(TOKEN_FACTORY)
    assert transaction["data"] == "0x" + encode_call("predictVaultAddress", PREDICT_VAULT_PARAMS, (EXISTING_TOKEN, WETH, 1)).hex()
    assert block == "latest"


@pytest.mark.asyncio
async def test_empty_response_is_a_resolution_error() -> None:
    reader = Web3ContractReader(SimpleNamespace(eth=DummyEth(b"")))

    with pytest.raises(AddressResolutionError, match="returned no data") as excinfo:
        await reader.call(TOKEN_FACTORY, "sharesToken", (), (), ("address",))

    assert excinfo.value.contract == to_checksum_address(TOKEN_FACTORY)


def test_from_config_prefers_explicit_rpc_url(network_config) -> None:
    reader = Web3ContractReader.from_config(network_config, "http://localhost:8545")

    assert reader._w3.provider.endpoint_uri == "http://localhost:8545"


@pytest.mark.asyncio
async def test_call_checksums_decoded_addresses(monkeypatch) -> None:
    monkeypatch.setattr("poolfans_tokenizer.chain.decode", lambda types, data: (VAULT, 7))
    reader = Web3ContractReader(SimpleNamespace(eth=DummyEth(b"\x01")))

    result = await reader.call(VAULT, "pendingRewards", ("address",), (VAULT,), ("address", "uint256"))

    assert result == (to_checksum_address(VAULT), 7)
