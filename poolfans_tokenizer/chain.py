"""web3-backed read-only contract calls."""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Tuple

from eth_abi import decode
from eth_utils import to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3

from .config import NetworkConfig
from .encoding import encode_call, normalize_decoded
from .errors import AddressResolutionError

_LOGGER = logging.getLogger(__name__)


class Web3ContractReader:
    """:class:`~poolfans_tokenizer.addresses.ContractReader` over ``eth_call``.

    No retries or timeouts are applied here; wrap calls with your own policy.
    """

    def __init__(self, w3: AsyncWeb3, block_identifier: Optional[str] = "latest") -> None:
        self._w3 = w3
        self._block_identifier = block_identifier

    @classmethod
    def from_config(cls, config: NetworkConfig, rpc_url: Optional[str] = None) -> "Web3ContractReader":
        return cls(AsyncWeb3(AsyncHTTPProvider(rpc_url or config.rpc_url)))

    async def call(
        self,
        contract_address: str,
        function_name: str,
        input_types: Sequence[str],
        args: Sequence[Any],
        output_types: Sequence[str],
    ) -> Tuple[Any, ...]:
        data = encode_call(function_name, list(input_types), list(args))
        to = to_checksum_address(contract_address)
        _LOGGER.debug("eth_call %s.%s%s", to, function_name, tuple(args))
        raw = await self._w3.eth.call({"to": to, "data": "0x" + data.hex()}, self._block_identifier)
        if not raw:
            raise AddressResolutionError(f"{function_name} on {to} returned no data", contract=to)
        values = decode(list(output_types), bytes(raw))
        return tuple(normalize_decoded(abi_type, value) for abi_type, value in zip(output_types, values))


__all__ = ["Web3ContractReader"]
