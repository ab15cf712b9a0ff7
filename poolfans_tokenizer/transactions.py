"""Prepared contract calls ready to be signed by the caller."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from eth_utils import to_checksum_address

from .encoding import Param, encode_call, function_signature


@dataclass(frozen=True)
class PreparedCall:
    """A contract invocation with its arguments still in structured form."""

    to: str
    function_name: str
    params: Tuple[Param, ...]
    args: Tuple[Any, ...]
    value: int = 0

    @property
    def signature(self) -> str:
        return function_signature(self.function_name, self.params)

    @property
    def calldata(self) -> str:
        return "0x" + encode_call(self.function_name, self.params, self.args).hex()

    def as_transaction(
        self,
        sender: str,
        *,
        chain_id: Optional[int] = None,
        gas: Optional[int] = None,
        nonce: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Return an unsigned transaction dictionary for ``sender``."""

        transaction: Dict[str, Any] = {
            "from": to_checksum_address(sender),
            "to": to_checksum_address(self.to),
            "value": hex(self.value),
            "data": self.calldata,
        }
        if chain_id is not None:
            transaction["chainId"] = chain_id
        if gas is not None:
            transaction["gas"] = gas
        if nonce is not None:
            transaction["nonce"] = nonce
        return transaction


__all__ = ["PreparedCall"]
