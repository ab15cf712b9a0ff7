"""Claim and query helpers for deployed revenue vaults."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict

from eth_utils import to_checksum_address

from .addresses import ContractReader
from .transactions import PreparedCall


@dataclass(frozen=True)
class VaultInfo:
    address: str
    clanker_token: str
    paired_token: str
    shares_token: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "clanker_token": self.clanker_token,
            "paired_token": self.paired_token,
            "shares_token": self.shares_token,
        }


@dataclass(frozen=True)
class PendingRewards:
    """Claimable amounts, in base units of each token."""

    clanker_rewards: int
    paired_rewards: int


def build_claim_rewards(vault_address: str) -> PreparedCall:
    return PreparedCall(to=vault_address, function_name="claimRewards", params=(), args=())


async def read_vault_info(reader: ContractReader, vault_address: str) -> VaultInfo:
    """Read the vault's token addresses concurrently."""

    shares, clanker, paired = await asyncio.gather(
        reader.call(vault_address, "sharesToken", (), (), ("address",)),
        reader.call(vault_address, "clankerToken", (), (), ("address",)),
        reader.call(vault_address, "pairedToken", (), (), ("address",)),
    )
    return VaultInfo(
        address=to_checksum_address(vault_address),
        clanker_token=to_checksum_address(clanker[0]),
        paired_token=to_checksum_address(paired[0]),
        shares_token=to_checksum_address(shares[0]),
    )


async def read_pending_rewards(reader: ContractReader, vault_address: str, account: str) -> PendingRewards:
    clanker, paired = await reader.call(
        vault_address,
        "pendingRewards",
        ("address",),
        (account,),
        ("uint256", "uint256"),
    )
    return PendingRewards(clanker_rewards=int(clanker), paired_rewards=int(paired))


__all__ = [
    "PendingRewards",
    "VaultInfo",
    "build_claim_rewards",
    "read_pending_rewards",
    "read_vault_info",
]
