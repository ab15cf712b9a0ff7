#!/usr/bin/env python3
"""Build the initialize and finalize transactions that tokenize an existing token.

Typical flow::

    python scripts/build_tokenization_tx.py init --token 0x... \\
        --recipient 0xabc...:6000:both --recipient 0xdef...:4000:paired \\
        --pending-file pending.json
    # submit, then transfer the token's fee admin to the printed vault
    python scripts/build_tokenization_tx.py finalize --pending-file pending.json --pending-id 7
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from dotenv import load_dotenv
from eth_account import Account

from poolfans_tokenizer.chain import Web3ContractReader
from poolfans_tokenizer.config import load_network_config
from poolfans_tokenizer.errors import PoolFansError
from poolfans_tokenizer.models import (
    DeploymentVersion,
    FeePreference,
    PendingTokenization,
    RewardRecipient,
    TokenizationRequest,
)
from poolfans_tokenizer.tokenization import build_finalize_tokenization, build_initialize_tokenization


def parse_recipient(value: str) -> RewardRecipient:
    """Parse ``address:bps[:preference[:admin]]``."""

    parts = value.split(":")
    if len(parts) < 2 or len(parts) > 4:
        raise argparse.ArgumentTypeError(f"Expected address:bps[:preference[:admin]], got {value!r}")
    address = parts[0]
    try:
        bps = int(parts[1])
        preference = FeePreference.parse(parts[2]) if len(parts) > 2 and parts[2] else FeePreference.BOTH
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    admin = parts[3] if len(parts) > 3 and parts[3] else address
    return RewardRecipient(recipient=address, admin=admin, bps=bps, fee_preference=preference)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--network", default=None, help="Network key (default: POOLFANS_NETWORK or base)")
    parser.add_argument("--rpc-url", default=None, help="Override the RPC endpoint used for the vault read")
    parser.add_argument("--sender", default=None, help="Transaction sender (default: the PRIVATE_KEY account)")
    parser.add_argument("--log-level", default="WARNING", help="Logging verbosity (DEBUG, INFO, WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Build initTokenization and predict the vault address")
    init.add_argument("--token", required=True, help="Existing token to tokenize")
    init.add_argument(
        "--recipient",
        action="append",
        dest="recipients",
        type=parse_recipient,
        required=True,
        help="Reward recipient as address:bps[:preference[:admin]]. Repeat for each recipient.",
    )
    init.add_argument(
        "--version",
        choices=[version.value for version in DeploymentVersion],
        default=DeploymentVersion.V4.value,
        help="Deployment version of the token (default: v4)",
    )
    init.add_argument("--paired-asset", default=None, help="Paired asset of the token's pool (default: WETH)")
    init.add_argument(
        "--vault-preference",
        type=FeePreference.parse,
        default=FeePreference.BOTH,
        help="Fee preference keying the vault (both, paired, project)",
    )
    init.add_argument("--pending-file", type=Path, default=None, help="Write the pending handle to this JSON file")

    finalize = subparsers.add_parser("finalize", help="Build finalizeTokenization for a pending handle")
    finalize.add_argument("--pending-file", type=Path, required=True, help="Pending handle written by init")
    finalize.add_argument("--pending-id", type=int, default=None, help="Pending id from the initialize receipt")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def _sender(explicit: Optional[str], env: Mapping[str, str]) -> str:
    if explicit:
        return explicit
    secret_key = env.get("PRIVATE_KEY")
    if not secret_key:
        raise ValueError("Provide --sender or set PRIVATE_KEY to derive the sender address.")
    return Account.from_key(secret_key).address


async def run_init(args: argparse.Namespace, env: Mapping[str, str]) -> Dict[str, Any]:
    config = load_network_config(args.network, env=env)
    sender = _sender(args.sender, env)
    recipients: List[RewardRecipient] = args.recipients
    request = TokenizationRequest(
        token=args.token,
        recipients=tuple(recipients),
        version=DeploymentVersion(args.version),
        paired_asset=args.paired_asset,
        vault_preference=args.vault_preference,
    )
    reader = Web3ContractReader.from_config(config, args.rpc_url)
    result = await build_initialize_tokenization(request, config, reader)
    if args.pending_file is not None:
        args.pending_file.write_text(json.dumps(result.pending.as_dict(), indent=2) + "\n", encoding="utf-8")
        logging.info("Wrote pending handle to %s", args.pending_file)
    return {
        "predicted_vault_address": result.predicted_vault_address,
        "pending": result.pending.as_dict(),
        "transaction": result.call.as_transaction(sender, chain_id=config.chain_id),
    }


def run_finalize(args: argparse.Namespace, env: Mapping[str, str]) -> Dict[str, Any]:
    config = load_network_config(args.network, env=env)
    sender = _sender(args.sender, env)
    try:
        payload = json.loads(args.pending_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Unable to read pending file {args.pending_file}: {exc}") from exc
    pending = PendingTokenization.from_dict(payload)
    if args.pending_id is not None:
        pending = pending.with_pending_id(args.pending_id)
    call = build_finalize_tokenization(pending, config)
    return {
        "pending": pending.as_dict(),
        "transaction": call.as_transaction(sender, chain_id=config.chain_id),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)
    load_dotenv()
    env = os.environ

    try:
        if args.command == "init":
            document = asyncio.run(run_init(args, env))
        else:
            document = run_finalize(args, env)
    except (PoolFansError, ValueError, KeyError) as exc:
        print(f"[❌] {exc}")
        return 1

    print(json.dumps(document, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
