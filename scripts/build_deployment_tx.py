#!/usr/bin/env python3
"""Build an unsigned deploy transaction from a JSON deployment intent.

The intent file uses the camelCase layout of the PoolFans SDK::

    {
      "name": "My Token",
      "symbol": "MTK",
      "tokenAdmin": "0x...",
      "rewards": {"recipients": [{"recipient": "0x...", "admin": "0x...", "bps": 10000, "token": "Both"}]},
      "devBuy": {"ethAmount": "0.1"}
    }

Contract addresses come from the selected network plus ``POOLFANS_*``
environment overrides. Keep the printed nonce if you need to rebuild the same
predicted token address later.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from dotenv import load_dotenv
from eth_account import Account

from poolfans_tokenizer.builder import DeploymentBuilder
from poolfans_tokenizer.chain import Web3ContractReader
from poolfans_tokenizer.config import load_network_config
from poolfans_tokenizer.errors import PoolFansError
from poolfans_tokenizer.models import DeploymentIntent
from poolfans_tokenizer.schemas import DeploymentSchema


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("intent", type=Path, help="Path to the JSON deployment intent")
    parser.add_argument("--network", default=None, help="Network key (default: POOLFANS_NETWORK or base)")
    parser.add_argument("--rpc-url", default=None, help="Override the RPC endpoint used for vault reads")
    parser.add_argument(
        "--schema",
        choices=[schema.value for schema in DeploymentSchema],
        default=DeploymentSchema.FACTORY_V4.value,
        help="Record layout to build (default: factory-v4)",
    )
    parser.add_argument("--nonce", default=None, help="Reuse a 32-byte hex nonce for a reproducible token address")
    parser.add_argument(
        "--sender",
        default=None,
        help="Transaction sender. Defaults to the PRIVATE_KEY account, then the intent's tokenAdmin.",
    )
    parser.add_argument("--gas", type=int, default=None, help="Optional gas limit to embed in the transaction")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to also write the JSON document")
    parser.add_argument("--log-level", default="WARNING", help="Logging verbosity (DEBUG, INFO, WARNING)")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def resolve_sender(explicit: Optional[str], intent: DeploymentIntent, env: Mapping[str, str]) -> str:
    if explicit:
        return explicit
    secret_key = env.get("PRIVATE_KEY")
    if secret_key:
        return Account.from_key(secret_key).address
    return intent.token_admin


def load_intent(path: Path) -> DeploymentIntent:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Unable to read intent file {path}: {exc}") from exc
    try:
        return DeploymentIntent.from_dict(payload)
    except (KeyError, TypeError, ArithmeticError) as exc:
        raise ValueError(f"Intent file {path} is incomplete: {exc}") from exc


async def build_document(args: argparse.Namespace, env: Mapping[str, str]) -> Dict[str, Any]:
    intent = load_intent(args.intent)
    config = load_network_config(args.network, env=env)
    reader = Web3ContractReader.from_config(config, args.rpc_url)
    builder = DeploymentBuilder(config, reader, DeploymentSchema(args.schema))
    built = await builder.build(intent, nonce=args.nonce)

    sender = resolve_sender(args.sender, intent, env)
    document = built.as_dict()
    document["transaction"] = built.call.as_transaction(sender, chain_id=config.chain_id, gas=args.gas)
    return document


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    load_dotenv()

    try:
        document = asyncio.run(build_document(args, os.environ))
    except (PoolFansError, ValueError) as exc:
        print(f"[❌] {exc}")
        return 1

    text = json.dumps(document, indent=2)
    print(text)
    if args.output is not None:
        args.output.write_text(text + "\n", encoding="utf-8")
        logging.info("Wrote deployment to %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
