#!/usr/bin/env python3
"""
Unified CLI for the L2 Proof Toolkit.

Examples:
  - Latest committed state root
    l2proof state-root

  - Text record proof
    l2proof proofs-text --resolver 0x... --node 0x... --key network.profile

  - Any string record mapping
    l2proof proofs-record --resolver 0x... --node 0x... --key avatar --base-slot 9

RPC endpoints come from L1_RPC_URL / L2_RPC_URL (or --l1-rpc / --l2-rpc).
"""

import argparse
import asyncio
from typing import Optional

from rich.panel import Panel

from l2proof_toolkit.commands.helpers import handle_command_error
from l2proof_toolkit.commands.validation import (
    validate_base_slot,
    validate_eth_address,
    validate_node,
    validate_record_key,
)
from l2proof_toolkit.proofs import L2RecordProofs, RecordLocator
from l2proof_toolkit.proofs.generators.storage_slot import classify_slot_value
from l2proof_toolkit.shared.constants import ResolverConstants
from l2proof_toolkit.shared.logging import set_log_level
from l2proof_toolkit.utils.blockchain import to_hex
from l2proof_toolkit.utils.formatters import (
    console,
    proof_bundle_table,
    save_json_output,
    state_root_table,
)


def _build_proofs(args: argparse.Namespace) -> L2RecordProofs:
    return L2RecordProofs(
        l1_rpc_url=args.l1_rpc,
        l2_rpc_url=args.l2_rpc,
        state_commitment_chain=args.scc,
        stage_timeout=args.timeout,
    )


async def _prove_record(
    args: argparse.Namespace, base_slot: int
) -> None:
    locator = RecordLocator(
        contract_address=validate_eth_address(args.resolver, "resolver"),
        node=validate_node(args.node),
        record_key=validate_record_key(args.key),
        base_slot_index=validate_base_slot(base_slot),
    )

    console.print(Panel("Generating Record Proof", style="bold magenta"))
    proofs = _build_proofs(args)
    bundle = (
        await proofs.get_record_proof(locator, max_retries=args.retries)
    ).unwrap()

    primary = bundle.storage_proofs[0]
    classification = classify_slot_value(primary.raw_value)
    console.print(proof_bundle_table(bundle))
    console.print(
        f"[cyan]Encoding:[/cyan] {classification.encoding.value}, "
        f"{classification.length} bytes"
    )

    output = bundle.to_dict()
    output["encoded"] = to_hex(bundle.encode())
    filename = args.output or f"record_proof_{args.key}.json"
    path = save_json_output(output, filename)
    console.print(f"Record proof generated. Saved → {path}")


def cmd_proofs_text(args: argparse.Namespace) -> None:
    asyncio.run(_prove_record(args, ResolverConstants.TEXTS_SLOT_INDEX))


def cmd_proofs_record(args: argparse.Namespace) -> None:
    asyncio.run(_prove_record(args, args.base_slot))


def cmd_state_root(args: argparse.Namespace) -> None:
    async def _run() -> None:
        proofs = _build_proofs(args)
        state_root = (
            await proofs.get_latest_state_root(max_retries=args.retries)
        ).unwrap()
        console.print(state_root_table(state_root))

    asyncio.run(_run())


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--l1-rpc", type=str, help="L1 RPC URL")
    parser.add_argument("--l2-rpc", type=str, help="L2 RPC URL")
    parser.add_argument(
        "--scc", type=str, help="State Commitment Chain address on L1"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds allowed per network stage",
    )
    parser.add_argument(
        "--retries", type=int, default=3, help="Attempts for transient errors"
    )
    parser.add_argument(
        "--log-level", type=str, default=None, help="DEBUG, INFO, WARNING..."
    )


def _add_record_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--resolver", type=str, required=True, help="Resolver address on L2"
    )
    parser.add_argument(
        "--node", type=str, required=True, help="32-byte node (namehash)"
    )
    parser.add_argument("--key", type=str, required=True, help="Record key")
    parser.add_argument("--output", type=str, help="Output JSON filename")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="l2proof", description="Cross-layer proofs for L2 resolver records"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    text = subparsers.add_parser("proofs-text", help="Prove a text record")
    _add_record_args(text)
    _add_common_args(text)
    text.set_defaults(func=cmd_proofs_text)

    record = subparsers.add_parser(
        "proofs-record", help="Prove a string record at any base slot"
    )
    _add_record_args(record)
    record.add_argument(
        "--base-slot", type=int, required=True, help="Mapping base slot"
    )
    _add_common_args(record)
    record.set_defaults(func=cmd_proofs_record)

    state_root = subparsers.add_parser(
        "state-root", help="Show the latest committed L2 state root"
    )
    _add_common_args(state_root)
    state_root.set_defaults(func=cmd_state_root)

    return parser


def main(argv: Optional[list] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)

    try:
        args.func(args)
    except Exception as e:
        handle_command_error(e)


if __name__ == "__main__":
    main()
