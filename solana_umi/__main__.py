"""Command-line entry point for Solana Umi.

Usage:
    solana-umi pda <program_id> <seed> [<seed> ...]
    solana-umi balance <address>
    solana-umi rent <size> [--no-header]
    solana-umi airdrop <address> <amount_sol>
    solana-umi cluster
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from solana_umi.amounts import sol
from solana_umi.cluster import explorer_link
from solana_umi.config import get_json_logs, get_log_level
from solana_umi.constants import CLUSTER_ENDPOINTS
from solana_umi.context import create_umi
from solana_umi.eddsa import find_program_address
from solana_umi.logging_config import configure_logging, get_logger
from solana_umi.utils.errors import SolanaUmiError

logger = get_logger(__name__)


def _seed(value: str) -> bytes:
    """Seeds prefixed with ``hex:`` are decoded, anything else is UTF-8."""
    if value.startswith("hex:"):
        return bytes.fromhex(value[4:])
    return value.encode("utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="solana-umi", description="Solana Umi client")
    parser.add_argument("--url", help="RPC endpoint or cluster name (defaults to SOLANA_RPC_URL)")
    parser.add_argument("--commitment", choices=["processed", "confirmed", "finalized"])
    parser.add_argument("--json-errors", action="store_true",
                        help="Report failures as a JSON error object on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pda = subparsers.add_parser("pda", help="Derive a program address")
    pda.add_argument("program_id")
    pda.add_argument("seeds", nargs="*", type=_seed)

    balance = subparsers.add_parser("balance", help="Show an account balance")
    balance.add_argument("address")

    rent = subparsers.add_parser("rent", help="Rent-exempt minimum for a data size")
    rent.add_argument("size", type=int)
    rent.add_argument("--no-header", action="store_true",
                      help="Size already includes the account header")

    airdrop = subparsers.add_parser("airdrop", help="Request test funds and wait for them")
    airdrop.add_argument("address")
    airdrop.add_argument("amount", help="Amount in SOL, e.g. 1.5")

    subparsers.add_parser("cluster", help="Show the cluster behind the endpoint")
    return parser


async def run(args: argparse.Namespace) -> None:
    if args.command == "pda":
        pda = find_program_address(args.program_id, args.seeds)
        print(f"Address: {pda.address}")
        print(f"Bump: {pda.bump}")
        return

    context = create_umi(CLUSTER_ENDPOINTS.get(args.url, args.url))
    async with context:
        rpc = context.rpc
        if args.command == "balance":
            print(await rpc.get_balance(args.address, args.commitment))
        elif args.command == "rent":
            print(await rpc.get_rent(args.size, include_header=not args.no_header,
                                     commitment=args.commitment))
        elif args.command == "airdrop":
            result = await rpc.airdrop(args.address, sol(args.amount), commitment=args.commitment)
            print(f"Signature: {result.signature}")
            print(explorer_link(result.signature, rpc.get_cluster(), rpc.get_endpoint()))
        elif args.command == "cluster":
            print(f"{rpc.get_cluster()} ({rpc.get_endpoint()})")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the Solana Umi command-line client."""
    configure_logging(get_log_level(), json_logs=get_json_logs())
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run(args))
    except SolanaUmiError as e:
        logger.debug("Command failed", exc_info=True)
        if args.json_errors:
            print(e.to_response().model_dump_json(), file=sys.stderr)
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
