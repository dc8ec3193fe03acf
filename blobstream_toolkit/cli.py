#!/usr/bin/env python3
"""
Unified CLI for the Blobstream toolkit.

Examples:
  - Full verification (endpoints may come from BS_* env vars or .env)
    blobstream verify --tx-hash 4B12...0346 --blob-index 0 \
        --start-block 105001 --end-block 106001 --nonce 106

  - Locate a blob's shares only
    blobstream share-range --tx-hash 4B12...0346 --blob-index 0

  - Read the root committed under a nonce
    blobstream attestation-root --nonce 106
"""

import argparse
import os
from typing import List, Optional

from dotenv import load_dotenv

from blobstream_toolkit.commands.helpers import (
    handle_command_error,
    report_stage_failure,
)
from blobstream_toolkit.commands.validation import (
    require_setting,
    validate_batch,
    validate_blob_index,
    validate_eth_address,
    validate_nonce,
    validate_tx_hash,
)
from blobstream_toolkit.shared.config import (
    ENV_CELESTIA_RPC_URL,
    ENV_CONTRACT_ADDRESS,
    ENV_EVM_RPC_URL,
    ENV_HTTP_TIMEOUT,
    VerificationConfig,
)
from blobstream_toolkit.shared.constants import NetworkConstants
from blobstream_toolkit.shared.services.blobstream_contract import (
    BlobstreamContract,
)
from blobstream_toolkit.shared.services.celestia_rpc import CelestiaRPCService
from blobstream_toolkit.shared.services.web3_service import Web3Service
from blobstream_toolkit.utils.encoding import to_hex
from blobstream_toolkit.utils.formatters import (
    console,
    create_report_table,
    generate_timestamped_filename,
    save_json_output,
)
from blobstream_toolkit.verification import BlobstreamVerifier, locate_blob


def cmd_verify(args: argparse.Namespace) -> None:
    tx_hash = validate_tx_hash(args.tx_hash)
    validate_blob_index(args.blob_index)
    validate_batch(args.start_block, args.end_block)
    validate_nonce(args.nonce)

    config = VerificationConfig.from_env(
        tx_hash=tx_hash,
        blob_index=args.blob_index,
        start_block=args.start_block,
        end_block=args.end_block,
        nonce=args.nonce,
        celestia_rpc_url=args.celestia_rpc,
        evm_rpc_url=args.evm_rpc,
        contract_address=args.contract,
        http_timeout=args.timeout,
    )

    with BlobstreamVerifier(config) as verifier:
        result = verifier.run()

    report = result.data
    if report is not None:
        console.print(create_report_table(report))
        if args.json or args.output:
            filename = args.output or generate_timestamped_filename(
                f"blobstream_{tx_hash[:10].lower()}"
            )
            save_json_output(report.to_dict(), filename)

    if not result.success:
        report_stage_failure(result.error)
        raise SystemExit(1)

    console.print(
        f"[green]Blob attested:[/green] height "
        f"{report.located.locator.block_height} under nonce {config.nonce}"
    )


def cmd_share_range(args: argparse.Namespace) -> None:
    tx_hash = validate_tx_hash(args.tx_hash)
    blob_index = validate_blob_index(args.blob_index)
    rpc_url = require_setting(
        args.celestia_rpc or os.getenv(ENV_CELESTIA_RPC_URL, ""),
        "--celestia-rpc",
        ENV_CELESTIA_RPC_URL,
    )

    with CelestiaRPCService(rpc_url, _resolve_timeout(args)) as client:
        located = locate_blob(client, tx_hash, blob_index)

    out = {
        "tx_hash": tx_hash,
        **located.locator.to_dict(),
        "share_range": located.share_range.to_dict(),
        "square_size": located.square_size,
        "data_root": to_hex(located.block.data_root),
        "app_version": located.block.app_version,
    }
    console.print(f"Height:      {located.locator.block_height}")
    console.print(f"Tx index:    {located.locator.tx_index}")
    console.print(
        f"Share range: [{located.share_range.start}, "
        f"{located.share_range.end}) ({len(located.share_range)} shares)"
    )
    console.print(
        f"Square size: {located.square_size}x{located.square_size}"
    )

    if args.json or args.output:
        filename = args.output or f"share_range_{tx_hash[:10].lower()}.json"
        save_json_output(out, filename)


def cmd_attestation_root(args: argparse.Namespace) -> None:
    nonce = validate_nonce(args.nonce)
    rpc_url = require_setting(
        args.evm_rpc or os.getenv(ENV_EVM_RPC_URL, ""),
        "--evm-rpc",
        ENV_EVM_RPC_URL,
    )
    contract = validate_eth_address(
        require_setting(
            args.contract or os.getenv(ENV_CONTRACT_ADDRESS, ""),
            "--contract",
            ENV_CONTRACT_ADDRESS,
        ),
        "contract",
    )

    with Web3Service(rpc_url, _resolve_timeout(args)) as web3_service:
        bridge = BlobstreamContract(web3_service, contract)
        root = bridge.data_root_tuple_root(nonce)
        latest = bridge.latest_nonce()

    console.print(f"Contract:     {contract}")
    console.print(f"Latest nonce: {latest}")
    if nonce > latest:
        console.print(f"[yellow]Nonce {nonce} is not committed yet[/yellow]")
    console.print(f"Root @ {nonce}: [green]{to_hex(root)}[/green]")


def _resolve_timeout(args: argparse.Namespace) -> float:
    if args.timeout is not None:
        return args.timeout
    raw = os.getenv(ENV_HTTP_TIMEOUT, str(NetworkConstants.DEFAULT_HTTP_TIMEOUT))
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid {ENV_HTTP_TIMEOUT}: {raw!r}")


def _add_endpoint_arguments(
    parser: argparse.ArgumentParser, celestia: bool, evm: bool
) -> None:
    if celestia:
        parser.add_argument(
            "--celestia-rpc",
            type=str,
            help=f"DA node RPC URL (default: ${ENV_CELESTIA_RPC_URL})",
        )
    if evm:
        parser.add_argument(
            "--evm-rpc",
            type=str,
            help=f"EVM RPC URL (default: ${ENV_EVM_RPC_URL})",
        )
        parser.add_argument(
            "--contract",
            type=str,
            help=f"Blobstream contract (default: ${ENV_CONTRACT_ADDRESS})",
        )
    parser.add_argument(
        "--timeout", type=float, help="Per-request timeout in seconds"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blobstream",
        description="Verify Celestia blobs against Blobstream attestations",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # verify
    p_verify = sub.add_parser(
        "verify", help="Run the full blob inclusion verification"
    )
    p_verify.add_argument("--tx-hash", type=str, required=True)
    p_verify.add_argument("--blob-index", type=int, default=0)
    p_verify.add_argument("--start-block", type=int, required=True)
    p_verify.add_argument("--end-block", type=int, required=True)
    p_verify.add_argument("--nonce", type=int, required=True)
    _add_endpoint_arguments(p_verify, celestia=True, evm=True)
    p_verify.add_argument("--json", action="store_true", help="Save report")
    p_verify.add_argument("--output", type=str, help="Output filename")
    p_verify.set_defaults(func=cmd_verify)

    # share-range
    p_range = sub.add_parser(
        "share-range", help="Locate the shares a blob occupies"
    )
    p_range.add_argument("--tx-hash", type=str, required=True)
    p_range.add_argument("--blob-index", type=int, default=0)
    _add_endpoint_arguments(p_range, celestia=True, evm=False)
    p_range.add_argument("--json", action="store_true", help="Output JSON")
    p_range.add_argument("--output", type=str, help="Output filename")
    p_range.set_defaults(func=cmd_share_range)

    # attestation-root
    p_root = sub.add_parser(
        "attestation-root",
        help="Read the data root tuple root stored for a nonce",
    )
    p_root.add_argument("--nonce", type=int, required=True)
    _add_endpoint_arguments(p_root, celestia=False, evm=True)
    p_root.set_defaults(func=cmd_attestation_root)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except Exception as e:
        handle_command_error(e)


if __name__ == "__main__":
    main()
