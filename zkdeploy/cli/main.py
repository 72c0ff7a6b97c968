"""zkdeploy CLI: deploy confidential asset contracts to an EVM node.

Usage:
    zkdeploy deploy                   Deploy and wire the full contract set
    zkdeploy events <tx-hash>         Print note events of a mined transaction
    zkdeploy config                   Show current configuration
    zkdeploy --version                Print version

Examples:
    zkdeploy deploy --proof-library my_proofs.lib:library --artifacts build/contracts
    zkdeploy deploy --chain ganache --fail-fast -o deployment.json
    zkdeploy events 0xabc... --artifact ZkAsset.json
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from typing import Any

from zkdeploy.core.chains import CHAINS, get_chain_config, resolve_rpc_url
from zkdeploy.core.config import Settings, get_settings
from zkdeploy.core.errors import ZkDeployError
from zkdeploy.core.logging import RunContextFilter, setup_logging
from zkdeploy.core.types import TxOptions

VERSION = "0.1.0"

logger = logging.getLogger("zkdeploy.cli")

# ── Coloured output helpers ──────────────────────────────────────────────────

_RESET = "\033[0m"
_BOLD = "\033[1m"
_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"


def _c(text: str, code: str) -> str:
    return f"{code}{text}{_RESET}"


BANNER = f"""
{_BOLD}{_CYAN}zkdeploy{_RESET} {_DIM}confidential asset deployer v{VERSION}{_RESET}
"""


# ── CLI argument parser ─────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zkdeploy",
        description="Deploy and wire confidential asset contracts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--no-banner", action="store_true", help="Suppress the startup banner")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output")

    sub = parser.add_subparsers(dest="command")

    # ── deploy ───────────────────────────────────────────────────────────────
    deploy_p = sub.add_parser("deploy", help="Deploy the contract set")
    _add_node_arguments(deploy_p)
    deploy_p.add_argument("--artifacts", help="Directory holding the contract artifacts")
    deploy_p.add_argument("--artifacts-url", help="Base URL to fetch contract artifacts from")
    deploy_p.add_argument("--proof-library", help="Proof library as 'module:attribute'")
    deploy_p.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Abort on the first failed deployment step",
    )
    deploy_p.add_argument("--output", "-o", help="Write the role -> address map to this file")

    # ── events ───────────────────────────────────────────────────────────────
    events_p = sub.add_parser("events", help="Print note events of a mined transaction")
    events_p.add_argument("tx_hash", help="Transaction hash (0x...)")
    events_p.add_argument(
        "--artifact",
        default="ZkAsset.json",
        help="Artifact whose ABI decodes the logs (default: ZkAsset.json)",
    )
    events_p.add_argument("--artifacts", help="Directory holding the contract artifacts")
    _add_node_arguments(events_p)

    # ── config ───────────────────────────────────────────────────────────────
    sub.add_parser("config", help="Show current configuration")

    return parser


def _add_node_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--rpc-url", help="Node JSON-RPC URL (default: chain default)")
    p.add_argument("--chain", choices=sorted(CHAINS), help="Target network")
    p.add_argument("--sender", help="Sender account (default: signer or first node account)")


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of ``settings`` with CLI flags applied."""
    overrides: dict[str, Any] = {}
    for flag, field_name in (
        ("rpc_url", "rpc_url"),
        ("chain", "chain"),
        ("sender", "sender_address"),
        ("artifacts", "artifacts_dir"),
        ("artifacts_url", "artifacts_url"),
        ("proof_library", "proof_library"),
        ("fail_fast", "deploy_fail_fast"),
        ("output", "deployment_output"),
    ):
        value = getattr(args, flag, None)
        if value is not None:
            overrides[field_name] = value
    return settings.model_copy(update=overrides)


def _build_client(settings: Settings):
    from zkdeploy.ingestion.artifacts import artifact_source_from_settings
    from zkdeploy.integrations.web3_client import Web3ExecutionClient

    source = artifact_source_from_settings(settings.artifacts_dir, settings.artifacts_url)
    rpc_url = resolve_rpc_url(settings.chain, settings.rpc_url)
    return Web3ExecutionClient.from_rpc(rpc_url, source, private_key=settings.private_key)


def _tx_options(settings: Settings, sender: str) -> TxOptions:
    """Transaction options for the target chain.

    A zero gas price is only sent to networks that run without fees; elsewhere
    it is left to the node.
    """
    chain = get_chain_config(settings.chain)
    free_gas = chain is not None and chain.free_gas
    if chain is not None:
        logger.info("Target network: %s (chain id %d)", chain.name, chain.chain_id, extra={"chain": settings.chain})
    gas_price = settings.gas_price if settings.gas_price or free_gas else None
    return TxOptions(sender=sender, gas=settings.gas, gas_price=gas_price)


# ── Deploy command ───────────────────────────────────────────────────────────


async def _run_deploy(args: argparse.Namespace) -> int:
    """Deploy the contract set and write the deployment record."""
    from zkdeploy.pipeline.orchestrator import instantiate
    from zkdeploy.proofs.library import load_proof_library

    settings = _apply_overrides(get_settings(), args)
    if not settings.proof_library:
        print(_c("Error: provide --proof-library or set ZKDEPLOY_PROOF_LIBRARY.", _RED), file=sys.stderr)
        return 1

    client = None
    try:
        library = load_proof_library(settings.proof_library)
        client = _build_client(settings)
        sender = settings.sender_address or await client.default_sender()
        tx_options = _tx_options(settings, sender)
        registry = await instantiate(client, tx_options, library, fail_fast=settings.deploy_fail_fast)
    except ZkDeployError as exc:
        print(_c(f"\nDeployment failed [{exc.kind.value}]: {exc}", _RED), file=sys.stderr)
        return 1
    except Exception as exc:
        print(_c(f"\nDeployment failed: {exc}", _RED), file=sys.stderr)
        return 1
    finally:
        if client is not None:
            await client.close()

    path = registry.save(settings.deployment_output)
    if not args.quiet:
        print(f"  Deployment record written to {_c(str(path), _CYAN)}")

    if registry.failures:
        print(_c(f"  {len(registry.failures)} deployment step(s) failed:", _YELLOW), file=sys.stderr)
        for failure in registry.failures:
            print(f"    {_DIM}{failure.step}:{_RESET} {failure}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(_c(f"  ✓ {len(registry)} contracts deployed and wired.", _GREEN))
    return 0


# ── Events command ───────────────────────────────────────────────────────────


async def _run_events(args: argparse.Namespace) -> int:
    """Fetch a receipt and print its note events."""
    from zkdeploy.reports.events import extract_note_events, format_note_event

    settings = _apply_overrides(get_settings(), args)
    client = None
    try:
        client = _build_client(settings)
        artifact = await client.source.read(args.artifact)
        receipt = await client.fetch_receipt(args.tx_hash, artifact)
    except Exception as exc:
        print(_c(f"Error: {exc}", _RED), file=sys.stderr)
        return 1
    finally:
        if client is not None:
            await client.close()

    records = extract_note_events(receipt.logs)
    if not records and not args.quiet:
        print(_c("  No note events in this transaction.", _DIM))
    for record in records:
        print(format_note_event(record))
    return 0


# ── Config command ───────────────────────────────────────────────────────────


def _run_config() -> int:
    """Print current settings (redacted)."""
    s = get_settings()
    print(f"\n{_BOLD}zkdeploy Configuration{_RESET}\n")
    for field_name in sorted(type(s).model_fields.keys()):
        val = getattr(s, field_name, "")
        if any(kw in field_name for kw in ("password", "secret", "key", "token")):
            val = "****" if val else "(not set)"
        print(f"  {_DIM}{field_name}:{_RESET}  {val}")
    print()
    return 0


# ── Entrypoint ───────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"zkdeploy {VERSION}")
        return 0

    if not args.no_banner:
        print(BANNER, file=sys.stderr)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "config":
        return _run_config()

    settings = get_settings()
    setup_logging(settings.app_env, "WARNING" if args.quiet else settings.log_level)
    for handler in logging.getLogger().handlers:
        handler.addFilter(RunContextFilter(run_id=uuid.uuid4().hex, chain=args.chain or settings.chain))

    if args.command == "deploy":
        return asyncio.run(_run_deploy(args))

    if args.command == "events":
        return asyncio.run(_run_events(args))

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
