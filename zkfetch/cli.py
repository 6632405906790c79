# zkfetch/cli.py
"""
zkfetch command line.

Usage:
  zkfetch sources                       list registered sources
  zkfetch preview price-feed            fetch + match locally, no attestation
  zkfetch request rankings -o p.json    request and store a proof
  zkfetch inspect p.json                show the verifier payload for a proof
  zkfetch verify p.json --mainnet       submit the proof to the verifier
  zkfetch workflow weather              request, then verify
  zkfetch info | init
"""

import argparse
import asyncio
import json
import logging
import sys

from zkfetch.app import App
from zkfetch.attestation import ReclaimOnchainNormalizer, attestation_problems
from zkfetch.bootstrap import create_env_file, validate_setup
from zkfetch.claim import prepare_verification_payload
from zkfetch.config import load_settings
from zkfetch.errors import ClaimAdapterError, ZkFetchError
from zkfetch.preview import preview_source
from zkfetch.signer import recover_signer
from zkfetch.sources import SOURCES, source_kinds
from zkfetch.submitter import load_proof

log = logging.getLogger("zkfetch")


def _add_network_flags(p):
    group = p.add_mutually_exclusive_group()
    group.add_argument("--testnet", dest="network", action="store_const", const="testnet")
    group.add_argument("--mainnet", dest="network", action="store_const", const="mainnet")
    p.set_defaults(network="testnet")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zkfetch",
        description="Request attested web data and verify it on chain",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--env-file", default=".env", help="Environment file (default: .env)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sources", help="List registered sources")
    sub.add_parser("info", help="Show configuration and sources")
    sub.add_parser("init", help="Create .env from .env.example and check the setup")

    p = sub.add_parser("preview", help="Fetch a source and apply its patterns locally")
    p.add_argument("kind", help=f"One of: {', '.join(source_kinds())}")

    p = sub.add_parser("request", help="Request a proof and save it")
    p.add_argument("kind", nargs="?", default="price-feed")
    p.add_argument("-o", "--output", default=None, help="Proof file path")

    p = sub.add_parser("inspect", help="Show the verifier payload for a stored proof")
    p.add_argument("proof", nargs="?", default=None)

    p = sub.add_parser("verify", help="Submit a stored proof to the verifier contract")
    p.add_argument("proof", nargs="?", default=None)
    _add_network_flags(p)

    p = sub.add_parser("workflow", help="Request a proof, then verify it")
    p.add_argument("kind", nargs="?", default="price-feed")
    p.add_argument("-o", "--output", default=None, help="Proof file path")
    _add_network_flags(p)

    return parser


def cmd_sources(args, settings):
    for kind, spec in SOURCES.items():
        print(f"{kind:20s} {spec.title}")
        print(f"{'':20s} fields: {', '.join(spec.fields)}")
    return 0


def cmd_info(args, settings):
    print(App(settings).describe())
    return 0


def cmd_init(args, settings):
    create_env_file(".")
    checks = validate_setup(".")
    for name, ok in checks.items():
        print(f"  {'ok' if ok else 'missing':8s} {name}")
    if all(checks.values()):
        print("\nSetup complete. Next: zkfetch request, then zkfetch verify")
        return 0
    print("\nSetup incomplete; see the missing entries above")
    return 1


def cmd_preview(args, settings):
    for name, value in preview_source(args.kind).items():
        print(f"  {name:15s} {value}")
    return 0


def cmd_request(args, settings):
    att = asyncio.run(App(settings).request(args.kind, args.output))
    print(json.dumps(dict(att.extracted_values), indent=2))
    return 0


def cmd_inspect(args, settings):
    path = args.proof or settings.proof_file
    normalizer = ReclaimOnchainNormalizer()
    att = normalizer.normalize(load_proof(path))
    problems = attestation_problems(att, clock_skew_seconds=settings.clock_skew_seconds)
    payload = prepare_verification_payload(att)
    try:
        signer = recover_signer(payload)
    except ClaimAdapterError as e:
        signer = f"unrecoverable ({e})"

    report = {
        "serializedClaim": payload.serialized_claim,
        "message": "0x" + payload.message_digest.hex(),
        "signature": "0x" + payload.signature_body.hex(),
        "recoveryId": payload.recovery_id,
        "recoveredSigner": signer,
        "attester": att.attester.id if att.attester else None,
        "onchain": normalizer.to_onchain(att),
        "extractedParameterValues": dict(att.extracted_values),
        "problems": problems,
    }
    print(json.dumps(report, indent=2))
    return 1 if problems else 0


def cmd_verify(args, settings):
    tx_hash = asyncio.run(App(settings).verify(args.proof))
    print(tx_hash)
    return 0


def cmd_workflow(args, settings):
    result = asyncio.run(App(settings).run_workflow(args.kind, args.output))
    if not result["success"]:
        print(f"error [{result['stage']}]: {result['error']}", file=sys.stderr)
        return 1
    print(result["transactionHash"])
    return 0


COMMANDS = {
    "sources": cmd_sources,
    "info": cmd_info,
    "init": cmd_init,
    "preview": cmd_preview,
    "request": cmd_request,
    "inspect": cmd_inspect,
    "verify": cmd_verify,
    "workflow": cmd_workflow,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    try:
        settings = load_settings(getattr(args, "network", "testnet"), env_file=args.env_file)
        return COMMANDS[args.command](args, settings)
    except ZkFetchError as e:
        print(f"error [{e.stage}]: {e}", file=sys.stderr)
        if e.__cause__ is not None:
            log.debug("caused by", exc_info=e.__cause__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
