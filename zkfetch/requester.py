# zkfetch/requester.py
"""
Proof requester.

Resolves a source kind through the registry, asks the attestation service for
a proof of that source and writes the returned document to disk. The file is
the canonical artifact the submitter reads back later; an existing file at
the same path is overwritten.
"""

import json
import logging
import os
from pathlib import Path

from zkfetch.attestation import Attestation, validate_attestation
from zkfetch.client import AttestationClient
from zkfetch.config import Settings
from zkfetch.errors import (
    AttestationServiceFailure,
    InvalidOutputPath,
    MalformedProofFile,
    PersistenceFailure,
    ZkFetchError,
)
from zkfetch.sources import get_source

log = logging.getLogger("zkfetch.requester")


def validate_output_path(output_path) -> Path:
    if output_path is None or not isinstance(output_path, (str, os.PathLike)) or str(output_path) == "":
        raise InvalidOutputPath("Output path must be a non-empty path")

    path = Path(output_path)
    directory = path.parent
    if not directory.exists():
        raise InvalidOutputPath(f"Directory does not exist: {directory}")
    if not directory.is_dir():
        raise InvalidOutputPath(f"Path is not a directory: {directory}")
    if path.is_dir():
        raise InvalidOutputPath(f"Output path is a directory: {path}")
    return path


def save_attestation(document: dict, output_path) -> Path:
    path = Path(output_path)
    try:
        with open(path, "w") as f:
            json.dump(document, f, indent=2)
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceFailure(f"Failed to save proof to {path}: {e}") from e
    log.info(f"Proof saved to: {path}")
    return path


async def request_proof(output_path=None, source_kind="price-feed",
                        settings: Settings = None, client=None) -> Attestation:
    """Request an attestation for `source_kind` and persist it at `output_path`.

    Path and source are checked before the attestation service is contacted.
    """
    settings = settings or Settings()
    if output_path is None:
        output_path = settings.proof_file

    path = validate_output_path(output_path)
    source = get_source(source_kind)

    if client is None:
        client = AttestationClient.from_settings(settings)

    log.info(f"Requesting {source.kind} proof from: {source.url}")
    try:
        document = await client.zk_fetch(
            source.url, source.public_options(), source.private_options()
        )
    except AttestationServiceFailure as e:
        raise AttestationServiceFailure(f"[{source.kind}] {e}") from e
    except ZkFetchError:
        raise
    except Exception as e:
        raise AttestationServiceFailure(
            f"[{source.kind}] Failed to generate proof: {e}"
        ) from e

    try:
        attestation = validate_attestation(
            Attestation.from_dict(document),
            clock_skew_seconds=settings.clock_skew_seconds,
        )
    except MalformedProofFile as e:
        raise AttestationServiceFailure(
            f"[{source.kind}] Attestation service returned a malformed proof: {e}"
        ) from e

    save_attestation(document, path)

    values = dict(attestation.extracted_values)
    if values:
        for name, value in values.items():
            log.info(f"  {name:12s} {value}")
    else:
        log.warning(f"[{source.kind}] proof carries no extracted values")
    return attestation
