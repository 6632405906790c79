# zkfetch/submitter.py
"""
Transaction submitter.

Reads a stored proof, turns it into the verifier payload and sends one
Soroban transaction calling

    verify_proof(message: BytesN<32>, signature: BytesN<64>, recovery_id: u32)

on the network's verifier contract. Steps, in order:

  1. load the proof file            ProofNotFound / MalformedProofFile
  2. normalize for on-chain use     MalformedProofFile
  3. attestation invariants         MalformedProofFile
  4. claim adapter (+ signer check) AdapterFailure
  5. derive the wallet              WalletDerivationFailure
  6. load account, build with the fixed base fee, prepare, sign, send
                                    SubmissionFailure

Nothing is retried; the first failure ends the run with its cause attached.
"""

import json
import logging
from pathlib import Path

from stellar_sdk import SorobanServerAsync, TransactionBuilder, scval
from stellar_sdk.soroban_rpc import SendTransactionStatus

from zkfetch.attestation import OnchainNormalizer, ReclaimOnchainNormalizer, validate_attestation
from zkfetch.claim import prepare_verification_payload
from zkfetch.config import NetworkConfig, Settings
from zkfetch.errors import (
    AdapterFailure,
    ClaimAdapterError,
    MalformedProofFile,
    ProofNotFound,
    SubmissionFailure,
    ZkFetchError,
)
from zkfetch.signer import check_signer
from zkfetch.wallet import derive_keypair

log = logging.getLogger("zkfetch.submitter")

DIGEST_BYTES = 32
SIGNATURE_BYTES = 64


def load_proof(proof_path) -> dict:
    """Read the stored proof document; checks only what every later step needs."""
    path = Path(proof_path)
    if not path.is_file():
        raise ProofNotFound(f"Proof file not found: {path}")
    try:
        data = json.loads(path.read_text())
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise MalformedProofFile(f"Failed to load proof {path}: {e}") from e

    if not isinstance(data, dict):
        raise MalformedProofFile(f"Invalid proof {path}: expected a JSON object")
    signatures = data.get("signatures")
    if signatures is None and isinstance(data.get("signedClaim"), dict):
        signatures = data["signedClaim"].get("signatures")
    if not isinstance(signatures, list) or not signatures:
        raise MalformedProofFile("Invalid proof: missing signatures")
    return data


def _bytes_n(value: bytes, length: int):
    if not isinstance(value, (bytes, bytearray)):
        raise AdapterFailure("Expected bytes")
    if len(value) != length:
        raise AdapterFailure(f"Expected {length} bytes, got {len(value)}")
    return scval.to_bytes(bytes(value))


def build_verify_args(payload) -> list:
    """Contract arguments (BytesN<32>, BytesN<64>, u32) for verify_proof."""
    return [
        _bytes_n(payload.message_digest, DIGEST_BYTES),
        _bytes_n(payload.signature_body[:SIGNATURE_BYTES], SIGNATURE_BYTES),
        scval.to_uint32(payload.recovery_id),
    ]


def prepare_payload(attestation, check=True):
    try:
        payload = prepare_verification_payload(attestation)
        if check:
            check_signer(attestation, payload)
    except ClaimAdapterError as e:
        raise AdapterFailure(f"Failed to prepare proof data: {e}") from e
    return payload


def connect(network: NetworkConfig) -> SorobanServerAsync:
    return SorobanServerAsync(network.rpc_url)


async def submit_verification(server, keypair, payload, network: NetworkConfig) -> str:
    """Load the account, build, prepare, sign and send the verify_proof call."""
    args = build_verify_args(payload)
    public_key = keypair.public_key
    log.info(f"Connecting to Stellar {network.name.upper()}: {network.rpc_url}")

    try:
        account = await server.load_account(public_key)
    except Exception as e:
        raise SubmissionFailure(f"Failed to load account {public_key}: {e}") from e

    try:
        tx = (
            TransactionBuilder(
                source_account=account,
                network_passphrase=network.network_passphrase,
                base_fee=network.base_fee,
            )
            .append_invoke_contract_function_op(
                contract_id=network.contract_id,
                function_name=network.function_name,
                parameters=args,
            )
            .set_timeout(network.tx_timeout)
            .build()
        )
    except Exception as e:
        raise SubmissionFailure(f"Failed to build transaction: {e}") from e

    try:
        prepared = await server.prepare_transaction(tx)
    except Exception as e:
        raise SubmissionFailure(f"Transaction simulation failed: {e}") from e

    log.info("Signing transaction...")
    prepared.sign(keypair)

    log.info("Submitting transaction to blockchain...")
    try:
        result = await server.send_transaction(prepared)
    except Exception as e:
        raise SubmissionFailure(f"Failed to submit transaction: {e}") from e

    if result.status == SendTransactionStatus.ERROR:
        raise SubmissionFailure(
            f"Failed to submit transaction: rejected by RPC ({result.error_result_xdr})"
        )

    log.info("Transaction submitted successfully!")
    log.info(f"Transaction link: {network.explorer_tx_url}{result.hash}")
    return result.hash


async def verify_proof(proof_path=None, settings: Settings = None, server=None,
                       normalizer: OnchainNormalizer = None) -> str:
    """Submit the proof stored at `proof_path` to the verifier; return the tx hash."""
    settings = settings or Settings()
    normalizer = normalizer or ReclaimOnchainNormalizer()
    if proof_path is None:
        proof_path = settings.proof_file
    network = settings.network

    log.info(f"Starting proof verification on {network.name.upper()}...")
    raw = load_proof(proof_path)
    try:
        attestation = normalizer.normalize(raw)
    except ZkFetchError:
        raise
    except Exception as e:
        raise MalformedProofFile(f"Failed to transform proof for on-chain use: {e}") from e
    validate_attestation(attestation, clock_skew_seconds=settings.clock_skew_seconds)
    log.info("Proof loaded and validated")

    payload = prepare_payload(attestation, check=settings.check_signer)
    log.debug(f"Digest 0x{payload.message_digest.hex()} recovery id {payload.recovery_id}")

    keypair = derive_keypair(settings.mnemonic)
    log.info(f"Wallet address: {keypair.public_key}")

    srv = server if server is not None else connect(network)
    try:
        tx_hash = await submit_verification(srv, keypair, payload, network)
    finally:
        if server is None:
            await srv.close()

    log.info("Proof verification completed successfully!")
    return tx_hash
