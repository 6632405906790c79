# zkfetch/signer.py
"""
Local signer check.

Recovers the secp256k1 public key from (digest, r || s, recid) and compares the
derived address with the attester named in the proof. Running this before
submitting catches a payload the contract would reject, without paying for
the transaction.
"""

import logging

from coincurve import PublicKey
from web3 import Web3

from zkfetch.errors import InvalidSignature

log = logging.getLogger("zkfetch.signer")


def public_key_to_address(public_key: PublicKey) -> str:
    digest = Web3.keccak(public_key.format(compressed=False)[1:])
    return Web3.to_checksum_address("0x" + bytes(digest[-20:]).hex())


def recover_signer(payload) -> str:
    """Checksummed address of the key that produced the payload's signature."""
    signature = payload.signature_body + bytes([payload.recovery_id])
    try:
        public_key = PublicKey.from_signature_and_message(
            signature, payload.message_digest, hasher=None
        )
    except (ValueError, TypeError) as e:
        raise InvalidSignature(f"Could not recover signer from signature: {e}") from e
    return public_key_to_address(public_key)


def check_signer(attestation, payload) -> str:
    """Raise InvalidSignature unless the payload was signed by witnesses[0]."""
    witness = attestation.attester
    if witness is None or not witness.id:
        raise InvalidSignature("Attestation names no witness to check the signature against")

    recovered = recover_signer(payload)
    if recovered.lower() != str(witness.id).lower():
        raise InvalidSignature(
            f"Signature was produced by {recovered}, expected attester {witness.id}"
        )
    log.debug(f"Signer {recovered} matches attester {witness.url}")
    return recovered
