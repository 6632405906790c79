# zkfetch/claim.py
"""
Claim adapter: attestation -> (message digest, signature body, recovery id).

The attester signs four claim fields joined by newlines, using the personal
message convention of Ethereum wallets:

    keccak256("\\x19Ethereum Signed Message:\\n" + len(msg) + msg)
    msg = identifier \\n owner \\n timestampS \\n epoch

and publishes the signature as 0x || r (32) || s (32) || v (1), v = 27 + recid.

The verifier contract takes the digest, r || s and recid separately. Every
step here is bit-exact: a wrong prefix, length or byte offset produces a
payload that can never validate on chain, so nothing is guessed or repaired.
"""

from dataclasses import dataclass
from typing import Mapping

from web3 import Web3

from zkfetch.errors import InvalidInput, InvalidSignature, MalformedClaim

MESSAGE_PREFIX = "\x19Ethereum Signed Message:\n"
RECOVERY_OFFSET = 27
SIGNATURE_BODY_HEX = 128   # r || s
SIGNATURE_MIN_HEX = 130    # body + recovery byte
CLAIM_FIELDS = ("identifier", "owner", "timestampS", "epoch")

_CLAIM_ATTRS = {
    "identifier": "identifier",
    "owner": "owner",
    "timestampS": "timestamp_s",
    "epoch": "epoch",
}
_HEX = frozenset("0123456789abcdefABCDEF")


@dataclass(frozen=True)
class VerificationPayload:
    message_digest: bytes
    signature_body: bytes
    recovery_id: int
    serialized_claim: str

    def as_args(self) -> tuple:
        """Positional arguments of verify_proof(bytes32, bytes, uint32)."""
        return (self.message_digest, self.signature_body, self.recovery_id)


def _claim_value(claim, name):
    if isinstance(claim, Mapping):
        return claim.get(name)
    return getattr(claim, _CLAIM_ATTRS[name], None)


def _canonical_int(name, value) -> str:
    if isinstance(value, bool):
        raise MalformedClaim(f"Claim field {name} must be an integer, got {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        if len(value) > 1 and value.startswith("0"):
            raise MalformedClaim(f"Claim field {name} has leading zeros: {value!r}")
        number = int(value)
    else:
        raise MalformedClaim(f"Claim field {name} must be an integer, got {value!r}")
    if number < 0:
        raise MalformedClaim(f"Claim field {name} must not be negative, got {number}")
    return str(number)


def serialize_claim(claim) -> str:
    """Rebuild the exact string the attester signed.

    `claim` is a Claim or a mapping with the wire names (identifier, owner,
    timestampS, epoch).
    """
    if claim is None:
        raise MalformedClaim("Missing claim")

    values = {}
    for name in CLAIM_FIELDS:
        value = _claim_value(claim, name)
        if value is None:
            raise MalformedClaim(f"Missing required claim field: {name}")
        values[name] = value

    parts = [
        str(values["identifier"]),
        str(values["owner"]),
        _canonical_int("timestampS", values["timestampS"]),
        _canonical_int("epoch", values["epoch"]),
    ]
    return "\n".join(parts)


def hash_message(serialized_claim) -> bytes:
    """EIP-191 personal-message digest of `serialized_claim` (32 bytes)."""
    if not isinstance(serialized_claim, str) or not serialized_claim:
        raise InvalidInput("Serialized claim must be a non-empty string")
    body = serialized_claim.encode("utf-8")
    message = MESSAGE_PREFIX.encode("ascii") + str(len(body)).encode("ascii") + body
    return bytes(Web3.keccak(message))


def extract_recovery_id(signature) -> int:
    """Recovery id (0..3) from the trailing v byte of a hex signature."""
    if not isinstance(signature, str):
        raise InvalidSignature("Signature must be a hex string")
    if len(signature) < 2:
        raise InvalidSignature("Signature too short to contain a recovery byte")
    tail = signature[-2:]
    if not set(tail) <= _HEX:
        raise InvalidSignature(f"Recovery byte is not hex: {tail!r}")
    rec_id = int(tail, 16) - RECOVERY_OFFSET
    if not 0 <= rec_id <= 3:
        raise InvalidSignature(
            f"Recovery byte 0x{tail.lower()} gives recovery id {rec_id}, expected 0..3"
        )
    return rec_id


def strip_recovery_byte(signature) -> str:
    """Return the 128 hex characters of r || s (marker and v byte removed)."""
    if not isinstance(signature, str):
        raise InvalidSignature("Signature must be a hex string")
    if len(signature) < SIGNATURE_MIN_HEX:
        raise InvalidSignature(
            f"Signature too short: {len(signature)} characters, need at least {SIGNATURE_MIN_HEX}"
        )
    body = signature[2:] if signature[:2] in ("0x", "0X") else signature
    body = body[:SIGNATURE_BODY_HEX]
    if not set(body) <= _HEX:
        raise InvalidSignature("Signature body is not hex")
    return body


def prepare_verification_payload(attestation) -> VerificationPayload:
    """Derive the verifier arguments from an attestation. Pure and deterministic."""
    if attestation is None:
        raise MalformedClaim("Missing attestation")
    if not getattr(attestation, "signatures", None):
        raise InvalidSignature("Attestation has no signatures")
    signature = attestation.signature

    recovery_id = extract_recovery_id(signature)
    body = bytes.fromhex(strip_recovery_byte(signature))
    serialized = serialize_claim(attestation.claim)
    digest = hash_message(serialized)

    return VerificationPayload(
        message_digest=digest,
        signature_body=body,
        recovery_id=recovery_id,
        serialized_claim=serialized,
    )
