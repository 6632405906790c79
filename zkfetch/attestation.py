# zkfetch/attestation.py
"""
Attestation model.

An attestation is the document the attestation service returns for one fetch:

    {
      "claimData": {"provider", "parameters", "owner", "timestampS",
                    "context", "identifier", "epoch"},
      "identifier": "0x...",
      "signatures": ["0x<r><s><v>"],
      "witnesses": [{"id": "0x...", "url": "wss://..."}],
      "extractedParameterValues": {"price": "0.1234"}
    }

It is loaded into frozen dataclasses and never mutated afterwards. The
on-chain shape produced by the SDK's transform step (`claimInfo` +
`signedClaim`) is accepted too.
"""

import json
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

from zkfetch.config import DEFAULT_CLOCK_SKEW_SECONDS
from zkfetch.errors import MalformedProofFile

PROVIDERS = ("http", "https")
REQUIRED_PARAMETER_KEYS = ("method", "url", "responseMatches")


@dataclass(frozen=True)
class Claim:
    identifier: Optional[str]
    owner: Optional[str]
    timestamp_s: Optional[int]
    epoch: Optional[int]
    provider: Optional[str] = None
    parameters: Optional[str] = None
    context: Optional[str] = None

    def parsed_parameters(self) -> dict:
        """Parse the serialized `parameters` object; raises ValueError."""
        params = json.loads(self.parameters or "")
        if not isinstance(params, dict):
            raise ValueError("parameters is not a JSON object")
        return params


@dataclass(frozen=True)
class Witness:
    id: str
    url: str


@dataclass(frozen=True)
class Attestation:
    claim: Claim
    signatures: tuple
    witnesses: tuple = ()
    extracted_values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def signature(self) -> str:
        return self.signatures[0]

    @property
    def attester(self) -> Optional[Witness]:
        return self.witnesses[0] if self.witnesses else None

    @classmethod
    def from_dict(cls, data) -> "Attestation":
        if not isinstance(data, Mapping):
            raise MalformedProofFile("Invalid proof: expected a JSON object")

        if "signedClaim" in data:
            signed = data.get("signedClaim") or {}
            raw_claim = dict(signed.get("claim") or {})
            raw_claim.update(data.get("claimInfo") or {})
            signatures = signed.get("signatures")
        else:
            raw_claim = dict(data.get("claimData") or {})
            if raw_claim.get("identifier") is None and data.get("identifier") is not None:
                raw_claim["identifier"] = data["identifier"]
            signatures = data.get("signatures")

        if not raw_claim:
            raise MalformedProofFile("Invalid proof: missing claim data")
        if not isinstance(signatures, (list, tuple)) or not signatures:
            raise MalformedProofFile("Invalid proof: missing signatures")
        if not all(isinstance(s, str) for s in signatures):
            raise MalformedProofFile("Invalid proof: signatures must be hex strings")

        witnesses = []
        for w in data.get("witnesses") or ():
            if not isinstance(w, Mapping):
                raise MalformedProofFile("Invalid proof: witness entries must be objects")
            witnesses.append(Witness(id=w.get("id"), url=w.get("url")))

        extracted = data.get("extractedParameterValues") or {}
        if not isinstance(extracted, Mapping):
            raise MalformedProofFile("Invalid proof: extractedParameterValues must be an object")

        claim = Claim(
            identifier=raw_claim.get("identifier"),
            owner=raw_claim.get("owner"),
            timestamp_s=raw_claim.get("timestampS"),
            epoch=raw_claim.get("epoch"),
            provider=raw_claim.get("provider"),
            parameters=raw_claim.get("parameters"),
            context=raw_claim.get("context"),
        )
        return cls(
            claim=claim,
            signatures=tuple(signatures),
            witnesses=tuple(witnesses),
            extracted_values=MappingProxyType(
                {str(k): v for k, v in extracted.items() if v is not None}
            ),
        )

    def to_dict(self) -> dict:
        c = self.claim
        return {
            "claimData": {
                "provider": c.provider,
                "parameters": c.parameters,
                "owner": c.owner,
                "timestampS": c.timestamp_s,
                "context": c.context,
                "identifier": c.identifier,
                "epoch": c.epoch,
            },
            "identifier": c.identifier,
            "signatures": list(self.signatures),
            "witnesses": [{"id": w.id, "url": w.url} for w in self.witnesses],
            "extractedParameterValues": dict(self.extracted_values),
        }


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def attestation_problems(att: Attestation, now=None,
                         clock_skew_seconds=DEFAULT_CLOCK_SKEW_SECONDS) -> list:
    """Return a list of human-readable invariant violations (empty when valid)."""
    problems = []
    claim = att.claim
    now = int(time.time()) if now is None else int(now)

    if not att.signatures:
        problems.append("signatures is empty")
    if not att.witnesses:
        problems.append("witnesses is empty")
    for i, w in enumerate(att.witnesses):
        if not isinstance(w.id, str) or not w.id.startswith("0x"):
            problems.append(f"witness {i} id is not a 0x hex address")
        if not isinstance(w.url, str) or not w.url:
            problems.append(f"witness {i} has no url")

    ts = claim.timestamp_s
    if not _is_int(ts) or ts <= 0:
        problems.append(f"timestampS must be a positive integer, got {ts!r}")
    elif ts > now + clock_skew_seconds:
        problems.append(
            f"timestampS {ts} is more than {clock_skew_seconds}s in the future"
        )

    if not _is_int(claim.epoch) or claim.epoch <= 0:
        problems.append(f"epoch must be a positive integer, got {claim.epoch!r}")

    if claim.provider not in PROVIDERS:
        problems.append(f"provider must be one of {PROVIDERS}, got {claim.provider!r}")

    try:
        params = claim.parsed_parameters()
    except (TypeError, ValueError):
        problems.append("parameters is not a serialized JSON object")
    else:
        missing = [k for k in REQUIRED_PARAMETER_KEYS if k not in params]
        if missing:
            problems.append(f"parameters missing keys: {', '.join(missing)}")

    return problems


def validate_attestation(att: Attestation, now=None,
                         clock_skew_seconds=DEFAULT_CLOCK_SKEW_SECONDS) -> Attestation:
    problems = attestation_problems(att, now=now, clock_skew_seconds=clock_skew_seconds)
    if problems:
        raise MalformedProofFile("Invalid attestation: " + "; ".join(problems))
    return att


# === On-chain normalization ===

class OnchainNormalizer(Protocol):
    def normalize(self, raw: Mapping) -> Attestation:
        ...


class ReclaimOnchainNormalizer:
    """Transform a stored proof document into the shape used on chain.

    Field names are mapped to the on-chain layout and every signature gets a
    lowercase 0x prefix. Claim values pass through untouched: they are part of
    the signed message.
    """

    def normalize(self, raw: Mapping) -> Attestation:
        att = Attestation.from_dict(raw)
        signatures = tuple(_normalize_hex(s) for s in att.signatures)
        if signatures == att.signatures:
            return att
        return Attestation(
            claim=att.claim,
            signatures=signatures,
            witnesses=att.witnesses,
            extracted_values=att.extracted_values,
        )

    def to_onchain(self, att: Attestation) -> dict:
        c = att.claim
        return {
            "claimInfo": {
                "context": c.context,
                "parameters": c.parameters,
                "provider": c.provider,
            },
            "signedClaim": {
                "claim": {
                    "epoch": c.epoch,
                    "identifier": c.identifier,
                    "owner": c.owner,
                    "timestampS": c.timestamp_s,
                },
                "signatures": list(att.signatures),
            },
        }


def _normalize_hex(value: str) -> str:
    body = value[2:] if value[:2] in ("0x", "0X") else value
    return "0x" + body.lower()
