# zkfetch/client.py
"""
Attestation service client.

The service fetches a URL on our behalf through its attester network and
returns a signed attestation of the values the patterns extracted:

    POST {attestor_url}/zkfetch
    {"applicationId", "applicationSecret", "url", "publicOptions", "privateOptions"}
      -> attestation JSON (see zkfetch.attestation)

How the service builds its proof is its own business; this module only moves
JSON back and forth and turns every failure into AttestationServiceFailure.
"""

import logging

import httpx

from zkfetch.config import Settings, validate_environment
from zkfetch.errors import AttestationServiceFailure

log = logging.getLogger("zkfetch.client")

ZKFETCH_PATH = "/zkfetch"


class AttestationClient:
    def __init__(self, app_id: str, app_secret: str, base_url: str,
                 timeout: float = 60, transport=None):
        self.app_id = app_id
        self._app_secret = app_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> "AttestationClient":
        validate_environment(settings, required=("app_id", "app_secret"))
        return cls(
            settings.app_id,
            settings.app_secret,
            settings.attestor_url,
            timeout=settings.timeout,
            transport=transport,
        )

    def __repr__(self):
        return f"AttestationClient(app_id={self.app_id!r}, base_url={self.base_url!r})"

    async def zk_fetch(self, url: str, public_options: dict, private_options: dict) -> dict:
        body = {
            "applicationId": self.app_id,
            "applicationSecret": self._app_secret,
            "url": url,
            "publicOptions": public_options,
            "privateOptions": private_options,
        }
        log.debug(f"POST {self.base_url}{ZKFETCH_PATH} for {url}")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(ZKFETCH_PATH, json=body)
        except httpx.HTTPError as e:
            raise AttestationServiceFailure(f"Attestation service request failed: {e}") from e

        if resp.status_code != 200:
            raise AttestationServiceFailure(
                f"Attestation service returned {resp.status_code}: {resp.text[:300]}"
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise AttestationServiceFailure(f"Attestation service returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise AttestationServiceFailure("Attestation service returned a non-object body")
        if "error" in data and "signatures" not in data:
            raise AttestationServiceFailure(f"Attestation service error: {data['error']}")
        return data
