# zkfetch/app.py
"""
Application facade: one object holding the settings, with the request,
verify and request-then-verify workflows the CLI exposes.
"""

import logging

from zkfetch.config import Settings
from zkfetch.errors import ZkFetchError
from zkfetch.requester import request_proof
from zkfetch.sources import SOURCES
from zkfetch.submitter import load_proof, verify_proof

log = logging.getLogger("zkfetch.app")


class App:
    def __init__(self, settings: Settings = None, client=None, server=None):
        self.settings = settings or Settings()
        self.client = client
        self.server = server

    async def request(self, kind="price-feed", output_path=None):
        return await request_proof(
            output_path or self.settings.proof_file,
            kind,
            settings=self.settings,
            client=self.client,
        )

    async def verify(self, proof_path=None) -> str:
        return await verify_proof(
            proof_path or self.settings.proof_file,
            settings=self.settings,
            server=self.server,
        )

    async def run_workflow(self, kind="price-feed", proof_path=None) -> dict:
        """Request a proof then verify it. Reports failure in the result.

        `proof` is the document as written to disk.
        """
        proof_path = proof_path or self.settings.proof_file
        log.info(f"Starting complete workflow for {kind}...")
        try:
            await self.request(kind, proof_path)
            proof = load_proof(proof_path)
            tx_hash = await self.verify(proof_path)
        except ZkFetchError as e:
            log.error(f"Workflow failed [{e.stage}]: {e}")
            return {"success": False, "stage": e.stage, "error": str(e)}

        log.info("Complete workflow finished successfully!")
        return {
            "success": True,
            "proof": proof,
            "transactionHash": tx_hash,
        }

    def describe(self) -> str:
        net = self.settings.network
        lines = [
            "zkfetch: attested web data, verified on Stellar",
            "",
            f"Network:        {net.name} ({net.network_passphrase})",
            f"Soroban RPC:    {net.rpc_url}",
            f"Contract:       {net.contract_id}",
            f"Base fee:       {net.base_fee} stroops",
            f"Attestor:       {self.settings.attestor_url}",
            f"Proof file:     {self.settings.proof_file}",
            "",
            "Sources:",
        ]
        for kind, spec in SOURCES.items():
            lines.append(f"  {kind:20s} {spec.title}")
            lines.append(f"  {'':20s} {spec.url}")
        return "\n".join(lines)
