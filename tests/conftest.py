# tests/conftest.py
import json
import time
from types import SimpleNamespace

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from stellar_sdk import Account as StellarAccount
from stellar_sdk.soroban_rpc import SendTransactionStatus

from zkfetch.config import TESTNET, Settings

# Throwaway keys; never fund these.
ATTESTER_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
OTHER_KEY = "0x" + "59" * 32
# SEP-0005 test vector 1
SEP5_MNEMONIC = "illness spike retreat truth genius clock brain pass fit cave bargain toe"
SEP5_ADDRESS_0 = "GDRXE2BQUC3AZNPVFSCEZ76NJ3WWL25FYFK6RGZGIEKWE4SOOHSUJUJ6"

PRICE_URL = "https://api.coingecko.com/api/v3/simple/price?ids=stellar&vs_currencies=usd"


def make_proof(key=ATTESTER_KEY, identifier="0x" + "ab" * 32, owner=None,
               timestamp_s=None, epoch=1, extracted=None, witness_id=None):
    """Build a proof document signed the way an attester signs claims."""
    attester = Account.from_key(key)
    owner = owner or "0x" + "cd" * 20
    timestamp_s = int(time.time()) - 5 if timestamp_s is None else timestamp_s
    serialized = f"{identifier}\n{owner}\n{timestamp_s}\n{epoch}"
    signed = Account.sign_message(encode_defunct(text=serialized), private_key=key)

    parameters = json.dumps({
        "method": "GET",
        "url": PRICE_URL,
        "responseMatches": [{"type": "regex", "value": '\\{"stellar":\\{"usd":(?<price>[\\d\\.]+)\\}\\}'}],
    })
    return {
        "claimData": {
            "provider": "http",
            "parameters": parameters,
            "owner": owner,
            "timestampS": timestamp_s,
            "context": json.dumps({"extractedParameters": {"price": "0.1234"}}),
            "identifier": identifier,
            "epoch": epoch,
        },
        "identifier": identifier,
        "signatures": ["0x" + bytes(signed.signature).hex()],
        "witnesses": [{"id": witness_id or attester.address, "url": "wss://attestor.test/ws"}],
        "extractedParameterValues": extracted if extracted is not None else {"price": "0.1234"},
    }


class FakeSorobanServer:
    """Records every RPC step; prepare returns the envelope unchanged."""

    def __init__(self, sequence=100, status=SendTransactionStatus.PENDING, tx_hash="ab" * 32):
        self.sequence = sequence
        self.status = status
        self.tx_hash = tx_hash
        self.loaded = []
        self.prepared = []
        self.sent = []

    @property
    def calls(self):
        return self.loaded + self.prepared + self.sent

    async def load_account(self, account_id):
        self.loaded.append(account_id)
        return StellarAccount(account_id, self.sequence)

    async def prepare_transaction(self, envelope):
        self.prepared.append(envelope)
        return envelope

    async def send_transaction(self, envelope):
        self.sent.append(envelope)
        error = "AAAAAAAAAGT////7AAAAAA==" if self.status == SendTransactionStatus.ERROR else None
        return SimpleNamespace(status=self.status, hash=self.tx_hash, error_result_xdr=error)


class FakeClient:
    """Stands in for AttestationClient; records calls, returns `document`."""

    def __init__(self, document=None, error=None):
        self.document = document
        self.error = error
        self.calls = []

    async def zk_fetch(self, url, public_options, private_options):
        self.calls.append((url, public_options, private_options))
        if self.error is not None:
            raise self.error
        return self.document


@pytest.fixture
def proof():
    return make_proof()


@pytest.fixture
def proof_file(tmp_path, proof):
    path = tmp_path / "proof.json"
    path.write_text(json.dumps(proof))
    return path


@pytest.fixture
def settings(tmp_path):
    return Settings(
        network=TESTNET,
        mnemonic=SEP5_MNEMONIC,
        app_id="app-id",
        app_secret="app-secret",
        attestor_url="http://attestor.test",
        proof_file=str(tmp_path / "proof.json"),
    )
