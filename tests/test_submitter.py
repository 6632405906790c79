# tests/test_submitter.py
import json
import time
from dataclasses import replace

import pytest
from stellar_sdk import InvokeHostFunction, Keypair, scval
from stellar_sdk.soroban_rpc import SendTransactionStatus

from zkfetch.attestation import Attestation
from zkfetch.claim import prepare_verification_payload
from zkfetch.config import MAINNET, TESTNET
from zkfetch.errors import (
    AdapterFailure,
    MalformedProofFile,
    ProofNotFound,
    SubmissionFailure,
    WalletDerivationFailure,
)
from zkfetch.submitter import build_verify_args, load_proof, prepare_payload, verify_proof

from conftest import OTHER_KEY, SEP5_ADDRESS_0, FakeSorobanServer, make_proof


def write_proof(tmp_path, document, name="proof.json"):
    path = tmp_path / name
    path.write_text(json.dumps(document))
    return path


# === load_proof ===

def test_load_proof_missing(tmp_path):
    with pytest.raises(ProofNotFound, match="Proof file not found"):
        load_proof(tmp_path / "nope.json")


def test_load_proof_invalid_json(tmp_path):
    path = tmp_path / "proof.json"
    path.write_text("{not json")
    with pytest.raises(MalformedProofFile):
        load_proof(path)


@pytest.mark.parametrize("signatures", [[], None])
def test_load_proof_without_signatures(tmp_path, signatures):
    document = make_proof()
    document["signatures"] = signatures
    with pytest.raises(MalformedProofFile, match="missing signatures"):
        load_proof(write_proof(tmp_path, document))


def test_load_proof_onchain_shape(tmp_path):
    document = {"claimInfo": {}, "signedClaim": {"claim": {}, "signatures": ["0x00"]}}
    assert load_proof(write_proof(tmp_path, document)) == document


# === contract arguments ===

def test_verify_args_are_fixed_width():
    payload = prepare_verification_payload(Attestation.from_dict(make_proof()))
    digest, signature, rec_id = build_verify_args(payload)
    assert scval.from_bytes(digest) == payload.message_digest
    assert len(scval.from_bytes(signature)) == 64
    assert scval.from_bytes(signature) == payload.signature_body
    assert scval.from_uint32(rec_id) == payload.recovery_id


@pytest.mark.parametrize("field,value", [
    ("signature_body", b"\x00" * 63),
    ("message_digest", b"\x00" * 31),
])
def test_verify_args_reject_wrong_width(field, value):
    payload = prepare_verification_payload(Attestation.from_dict(make_proof()))
    with pytest.raises(AdapterFailure, match="Expected"):
        build_verify_args(replace(payload, **{field: value}))


def test_prepare_payload_wraps_adapter_errors():
    document = make_proof()
    document["signatures"] = ["0x" + "11" * 64 + "00"]
    with pytest.raises(AdapterFailure, match="Failed to prepare proof data"):
        prepare_payload(Attestation.from_dict(document))


def test_prepare_payload_checks_signer():
    att = Attestation.from_dict(make_proof(key=OTHER_KEY, witness_id="0x" + "99" * 20))
    with pytest.raises(AdapterFailure, match="expected attester"):
        prepare_payload(att)
    assert prepare_payload(att, check=False).recovery_id in (0, 1)


# === network constants ===

def test_named_networks_have_contracts():
    assert TESTNET.contract_id == "CA3EMXR6JOOTNP44T3OAJFMMMGKRRETDJKBLZP2RU3SIY4SDFAH54DU5"
    assert MAINNET.contract_id == "CD4M2KHW3ESOV3RUT7KCTC6BX37PIL2Z3BEK47IA74KIMFIFUI3JJDMO"
    assert TESTNET.network_passphrase == "Test SDF Network ; September 2015"
    assert MAINNET.network_passphrase == "Public Global Stellar Network ; September 2015"
    assert TESTNET.base_fee == MAINNET.base_fee == 100


# === verify_proof ===

@pytest.mark.asyncio
async def test_verify_submits_signed_transaction(proof_file, proof, settings):
    server = FakeSorobanServer(sequence=100)
    tx_hash = await verify_proof(proof_file, settings=settings, server=server)

    assert tx_hash == "ab" * 32
    assert server.loaded == [SEP5_ADDRESS_0]
    assert len(server.sent) == 1

    envelope = server.sent[0]
    tx = envelope.transaction
    assert tx.source.account_id == SEP5_ADDRESS_0
    assert tx.sequence == 101
    assert tx.fee == 100
    Keypair.from_public_key(SEP5_ADDRESS_0).verify(envelope.hash(), envelope.signatures[0].signature)

    op = tx.operations[0]
    assert isinstance(op, InvokeHostFunction)
    args = op.host_function.invoke_contract.args
    payload = prepare_verification_payload(Attestation.from_dict(proof))
    assert scval.from_bytes(args[0]) == payload.message_digest
    assert len(scval.from_bytes(args[1])) == 64
    assert scval.from_uint32(args[2]) == payload.recovery_id


@pytest.mark.asyncio
async def test_verify_empty_signatures_fails_before_wallet(tmp_path, settings):
    document = make_proof()
    document["signatures"] = []
    server = FakeSorobanServer()
    with pytest.raises(MalformedProofFile):
        await verify_proof(write_proof(tmp_path, document), settings=replace(settings, mnemonic=""), server=server)
    assert server.calls == []


@pytest.mark.asyncio
async def test_verify_refuses_attestation_breaking_invariants(tmp_path, settings):
    document = make_proof(timestamp_s=int(time.time()) + 1_000_000)
    document["claimData"]["provider"] = "ftp"
    server = FakeSorobanServer()
    with pytest.raises(MalformedProofFile, match="Invalid attestation.*future.*provider"):
        await verify_proof(write_proof(tmp_path, document), settings=replace(settings, mnemonic=""), server=server)
    assert server.calls == []


@pytest.mark.asyncio
async def test_verify_honours_clock_skew_setting(tmp_path, settings):
    path = write_proof(tmp_path, make_proof(timestamp_s=int(time.time()) + 1_000))
    server = FakeSorobanServer()
    with pytest.raises(MalformedProofFile):
        await verify_proof(path, settings=settings, server=server)
    assert await verify_proof(path, settings=replace(settings, clock_skew_seconds=3_600), server=server)


@pytest.mark.asyncio
async def test_verify_missing_file(tmp_path, settings):
    with pytest.raises(ProofNotFound):
        await verify_proof(tmp_path / "missing.json", settings=settings, server=FakeSorobanServer())


@pytest.mark.asyncio
async def test_verify_without_mnemonic(proof_file, settings):
    server = FakeSorobanServer()
    with pytest.raises(WalletDerivationFailure, match="SEEDPHRASE"):
        await verify_proof(proof_file, settings=replace(settings, mnemonic=""), server=server)
    assert server.calls == []


@pytest.mark.asyncio
async def test_verify_wrong_signer(tmp_path, settings):
    path = write_proof(tmp_path, make_proof(witness_id="0x" + "99" * 20))
    server = FakeSorobanServer()
    with pytest.raises(AdapterFailure):
        await verify_proof(path, settings=settings, server=server)
    assert server.calls == []


@pytest.mark.asyncio
async def test_verify_account_not_found(proof_file, settings):
    class MissingAccount(FakeSorobanServer):
        async def load_account(self, account_id):
            raise LookupError(f"Account not found, account_id: {account_id}")

    server = MissingAccount()
    with pytest.raises(SubmissionFailure, match="Failed to load account"):
        await verify_proof(proof_file, settings=settings, server=server)
    assert server.sent == []


@pytest.mark.asyncio
async def test_verify_simulation_failure(proof_file, settings):
    class Reverting(FakeSorobanServer):
        async def prepare_transaction(self, envelope):
            raise ValueError("HostError: Error(Contract, #1)")

    server = Reverting()
    with pytest.raises(SubmissionFailure, match="simulation failed.*Contract"):
        await verify_proof(proof_file, settings=settings, server=server)
    assert server.sent == []


@pytest.mark.asyncio
async def test_verify_rejected_by_rpc(proof_file, settings):
    server = FakeSorobanServer(status=SendTransactionStatus.ERROR)
    with pytest.raises(SubmissionFailure, match="rejected by RPC"):
        await verify_proof(proof_file, settings=settings, server=server)


@pytest.mark.asyncio
async def test_verify_send_failure(proof_file, settings):
    class Offline(FakeSorobanServer):
        async def send_transaction(self, envelope):
            raise ConnectionError("rpc down")

    with pytest.raises(SubmissionFailure, match="Failed to submit transaction: rpc down"):
        await verify_proof(proof_file, settings=settings, server=Offline())


@pytest.mark.asyncio
async def test_verify_uses_given_normalizer(proof_file, proof, settings):
    class RecordingNormalizer:
        def __init__(self):
            self.seen = []

        def normalize(self, raw):
            self.seen.append(raw)
            return Attestation.from_dict(raw)

    normalizer = RecordingNormalizer()
    await verify_proof(proof_file, settings=settings, server=FakeSorobanServer(), normalizer=normalizer)
    assert normalizer.seen == [proof]
