# zkfetch/config.py
"""
Configuration.

Everything comes from the environment (optionally seeded from a .env file) and
is frozen into a Settings value that callers pass around explicitly. Network
selection is part of that value: TESTNET and MAINNET are the two Soroban
deployments of the verifier contract.
"""

import os
from dataclasses import dataclass, field, replace

from dotenv import load_dotenv
from stellar_sdk import Network

from zkfetch.errors import ConfigurationError


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    rpc_url: str
    contract_id: str
    network_passphrase: str
    explorer_tx_url: str
    function_name: str = "verify_proof"
    base_fee: int = 100          # stroops
    tx_timeout: int = 300        # seconds


TESTNET = NetworkConfig(
    name="testnet",
    rpc_url="https://soroban-testnet.stellar.org",
    contract_id="CA3EMXR6JOOTNP44T3OAJFMMMGKRRETDJKBLZP2RU3SIY4SDFAH54DU5",
    network_passphrase=Network.TESTNET_NETWORK_PASSPHRASE,
    explorer_tx_url="https://stellar.expert/explorer/testnet/tx/",
)

MAINNET = NetworkConfig(
    name="mainnet",
    rpc_url="https://mainnet.sorobanrpc.com",
    contract_id="CD4M2KHW3ESOV3RUT7KCTC6BX37PIL2Z3BEK47IA74KIMFIFUI3JJDMO",
    network_passphrase=Network.PUBLIC_NETWORK_PASSPHRASE,
    explorer_tx_url="https://stellar.expert/explorer/public/tx/",
)

NETWORKS = {
    "testnet": TESTNET,
    "mainnet": MAINNET,
}

DEFAULT_ATTESTOR_URL = "http://127.0.0.1:8001"
DEFAULT_PROOF_FILE = "./proof.json"
DEFAULT_CLOCK_SKEW_SECONDS = 300
DEFAULT_TIMEOUT = 60

# Settings attribute -> environment variable, for error messages
ENV_NAMES = {
    "mnemonic": "SEEDPHRASE",
    "app_id": "ZKFETCH_APP_ID",
    "app_secret": "ZKFETCH_APP_SECRET",
    "attestor_url": "ZKFETCH_ATTESTOR_URL",
    "contract_id": "ZKFETCH_CONTRACT_ID",
}


@dataclass(frozen=True)
class Settings:
    network: NetworkConfig = TESTNET
    mnemonic: str = field(default="", repr=False)
    app_id: str = ""
    app_secret: str = field(default="", repr=False)
    attestor_url: str = DEFAULT_ATTESTOR_URL
    proof_file: str = DEFAULT_PROOF_FILE
    clock_skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS
    timeout: float = DEFAULT_TIMEOUT
    check_signer: bool = True

    def for_network(self, name: str) -> "Settings":
        return replace(self, network=get_network(name))


def get_network(name: str) -> NetworkConfig:
    try:
        return NETWORKS[name.lower()]
    except (KeyError, AttributeError):
        raise ConfigurationError(
            f"Unknown network {name!r}. Choose from: {', '.join(NETWORKS)}"
        ) from None


def _int(environ, key, default):
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from None


def _bool(environ, key, default):
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def load_settings(network="testnet", environ=None, env_file=".env") -> Settings:
    """Build Settings from the environment.

    When `environ` is None the process environment is used, after loading
    `env_file` if it exists (existing variables win over the file).
    """
    if environ is None:
        if env_file and os.path.exists(env_file):
            load_dotenv(env_file, override=False)
        environ = os.environ

    net = get_network(network)
    overrides = {}
    if environ.get("ZKFETCH_RPC_URL"):
        overrides["rpc_url"] = environ["ZKFETCH_RPC_URL"]
    if environ.get("ZKFETCH_CONTRACT_ID"):
        overrides["contract_id"] = environ["ZKFETCH_CONTRACT_ID"]
    if environ.get("ZKFETCH_BASE_FEE"):
        overrides["base_fee"] = _int(environ, "ZKFETCH_BASE_FEE", net.base_fee)
    if overrides:
        net = replace(net, **overrides)

    skew = _int(environ, "ZKFETCH_CLOCK_SKEW_SECONDS", DEFAULT_CLOCK_SKEW_SECONDS)
    if skew < 0:
        raise ConfigurationError("ZKFETCH_CLOCK_SKEW_SECONDS must not be negative")

    return Settings(
        network=net,
        mnemonic=environ.get("SEEDPHRASE", "").strip(),
        app_id=environ.get("ZKFETCH_APP_ID", ""),
        app_secret=environ.get("ZKFETCH_APP_SECRET", ""),
        attestor_url=environ.get("ZKFETCH_ATTESTOR_URL", DEFAULT_ATTESTOR_URL).rstrip("/"),
        proof_file=environ.get("ZKFETCH_PROOF_FILE", DEFAULT_PROOF_FILE),
        clock_skew_seconds=skew,
        timeout=_int(environ, "ZKFETCH_TIMEOUT", DEFAULT_TIMEOUT),
        check_signer=_bool(environ, "ZKFETCH_CHECK_SIGNER", True),
    )


def validate_environment(settings: Settings, required=("mnemonic",)):
    """Raise ConfigurationError naming every required setting that is empty."""
    missing = []
    for attr in required:
        if attr == "contract_id":
            value = settings.network.contract_id
        else:
            value = getattr(settings, attr)
        if not value:
            missing.append(ENV_NAMES.get(attr, attr))
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Create a .env file (see .env.example or run `zkfetch init`)."
        )
