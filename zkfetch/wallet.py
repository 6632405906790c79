# zkfetch/wallet.py
"""
Submitter wallet.

The signing keypair is derived from the configured BIP-39 seed phrase with
SEP-0005 (m/44'/148'/index'), account index 0. Nothing is stored on disk; the
same phrase always yields the same account.
"""

from stellar_sdk import Keypair

from zkfetch.errors import WalletDerivationFailure

ACCOUNT_INDEX = 0
DERIVATION_PATH = "m/44'/148'/{index}'"


def derive_keypair(mnemonic: str, index: int = ACCOUNT_INDEX) -> Keypair:
    """Return the Stellar Keypair for `mnemonic` at `index`."""
    if not mnemonic or not mnemonic.strip():
        raise WalletDerivationFailure("No seed phrase configured (set SEEDPHRASE)")
    try:
        return Keypair.from_mnemonic_phrase(" ".join(mnemonic.split()), index=index)
    except Exception as e:
        raise WalletDerivationFailure(f"Failed to create Stellar wallet: {e}") from e
