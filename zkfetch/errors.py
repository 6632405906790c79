# zkfetch/errors.py
"""
Error taxonomy.

Every failure raised by this package derives from ZkFetchError and carries the
name of the workflow stage it belongs to, so the CLI can report where things
went wrong. Wrapping errors keep the collaborator failure as __cause__.
"""


class ZkFetchError(RuntimeError):
    stage = "zkfetch"


class ConfigurationError(ZkFetchError):
    stage = "config"


# === Registry / requester ===

class UnknownSourceKind(ZkFetchError):
    stage = "registry"

    def __init__(self, kind, valid):
        self.kind = kind
        self.valid = tuple(valid)
        super().__init__(
            f"Unknown source kind: {kind!r}. Choose from: {', '.join(self.valid)}"
        )


class InvalidOutputPath(ZkFetchError):
    stage = "request"


class AttestationServiceFailure(ZkFetchError):
    stage = "request"


class PersistenceFailure(ZkFetchError):
    stage = "request"


class PreviewFailure(ZkFetchError):
    stage = "preview"


# === Claim adapter ===

class ClaimAdapterError(ZkFetchError, ValueError):
    stage = "adapter"


class MalformedClaim(ClaimAdapterError):
    pass


class InvalidInput(ClaimAdapterError):
    pass


class InvalidSignature(ClaimAdapterError):
    pass


# === Submitter ===

class ProofNotFound(ZkFetchError):
    stage = "verify"


class MalformedProofFile(ZkFetchError):
    stage = "verify"


class WalletDerivationFailure(ZkFetchError):
    stage = "wallet"


class AdapterFailure(ZkFetchError):
    stage = "adapter"


class SubmissionFailure(ZkFetchError):
    stage = "submit"
