"""Custom exceptions for the FOCX marketplace SDK.

Every failure raised by this package derives from :class:`FocxError` and
carries a :class:`FailureKind` and an :class:`ErrorCategory`, so callers can
branch on typed values instead of message text.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Coarse grouping that decides how a caller should recover."""

    DERIVATION = "derivation"  # fatal for the operation, never retried
    PREFLIGHT = "preflight"  # fix the arguments locally
    SIGNING = "signing"  # re-prompt the user
    NETWORK = "network"  # rebuild with a fresh recency token
    ON_CHAIN = "on_chain"  # authoritative rejection


class FailureKind(str, Enum):
    """Specific failure variant."""

    DERIVATION_EXHAUSTED = "derivation_exhausted"
    INVALID_SEED = "invalid_seed"
    INVALID_ARGUMENT = "invalid_argument"
    TOO_MANY_INSTRUCTIONS = "too_many_instructions"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INVALID_ACCOUNT_DATA = "invalid_account_data"
    INVALID_DISCRIMINATOR = "invalid_discriminator"
    CONFIG = "config"
    RECENCY_FETCH_TIMEOUT = "recency_fetch_timeout"
    SIGNING_REJECTED = "signing_rejected"
    SIGNER_UNAVAILABLE = "signer_unavailable"
    SIGNER_ERROR = "signer_error"
    UNCONFIRMED = "unconfirmed"
    REJECTED = "rejected"
    RECENCY_TOKEN_EXPIRED = "recency_token_expired"
    NETWORK = "network"
    ALREADY_SUBMITTED = "already_submitted"


class FocxError(Exception):
    """Base exception for all FOCX SDK errors."""

    kind: FailureKind = FailureKind.INVALID_ARGUMENT
    category: ErrorCategory = ErrorCategory.PREFLIGHT


# ============================================================================
# Derivation
# ============================================================================


class DerivationFailure(FocxError):
    """Base for address derivation failures."""

    category = ErrorCategory.DERIVATION


class DerivationExhaustedError(DerivationFailure):
    """Raised when every bump seed yields an on-curve point."""

    kind = FailureKind.DERIVATION_EXHAUSTED

    def __init__(self, program_id: str):
        self.program_id = program_id
        super().__init__(
            f"Unable to find a viable program address bump seed for program {program_id}"
        )


class InvalidSeedError(DerivationFailure, ValueError):
    """Raised when a seed list violates the runtime's seed limits."""

    kind = FailureKind.INVALID_SEED

    def __init__(self, message: str):
        super().__init__(f"Invalid seeds: {message}")


# ============================================================================
# Pre-flight and read validation
# ============================================================================


class InvalidArgumentError(FocxError, ValueError):
    """Raised when intent or instruction arguments are malformed."""

    kind = FailureKind.INVALID_ARGUMENT

    def __init__(self, message: str):
        super().__init__(message)


class TooManyInstructionsError(FocxError):
    """Raised when a bundle cannot fit in a single transaction."""

    kind = FailureKind.TOO_MANY_INSTRUCTIONS

    def __init__(self, message: str, size: Optional[int] = None, limit: Optional[int] = None):
        self.size = size
        self.limit = limit
        super().__init__(message)


class AccountNotFoundError(FocxError):
    """Raised when an account is not found on-chain."""

    kind = FailureKind.ACCOUNT_NOT_FOUND

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Account not found: {address}")


class InvalidAccountDataError(FocxError):
    """Raised when account data cannot be deserialized."""

    kind = FailureKind.INVALID_ACCOUNT_DATA

    def __init__(self, message: str):
        super().__init__(f"Invalid account data: {message}")


class InvalidDiscriminatorError(InvalidAccountDataError):
    """Raised when account or instruction data has an unexpected discriminator."""

    kind = FailureKind.INVALID_DISCRIMINATOR

    def __init__(self, expected: bytes, actual: bytes):
        self.expected = expected
        self.actual = actual
        FocxError.__init__(
            self, f"Invalid discriminator: expected {expected.hex()}, got {actual.hex()}"
        )


class ConfigError(FocxError, ValueError):
    """Raised when configuration values are invalid."""

    kind = FailureKind.CONFIG

    def __init__(self, message: str):
        super().__init__(f"Invalid configuration: {message}")


# ============================================================================
# Network
# ============================================================================


class RecencyFetchTimeoutError(FocxError):
    """Raised when the recent blockhash cannot be fetched in time."""

    kind = FailureKind.RECENCY_FETCH_TIMEOUT
    category = ErrorCategory.NETWORK

    def __init__(self, timeout_secs: float):
        self.timeout_secs = timeout_secs
        super().__init__(f"Timed out after {timeout_secs}s fetching recent blockhash")


class LedgerReadError(FocxError):
    """Raised when an RPC read fails for reasons other than a missing account."""

    kind = FailureKind.NETWORK
    category = ErrorCategory.NETWORK

    def __init__(self, message: str):
        super().__init__(f"Ledger read failed: {message}")


# ============================================================================
# Signing
# ============================================================================


class SigningFailure(FocxError):
    """Base for failures reported by the external signer."""

    category = ErrorCategory.SIGNING


class SigningRejectedError(SigningFailure):
    """Raised when the user declines to sign."""

    kind = FailureKind.SIGNING_REJECTED

    def __init__(self, message: str = "Signing request rejected by user"):
        super().__init__(message)


class SignerUnavailableError(SigningFailure):
    """Raised when no signer could be reached."""

    kind = FailureKind.SIGNER_UNAVAILABLE

    def __init__(self, message: str = "Signer unavailable"):
        super().__init__(message)


class SignerError(SigningFailure):
    """Raised when the signer fails or returns an unusable transaction."""

    kind = FailureKind.SIGNER_ERROR

    def __init__(self, message: str):
        super().__init__(f"Signer error: {message}")


# ============================================================================
# Submission
# ============================================================================


class SubmissionFailure(FocxError):
    """Base for failures after the signed bytes leave the signer."""

    category = ErrorCategory.NETWORK

    def __init__(self, message: str, signature: Optional[str] = None):
        self.signature = signature
        super().__init__(message)


class SubmissionUnconfirmedError(SubmissionFailure):
    """Raised when confirmation did not arrive before the timeout.

    The transaction may still land; this is not a rejection.
    """

    kind = FailureKind.UNCONFIRMED

    def __init__(self, signature: str, timeout_secs: float):
        self.timeout_secs = timeout_secs
        super().__init__(
            f"Transaction {signature} not confirmed within {timeout_secs}s", signature
        )


class SubmissionRejectedError(SubmissionFailure):
    """Raised when the network or program rejects the transaction."""

    kind = FailureKind.REJECTED
    category = ErrorCategory.ON_CHAIN

    def __init__(self, reason: str, signature: Optional[str] = None):
        self.reason = reason
        super().__init__(f"Transaction rejected: {reason}", signature)


class RecencyTokenExpiredError(SubmissionFailure):
    """Raised when the transaction's blockhash is no longer valid."""

    kind = FailureKind.RECENCY_TOKEN_EXPIRED

    def __init__(self, blockhash: str, signature: Optional[str] = None):
        self.blockhash = blockhash
        super().__init__(f"Recent blockhash expired: {blockhash}", signature)


class SubmissionNetworkError(SubmissionFailure):
    """Raised when the RPC node cannot be reached during submission."""

    kind = FailureKind.NETWORK

    def __init__(self, message: str):
        super().__init__(f"Network error during submission: {message}")


class AlreadySubmittedError(SubmissionFailure):
    """Raised when the same signed transaction is submitted twice."""

    kind = FailureKind.ALREADY_SUBMITTED
    category = ErrorCategory.PREFLIGHT

    def __init__(self, signature: str):
        super().__init__(f"Signed transaction {signature} was already submitted", signature)
