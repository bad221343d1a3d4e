"""Interfaces to the collaborators this SDK talks to but does not own."""

from typing import Optional, Protocol

from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from .types import RecencyToken, SignatureStatus


class LedgerReader(Protocol):
    async def get_account(self, address: Pubkey) -> Optional[bytes]:
        """Return raw account data, or None if the account does not exist."""
        ...


class RecencyTokenSource(Protocol):
    async def get_recent_token(self, timeout_secs: float) -> RecencyToken:
        """Fetch a fresh blockhash; raises RecencyFetchTimeoutError."""
        ...


class TransactionSubmitter(Protocol):
    async def send_raw_transaction(self, wire: bytes) -> Signature:
        ...

    async def get_signature_status(self, signature: Signature) -> Optional[SignatureStatus]:
        ...

    async def is_recency_token_valid(self, token: RecencyToken) -> bool:
        ...


class Signer(Protocol):
    """An external signer such as a wallet adapter.

    Implementations raise SigningRejectedError when the user declines and
    SignerUnavailableError when no wallet can be reached.
    """

    @property
    def pubkey(self) -> Pubkey:
        ...

    async def sign_transaction(self, transaction: Transaction) -> Transaction:
        ...
