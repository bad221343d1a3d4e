"""Signature requests to an external signer.

The SDK never holds a user's key: it hands an unsigned transaction to a
:class:`~focx_sdk.ports.Signer` and checks what comes back.
"""

import asyncio
import logging
from typing import Optional

import base58
import nacl.exceptions
from nacl.signing import SigningKey, VerifyKey
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from .errors import (
    AlreadySubmittedError,
    SignerError,
    SignerUnavailableError,
    SigningFailure,
)
from .ports import Signer
from .transaction import BuiltTransaction

logger = logging.getLogger(__name__)


class SignedTransaction:
    """A fee-payer-signed transaction that can be handed off exactly once."""

    def __init__(self, built: BuiltTransaction, transaction: Transaction):
        self.built = built
        self.transaction = transaction
        self._consumed = False

    @property
    def signature(self) -> Signature:
        return self.transaction.signatures[0]

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> bytes:
        """Return the wire bytes, marking the transaction as submitted.

        Raises:
            AlreadySubmittedError: If called a second time
        """
        if self._consumed:
            raise AlreadySubmittedError(str(self.signature))
        self._consumed = True
        return bytes(self.transaction)


def verify_transaction_signature(transaction: Transaction, signer: Pubkey) -> bool:
    """Verify the first signature on a transaction against ``signer``.

    Returns True if the signature is valid, False otherwise.
    """
    if not transaction.signatures:
        return False
    try:
        verify_key = VerifyKey(bytes(signer))
        verify_key.verify(bytes(transaction.message), bytes(transaction.signatures[0]))
        return True
    except nacl.exceptions.BadSignatureError:
        return False


class SigningGateway:
    """Requests a signature and validates the signer's answer.

    Cancelling the awaiting task abandons the request; the built
    transaction is never mutated, so no partially signed state remains.
    """

    def __init__(self, timeout_secs: Optional[float] = None):
        self.timeout_secs = timeout_secs

    async def request_signature(
        self, built: BuiltTransaction, signer: Signer
    ) -> SignedTransaction:
        """Ask ``signer`` to sign ``built``.

        Raises:
            SigningRejectedError: If the user declined
            SignerUnavailableError: If the signer cannot be reached or timed out
            SignerError: If the signer failed or returned an unusable transaction
        """
        if signer.pubkey != built.fee_payer:
            raise SignerError(
                f"signer {signer.pubkey} is not the fee payer {built.fee_payer}"
            )

        # the signer gets its own copy
        unsigned = Transaction.from_bytes(bytes(built.transaction))
        logger.info(f"Requesting signature from {signer.pubkey}")
        try:
            if self.timeout_secs is None:
                signed = await signer.sign_transaction(unsigned)
            else:
                signed = await asyncio.wait_for(
                    signer.sign_transaction(unsigned), self.timeout_secs
                )
        except SigningFailure:
            raise
        except asyncio.TimeoutError as e:
            raise SignerUnavailableError(
                f"Signer did not respond within {self.timeout_secs}s"
            ) from e
        except Exception as e:
            raise SignerError(str(e)) from e

        if signed.message != built.message:
            raise SignerError("signer returned a different transaction than requested")
        if not verify_transaction_signature(signed, built.fee_payer):
            raise SignerError("fee payer signature does not verify")

        logger.info(f"Signed transaction {signed.signatures[0]}")
        return SignedTransaction(built, signed)


class KeypairSigner:
    """Signs with a local keypair. For scripts, tests and devnet tooling."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @classmethod
    def from_base58(cls, private_key: str) -> "KeypairSigner":
        """Load a signer from a base58-encoded 64-byte secret key."""
        return cls(Keypair.from_bytes(base58.b58decode(private_key)))

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    async def sign_transaction(self, transaction: Transaction) -> Transaction:
        signing_key = SigningKey(self._keypair.secret())
        signature = signing_key.sign(bytes(transaction.message)).signature
        return Transaction.populate(transaction.message, [Signature.from_bytes(signature)])
