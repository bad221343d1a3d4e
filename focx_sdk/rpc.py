"""Ledger ports implemented over solana-py's ``AsyncClient``."""

import asyncio
import logging
from typing import Optional

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from .errors import (
    LedgerReadError,
    RecencyFetchTimeoutError,
    RecencyTokenExpiredError,
    SubmissionNetworkError,
    SubmissionRejectedError,
)
from .types import RecencyToken, SignatureStatus

logger = logging.getLogger(__name__)

# solders status enums are unhashable, so match them by equality.
_CONFIRMATION_STATUS = (
    (TransactionConfirmationStatus.Processed, "processed"),
    (TransactionConfirmationStatus.Confirmed, "confirmed"),
    (TransactionConfirmationStatus.Finalized, "finalized"),
)

_BLOCKHASH_NOT_FOUND = ("Blockhash not found", "BlockhashNotFound")


def confirmation_status_name(status) -> Optional[str]:
    """Map a solders confirmation status to its commitment name."""
    for member, name in _CONFIRMATION_STATUS:
        if status == member:
            return name
    return None


class RpcLedger:
    """Reads accounts, fetches blockhashes and submits transactions via RPC.

    Implements LedgerReader, RecencyTokenSource and TransactionSubmitter.
    """

    def __init__(self, connection: AsyncClient, commitment: str = "finalized"):
        self.connection = connection
        self.commitment = Commitment(commitment)

    @classmethod
    def from_url(cls, rpc_url: str, commitment: str = "finalized") -> "RpcLedger":
        return cls(AsyncClient(rpc_url), commitment)

    async def close(self) -> None:
        await self.connection.close()

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_account(self, address: Pubkey) -> Optional[bytes]:
        """Return raw account data, or None if the account does not exist."""
        try:
            response = await self.connection.get_account_info(address, commitment=Confirmed)
        except (SolanaRpcException, RPCException, OSError) as e:
            raise LedgerReadError(f"{address}: {e}") from e

        if response.value is None:
            return None
        return bytes(response.value.data)

    async def get_recent_token(self, timeout_secs: float) -> RecencyToken:
        """Fetch the latest blockhash under a timeout."""
        try:
            response = await asyncio.wait_for(
                self.connection.get_latest_blockhash(commitment=self.commitment),
                timeout_secs,
            )
        except asyncio.TimeoutError as e:
            raise RecencyFetchTimeoutError(timeout_secs) from e
        except (SolanaRpcException, RPCException, OSError) as e:
            raise LedgerReadError(f"latest blockhash: {e}") from e

        token = RecencyToken(
            blockhash=response.value.blockhash,
            last_valid_block_height=response.value.last_valid_block_height,
        )
        logger.info(
            f"Fetched blockhash {token.blockhash} "
            f"(valid until block {token.last_valid_block_height})"
        )
        return token

    # =========================================================================
    # Submission
    # =========================================================================

    async def send_raw_transaction(self, wire: bytes) -> Signature:
        """Send signed bytes once, with preflight simulation enabled."""
        opts = TxOpts(skip_preflight=False, preflight_commitment=Confirmed)
        try:
            response = await self.connection.send_raw_transaction(wire, opts=opts)
        except RPCException as e:
            sent = Transaction.from_bytes(wire)
            signature = str(sent.signatures[0])
            message = str(e)
            if any(marker in message for marker in _BLOCKHASH_NOT_FOUND):
                logger.warning(f"Transaction {signature} rejected: blockhash expired")
                raise RecencyTokenExpiredError(str(sent.message.recent_blockhash), signature) from e
            logger.error(f"Transaction {signature} rejected by preflight: {message}")
            raise SubmissionRejectedError(message, signature) from e
        except (SolanaRpcException, OSError) as e:
            raise SubmissionNetworkError(str(e)) from e
        return response.value

    async def get_signature_status(self, signature: Signature) -> Optional[SignatureStatus]:
        try:
            response = await self.connection.get_signature_statuses([signature])
        except (SolanaRpcException, RPCException, OSError) as e:
            raise SubmissionNetworkError(str(e)) from e

        status = response.value[0]
        if status is None:
            return None
        return SignatureStatus(
            slot=status.slot,
            confirmation_status=confirmation_status_name(status.confirmation_status),
            err=None if status.err is None else str(status.err),
        )

    async def is_recency_token_valid(self, token: RecencyToken) -> bool:
        try:
            response = await self.connection.is_blockhash_valid(
                token.blockhash, commitment=Confirmed
            )
        except (SolanaRpcException, RPCException, OSError) as e:
            raise SubmissionNetworkError(str(e)) from e
        return bool(response.value)

