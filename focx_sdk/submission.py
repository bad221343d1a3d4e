"""Submit a signed transaction once and poll until it settles."""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from .constants import DEFAULT_POLL_INTERVAL_SECS
from .errors import (
    ConfigError,
    RecencyTokenExpiredError,
    SubmissionNetworkError,
    SubmissionRejectedError,
    SubmissionUnconfirmedError,
)
from .ports import TransactionSubmitter
from .signing import SignedTransaction
from .types import ConfirmationResult

logger = logging.getLogger(__name__)

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


def _reached(status: str, commitment: str) -> bool:
    return _COMMITMENT_RANK.get(status, -1) >= _COMMITMENT_RANK[commitment]


class SubmissionConfirmer:
    """Sends signed bytes exactly once, then polls signature status.

    Outcomes:
    - commitment reached: ``ConfirmationResult``
    - status carries an error: ``SubmissionRejectedError``
    - blockhash no longer valid and no status seen: ``RecencyTokenExpiredError``
    - timeout: ``SubmissionUnconfirmedError`` (the transaction may still land)

    Never resends. A caller that wants to retry must build a new transaction.
    """

    def __init__(
        self,
        submitter: TransactionSubmitter,
        commitment: str = "finalized",
        poll_interval_secs: float = DEFAULT_POLL_INTERVAL_SECS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if commitment not in ("confirmed", "finalized"):
            raise ConfigError(f"unsupported commitment {commitment!r}")
        self.submitter = submitter
        self.commitment = commitment
        self.poll_interval_secs = poll_interval_secs
        self._clock = clock
        self._sleep = sleep

    async def submit_and_confirm(
        self, signed: SignedTransaction, timeout_secs: float
    ) -> ConfirmationResult:
        """Submit ``signed`` and wait up to ``timeout_secs`` for confirmation.

        Raises:
            AlreadySubmittedError: If ``signed`` was submitted before
            SubmissionRejectedError, RecencyTokenExpiredError,
            SubmissionNetworkError, SubmissionUnconfirmedError
        """
        wire = signed.consume()
        token = signed.built.recency_token

        signature = await self.submitter.send_raw_transaction(wire)
        sig_str = str(signature)
        logger.info(f"Submitted transaction {sig_str}")

        deadline = self._clock() + timeout_secs
        while True:
            try:
                status = await self.submitter.get_signature_status(signature)
                expired = status is None and not await self.submitter.is_recency_token_valid(
                    token
                )
            except SubmissionNetworkError as e:
                logger.warning(f"Status poll for {sig_str} failed: {e}")
                status, expired = None, False

            if status is not None:
                if status.err is not None:
                    logger.error(f"Transaction {sig_str} failed on-chain: {status.err}")
                    raise SubmissionRejectedError(status.err, sig_str)
                if status.confirmation_status and _reached(
                    status.confirmation_status, self.commitment
                ):
                    logger.info(
                        f"Transaction {sig_str} reached {status.confirmation_status} "
                        f"at slot {status.slot}"
                    )
                    return ConfirmationResult(
                        signature=sig_str,
                        finalized=status.confirmation_status == "finalized",
                        confirmation_status=status.confirmation_status,
                        slot=status.slot,
                    )
            elif expired:
                logger.warning(f"Blockhash {token.blockhash} expired before {sig_str} was seen")
                raise RecencyTokenExpiredError(str(token.blockhash), sig_str)

            remaining = deadline - self._clock()
            if remaining <= 0:
                logger.warning(f"Transaction {sig_str} unconfirmed after {timeout_secs}s")
                raise SubmissionUnconfirmedError(sig_str, timeout_secs)
            await self._sleep(min(self.poll_interval_secs, remaining))
