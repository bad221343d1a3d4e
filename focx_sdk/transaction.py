"""Atomic transaction assembly with a pre-flight size check."""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from .constants import PACKET_DATA_SIZE
from .errors import InvalidArgumentError, TooManyInstructionsError
from .types import RecencyToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuiltTransaction:
    """An unsigned transaction plus the inputs it was built from."""

    instructions: Tuple[Instruction, ...]
    fee_payer: Pubkey
    recency_token: RecencyToken
    transaction: Transaction

    @property
    def message(self) -> Message:
        return self.transaction.message

    @property
    def size(self) -> int:
        """Serialized size in bytes, signatures included."""
        return len(bytes(self.transaction))


class TransactionBuilder:
    """Bundles instructions into one legacy transaction, preserving order.

    All instructions in a transaction apply together or not at all, so
    dependent steps (create a product, then index it) are bundled rather
    than sent separately.
    """

    def __init__(self, max_size: int = PACKET_DATA_SIZE):
        self.max_size = max_size

    def _compile(
        self, instructions: Sequence[Instruction], fee_payer: Pubkey, blockhash: Hash
    ) -> Transaction:
        if not instructions:
            raise InvalidArgumentError("Transaction needs at least one instruction")
        message = Message.new_with_blockhash(list(instructions), fee_payer, blockhash)
        if message.header.num_required_signatures != 1:
            raise InvalidArgumentError(
                f"Transaction needs {message.header.num_required_signatures} signers; "
                "only the fee payer can sign"
            )
        return Transaction.new_unsigned(message)

    def preflight(self, instructions: Sequence[Instruction], fee_payer: Pubkey) -> int:
        """Check the bundle fits in one transaction before touching the network.

        The blockhash does not affect size, so a placeholder is used.

        Returns:
            The serialized size in bytes.

        Raises:
            TooManyInstructionsError: If the serialized size exceeds max_size
        """
        size = len(bytes(self._compile(instructions, fee_payer, Hash.default())))
        if size > self.max_size:
            raise TooManyInstructionsError(
                f"Transaction with {len(instructions)} instructions is {size} bytes "
                f"(limit {self.max_size})",
                size=size,
                limit=self.max_size,
            )
        return size

    def build(
        self,
        instructions: Sequence[Instruction],
        fee_payer: Pubkey,
        recency_token: RecencyToken,
    ) -> BuiltTransaction:
        """Assemble an unsigned transaction.

        Raises:
            TooManyInstructionsError: If the serialized size exceeds max_size
        """
        self.preflight(instructions, fee_payer)
        transaction = self._compile(instructions, fee_payer, recency_token.blockhash)
        built = BuiltTransaction(
            instructions=tuple(instructions),
            fee_payer=fee_payer,
            recency_token=recency_token,
            transaction=transaction,
        )
        logger.debug(
            f"Built transaction: {len(instructions)} instructions, {built.size} bytes, "
            f"fee payer {fee_payer}"
        )
        return built
