"""Product id prediction from a merchant's active id chunk."""

import logging
from dataclasses import dataclass

from solders.pubkey import Pubkey

from .accounts import deserialize_id_chunk, deserialize_merchant_id_account
from .constants import SHOP_PROGRAM_ID
from .errors import AccountNotFoundError
from .pda import get_merchant_id_pda
from .ports import LedgerReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdPrediction:
    """The id a create_product_base is expected to receive.

    Not a reservation: another device listing for the same merchant can
    observe the same chunk state and predict the same id. The program
    decides the final id.
    """

    product_id: int
    active_chunk: Pubkey
    merchant_id_account: Pubkey


class IdAllocator:
    """Reads chunk state to predict the next product id. Never caches."""

    def __init__(self, ledger: LedgerReader, program_id: Pubkey = SHOP_PROGRAM_ID):
        self.ledger = ledger
        self.program_id = program_id

    async def predict(self, merchant: Pubkey) -> IdPrediction:
        """Read MerchantIdAccount then its active IdChunk.

        Raises:
            AccountNotFoundError: If the merchant is not registered or its
                active chunk does not exist
        """
        merchant_id_pda, _ = get_merchant_id_pda(merchant, self.program_id)
        data = await self.ledger.get_account(merchant_id_pda)
        if data is None:
            raise AccountNotFoundError(str(merchant_id_pda))
        merchant_ids = deserialize_merchant_id_account(data)

        chunk_data = await self.ledger.get_account(merchant_ids.active_chunk)
        if chunk_data is None:
            raise AccountNotFoundError(str(merchant_ids.active_chunk))
        chunk = deserialize_id_chunk(chunk_data)

        product_id = chunk.start_id + chunk.next_available
        if product_id > chunk.end_id:
            logger.warning(
                f"Active chunk {merchant_ids.active_chunk} for {merchant} is exhausted "
                f"(next {product_id} > end {chunk.end_id})"
            )
        logger.debug(f"Predicted product id {product_id} for merchant {merchant}")

        return IdPrediction(
            product_id=product_id,
            active_chunk=merchant_ids.active_chunk,
            merchant_id_account=merchant_id_pda,
        )

    async def predict_next_id(self, merchant: Pubkey) -> int:
        """Predict the id the next created product will receive."""
        prediction = await self.predict(merchant)
        return prediction.product_id
