"""Main client for the FOCX SDK."""

import logging
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from .accounts import (
    deserialize_id_chunk,
    deserialize_keyword_root,
    deserialize_keyword_shard,
    deserialize_merchant_id_account,
    deserialize_price_index,
    deserialize_sales_index,
    deserialize_user_purchase_count,
)
from .config import NetworkConfig
from .constants import ATOMIC_PURCHASE_MARKER, MAX_KEYWORDS_PER_PRODUCT
from .errors import (
    AccountNotFoundError,
    FocxError,
    InvalidArgumentError,
    TooManyInstructionsError,
)
from .ids import IdAllocator
from .index import (
    keyword_seed,
    price_bucket_bounds,
    resolve_keyword_shard,
    resolve_price_bucket,
    resolve_sales_bucket,
    sales_bucket_bounds,
)
from .instructions import (
    build_add_product_to_price_index_instruction,
    build_add_product_to_sales_index_instruction,
    build_create_order_instruction,
    build_create_product_base_instruction,
    build_create_product_extended_instruction,
    build_delete_product_instruction,
    build_deposit_merchant_deposit_instruction,
    build_initialize_vault_depositor_instruction,
    build_keyword_index_instructions,
    build_purchase_product_escrow_instruction,
    build_register_merchant_instruction,
    build_request_unstake_instruction,
    build_stake_instruction,
    build_unstake_instruction,
    build_update_product_instruction,
)
from .pda import (
    get_initial_id_chunk_pda,
    get_merchant_id_pda,
    get_product_pda,
    get_user_purchase_count_pda,
)
from .ports import LedgerReader, RecencyTokenSource, Signer, TransactionSubmitter
from .rpc import RpcLedger
from .signing import SigningGateway
from .submission import SubmissionConfirmer
from .transaction import BuiltTransaction, TransactionBuilder
from .types import (
    ConfirmationResult,
    CreateOrderArgs,
    CreateProductBaseArgs,
    CreateProductExtendedArgs,
    DeleteProductParams,
    IdChunk,
    IntentKind,
    KeywordRoot,
    KeywordShard,
    ListProductParams,
    MerchantIdAccount,
    PriceIndexNode,
    PurchaseProductParams,
    RegisterMerchantParams,
    RequestUnstakeParams,
    SalesIndexNode,
    StakeParams,
    UpdateProductArgs,
    UpdateProductParams,
    UserPurchaseCount,
)
from .utils import encode_u32, encode_u64, require_int

logger = logging.getLogger(__name__)

Composer = Callable[[Pubkey, object], Awaitable[List[Instruction]]]


def _validate_keywords(keywords: Sequence[str]) -> List[str]:
    if not isinstance(keywords, (list, tuple)):
        raise InvalidArgumentError("keywords must be a list of strings")
    keywords = list(keywords)
    if len(keywords) > MAX_KEYWORDS_PER_PRODUCT:
        raise TooManyInstructionsError(
            f"{len(keywords)} keywords exceeds the limit of {MAX_KEYWORDS_PER_PRODUCT}"
        )
    for keyword in keywords:
        keyword_seed(keyword)
    if len(set(keywords)) != len(keywords):
        raise InvalidArgumentError("keywords must be unique")
    return keywords


def _require_positive(name: str, value: int) -> None:
    require_int(name, value)
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be positive, got {value}")


class MarketplaceClient:
    """Async client for the FOCX shop and vault programs.

    Every ledger read is a fresh round trip; nothing is cached between calls.
    """

    def __init__(
        self,
        ledger,
        config: Optional[NetworkConfig] = None,
        builder: Optional[TransactionBuilder] = None,
        gateway: Optional[SigningGateway] = None,
        confirmer: Optional[SubmissionConfirmer] = None,
    ):
        """Initialize the client.

        Args:
            ledger: Implements LedgerReader, RecencyTokenSource and
                TransactionSubmitter (normally an RpcLedger)
            config: Network configuration (defaults to devnet)
            builder: Transaction builder (defaults to the config's size limit)
            gateway: Signing gateway
            confirmer: Submission confirmer (defaults to the config's commitment)
        """
        self.config = config or NetworkConfig.default()
        self.ledger: LedgerReader = ledger
        self.recency_source: RecencyTokenSource = ledger
        self.submitter: TransactionSubmitter = ledger
        self.program_id = self.config.shop_program_id
        self.vault_program_id = self.config.vault_program_id
        self.id_allocator = IdAllocator(ledger, self.program_id)
        self.builder = builder or TransactionBuilder(self.config.max_transaction_size)
        self.gateway = gateway or SigningGateway()
        self.confirmer = confirmer or SubmissionConfirmer(
            ledger,
            commitment=self.config.commitment,
            poll_interval_secs=self.config.poll_interval_secs,
        )

    @classmethod
    def from_config(cls, config: Optional[NetworkConfig] = None) -> "MarketplaceClient":
        """Create a client talking to ``config.rpc_url`` over solana-py."""
        config = config or NetworkConfig.from_env()
        return cls(RpcLedger.from_url(config.rpc_url, config.commitment), config)

    # =========================================================================
    # Account Fetchers
    # =========================================================================

    async def _fetch(self, address: Pubkey) -> bytes:
        data = await self.ledger.get_account(address)
        if data is None:
            raise AccountNotFoundError(str(address))
        return data

    async def get_merchant_id_account(self, merchant: Pubkey) -> MerchantIdAccount:
        """Fetch and deserialize a merchant's id account."""
        address, _ = get_merchant_id_pda(merchant, self.program_id)
        return deserialize_merchant_id_account(await self._fetch(address))

    async def get_id_chunk(self, address: Pubkey) -> IdChunk:
        """Fetch and deserialize an id chunk by address."""
        return deserialize_id_chunk(await self._fetch(address))

    async def get_keyword_root(self, keyword: str) -> KeywordRoot:
        resolved = resolve_keyword_shard(keyword, self.config.keyword_shard_count, self.program_id)
        return deserialize_keyword_root(await self._fetch(resolved.root))

    async def get_keyword_shard(self, keyword: str) -> KeywordShard:
        resolved = resolve_keyword_shard(keyword, self.config.keyword_shard_count, self.program_id)
        return deserialize_keyword_shard(await self._fetch(resolved.shard))

    async def get_price_index(self, price: int) -> PriceIndexNode:
        bucket = resolve_price_bucket(price, self.program_id)
        return deserialize_price_index(await self._fetch(bucket.address))

    async def get_sales_index(self, sales: int) -> SalesIndexNode:
        bucket = resolve_sales_bucket(sales, self.program_id)
        return deserialize_sales_index(await self._fetch(bucket.address))

    async def get_user_purchase_count(self, buyer: Pubkey) -> Optional[UserPurchaseCount]:
        """Fetch a buyer's purchase counter, or None before their first purchase."""
        address, _ = get_user_purchase_count_pda(buyer, self.program_id)
        data = await self.ledger.get_account(address)
        if data is None:
            return None
        return deserialize_user_purchase_count(data)

    # =========================================================================
    # Index Lookups
    # =========================================================================

    async def get_keyword_product_ids(self, keyword: str) -> List[int]:
        """Product ids stored in the keyword's target shard."""
        resolved = resolve_keyword_shard(keyword, self.config.keyword_shard_count, self.program_id)
        data = await self.ledger.get_account(resolved.shard)
        if data is None:
            return []
        return deserialize_keyword_shard(data).product_ids

    async def get_price_bucket_product_ids(self, price: int) -> List[int]:
        """Product ids stored in the bucket containing ``price``."""
        bucket = resolve_price_bucket(price, self.program_id)
        data = await self.ledger.get_account(bucket.address)
        if data is None:
            return []
        return deserialize_price_index(data).product_ids

    async def get_sales_bucket_product_ids(self, sales: int) -> List[int]:
        """Product ids stored in the bucket containing ``sales``."""
        bucket = resolve_sales_bucket(sales, self.program_id)
        data = await self.ledger.get_account(bucket.address)
        if data is None:
            return []
        return deserialize_sales_index(data).product_ids

    # =========================================================================
    # Id Prediction
    # =========================================================================

    async def predict_next_product_id(self, merchant: Pubkey) -> int:
        """Predict (not reserve) the id of the merchant's next product."""
        return await self.id_allocator.predict_next_id(merchant)

    # =========================================================================
    # Intent Composition
    # =========================================================================

    def _composers(self) -> Dict[IntentKind, Tuple[Composer, Optional[type]]]:
        return {
            IntentKind.REGISTER_MERCHANT: (self._compose_register_merchant, RegisterMerchantParams),
            IntentKind.LIST_PRODUCT: (self._compose_list_product, ListProductParams),
            IntentKind.UPDATE_PRODUCT: (self._compose_update_product, UpdateProductParams),
            IntentKind.DELETE_PRODUCT: (self._compose_delete_product, DeleteProductParams),
            IntentKind.PURCHASE_PRODUCT: (self._compose_purchase_product, PurchaseProductParams),
            IntentKind.INITIALIZE_VAULT_DEPOSITOR: (self._compose_initialize_vault_depositor, None),
            IntentKind.STAKE: (self._compose_stake, StakeParams),
            IntentKind.REQUEST_UNSTAKE: (self._compose_request_unstake, RequestUnstakeParams),
            IntentKind.UNSTAKE: (self._compose_unstake, None),
        }

    async def compose(
        self, intent_kind: IntentKind, intent_args, fee_payer: Pubkey
    ) -> List[Instruction]:
        """Produce the ordered instruction list for an intent.

        Raises:
            InvalidArgumentError: If the arguments do not match the intent
            TooManyInstructionsError: If the bundle cannot fit one transaction
        """
        try:
            composer, params_type = self._composers()[IntentKind(intent_kind)]
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown intent: {intent_kind!r}") from e

        if params_type is not None and not isinstance(intent_args, params_type):
            raise InvalidArgumentError(
                f"{IntentKind(intent_kind).value} expects {params_type.__name__}, "
                f"got {type(intent_args).__name__}"
            )
        instructions = await composer(fee_payer, intent_args)
        logger.debug(
            f"Composed {intent_kind} for {fee_payer}: "
            f"{[ix.program_id for ix in instructions]}"
        )
        return instructions

    async def _compose_register_merchant(
        self, merchant: Pubkey, params: RegisterMerchantParams
    ) -> List[Instruction]:
        if not params.name:
            raise InvalidArgumentError("Merchant name must not be empty")
        _require_positive("deposit_amount", params.deposit_amount)
        encode_u64(params.deposit_amount)
        mint = params.payment_mint or self.config.payment_mint

        return [
            build_register_merchant_instruction(
                merchant, params.name, params.description, self.program_id
            ),
            build_deposit_merchant_deposit_instruction(
                merchant, mint, params.deposit_amount, self.program_id
            ),
        ]

    def _list_product_instructions(
        self,
        merchant: Pubkey,
        params: ListProductParams,
        keywords: List[str],
        product_id: int,
        active_chunk: Pubkey,
    ) -> List[Instruction]:
        base_args = CreateProductBaseArgs(
            name=params.name,
            description=params.description,
            price=params.price,
            keywords=keywords,
            inventory=params.inventory,
            payment_token=params.payment_token or self.config.payment_mint,
            shipping_location=params.shipping_location,
        )
        extended_args = CreateProductExtendedArgs(
            product_id=product_id,
            image_video_urls=list(params.image_video_urls),
            sales_regions=list(params.sales_regions),
            logistics_methods=list(params.logistics_methods),
        )
        price_bucket = resolve_price_bucket(params.price, self.program_id)
        sales_bucket = resolve_sales_bucket(params.initial_sales, self.program_id)

        # base, extended, keywords, price, sales
        return [
            build_create_product_base_instruction(
                merchant, product_id, active_chunk, base_args, self.program_id
            ),
            build_create_product_extended_instruction(merchant, extended_args, self.program_id),
            *build_keyword_index_instructions(
                merchant, keywords, product_id, self.config.keyword_shard_count, self.program_id
            ),
            build_add_product_to_price_index_instruction(
                merchant, product_id, params.price, price_bucket, self.program_id
            ),
            build_add_product_to_sales_index_instruction(
                merchant, product_id, params.initial_sales, sales_bucket, self.program_id
            ),
        ]

    async def _compose_list_product(
        self, merchant: Pubkey, params: ListProductParams
    ) -> List[Instruction]:
        if not params.name:
            raise InvalidArgumentError("Product name must not be empty")
        keywords = _validate_keywords(params.keywords)
        price_bucket_bounds(params.price)
        sales_bucket_bounds(params.initial_sales)
        encode_u64(params.inventory)

        # Size does not depend on the id or chunk values, so check it before
        # reading the ledger.
        placeholder_chunk, _ = get_initial_id_chunk_pda(merchant, self.program_id)
        self.builder.preflight(
            self._list_product_instructions(merchant, params, keywords, 0, placeholder_chunk),
            merchant,
        )

        prediction = await self.id_allocator.predict(merchant)
        logger.info(f"Listing product {prediction.product_id} for {merchant} (predicted)")
        return self._list_product_instructions(
            merchant, params, keywords, prediction.product_id, prediction.active_chunk
        )

    async def _compose_update_product(
        self, merchant: Pubkey, params: UpdateProductParams
    ) -> List[Instruction]:
        keywords = _validate_keywords(params.keywords)
        args = UpdateProductArgs(
            product_id=params.product_id,
            name=params.name,
            description=params.description,
            price=params.price,
            keywords=keywords,
            inventory=params.inventory,
            payment_token=params.payment_token or self.config.payment_mint,
            image_video_urls=list(params.image_video_urls),
            shipping_location=params.shipping_location,
            sales_regions=list(params.sales_regions),
            logistics_methods=list(params.logistics_methods),
        )
        return [build_update_product_instruction(merchant, args, self.program_id)]

    async def _compose_delete_product(
        self, merchant: Pubkey, params: DeleteProductParams
    ) -> List[Instruction]:
        return [
            build_delete_product_instruction(
                merchant, params.product_id, params.hard_delete, params.force, self.program_id
            )
        ]

    async def _compose_purchase_product(
        self, buyer: Pubkey, params: PurchaseProductParams
    ) -> List[Instruction]:
        _require_positive("quantity", params.quantity)
        encode_u32(params.quantity)
        encode_u64(params.product_id)
        mint = params.payment_mint or self.config.payment_mint

        product_address, _ = get_product_pda(params.product_id, self.program_id)
        if await self.ledger.get_account(product_address) is None:
            raise AccountNotFoundError(str(product_address))

        # The counter account is created by the first purchase.
        counter = await self.get_user_purchase_count(buyer)
        purchase_count = 0 if counter is None else counter.purchase_count

        order_args = CreateOrderArgs(
            product_id=params.product_id,
            quantity=params.quantity,
            shipping_address=params.shipping_address,
            notes=params.notes,
            transaction_signature=ATOMIC_PURCHASE_MARKER,
        )
        return [
            build_create_order_instruction(
                buyer, params.merchant, purchase_count, order_args, self.program_id
            ),
            build_purchase_product_escrow_instruction(
                buyer, mint, params.product_id, params.quantity, self.program_id
            ),
        ]

    async def _compose_initialize_vault_depositor(self, user: Pubkey, _params) -> List[Instruction]:
        return [build_initialize_vault_depositor_instruction(user, self.vault_program_id)]

    async def _compose_stake(self, user: Pubkey, params: StakeParams) -> List[Instruction]:
        _require_positive("amount", params.amount)
        return [
            build_stake_instruction(
                user, self.config.payment_mint, params.amount, self.vault_program_id
            )
        ]

    async def _compose_request_unstake(
        self, user: Pubkey, params: RequestUnstakeParams
    ) -> List[Instruction]:
        _require_positive("amount", params.amount)
        return [build_request_unstake_instruction(user, params.amount, self.vault_program_id)]

    async def _compose_unstake(self, user: Pubkey, _params) -> List[Instruction]:
        return [build_unstake_instruction(user, self.config.payment_mint, self.vault_program_id)]

    # =========================================================================
    # Build and Submit
    # =========================================================================

    async def build_transaction(
        self, intent_kind: IntentKind, intent_args, fee_payer: Pubkey
    ) -> BuiltTransaction:
        """Compose, size-check, then fetch a blockhash and assemble.

        The blockhash is fetched last because it expires quickly.
        """
        instructions = await self.compose(intent_kind, intent_args, fee_payer)
        self.builder.preflight(instructions, fee_payer)
        token = await self.recency_source.get_recent_token(self.config.recency_timeout_secs)
        return self.builder.build(instructions, fee_payer, token)

    async def submit_intent(
        self,
        intent_kind: IntentKind,
        intent_args,
        fee_payer: Pubkey,
        signer: Signer,
    ) -> ConfirmationResult:
        """Run one intent end to end and return its terminal result.

        SDK errors become a failed ``ConfirmationResult``; cancellation
        propagates.
        """
        try:
            built = await self.build_transaction(intent_kind, intent_args, fee_payer)
            signed = await self.gateway.request_signature(built, signer)
            return await self.confirmer.submit_and_confirm(
                signed, self.config.confirmation_timeout_secs
            )
        except FocxError as e:
            logger.warning(f"{intent_kind} for {fee_payer} failed ({e.category.value}): {e}")
            return ConfirmationResult.from_error(e)

    async def build_and_submit(
        self,
        intent_kind: IntentKind,
        intent_args,
        fee_payer: Pubkey,
        signer: Signer,
    ) -> AsyncIterator[ConfirmationResult]:
        """Async stream that emits exactly one terminal ``ConfirmationResult``."""
        yield await self.submit_intent(intent_kind, intent_args, fee_payer, signer)
