"""Type definitions for the FOCX SDK."""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Sequence, Tuple

from solders.hash import Hash
from solders.pubkey import Pubkey

from .codec import (
    BOOL,
    BYTES,
    I64,
    PUBKEY,
    STRING,
    U8,
    U32,
    U64,
    FieldType,
    FixedBytes,
    Option,
    Struct,
    Vec,
)
from .errors import FailureKind, FocxError

Layout = Tuple[Tuple[str, FieldType], ...]


class IntentKind(str, Enum):
    """High-level operations a caller can ask the client to perform."""

    REGISTER_MERCHANT = "register_merchant"
    LIST_PRODUCT = "list_product"
    UPDATE_PRODUCT = "update_product"
    DELETE_PRODUCT = "delete_product"
    PURCHASE_PRODUCT = "purchase_product"
    INITIALIZE_VAULT_DEPOSITOR = "initialize_vault_depositor"
    STAKE = "stake"
    REQUEST_UNSTAKE = "request_unstake"
    UNSTAKE = "unstake"


# ============================================================================
# On-chain accounts
# ============================================================================


@dataclass
class IdChunk:
    """A merchant's block of reservable product ids."""

    ACCOUNT_NAME: ClassVar[str] = "IdChunk"
    LAYOUT: ClassVar[Layout] = (
        ("merchant_id", U32),
        ("chunk_index", U32),
        ("start_id", U64),
        ("end_id", U64),
        ("next_available", U64),
        ("bitmap", BYTES),
        ("bump", U8),
    )

    merchant_id: int
    chunk_index: int
    start_id: int
    end_id: int
    next_available: int
    bitmap: bytes
    bump: int


@dataclass
class MerchantIdAccount:
    """Tracks which IdChunk is active for a merchant."""

    ACCOUNT_NAME: ClassVar[str] = "MerchantIdAccount"
    LAYOUT: ClassVar[Layout] = (
        ("merchant_id", U32),
        ("last_chunk_index", U32),
        ("last_local_id", U64),
        ("active_chunk", PUBKEY),
        ("unused_chunks", Vec(PUBKEY)),
        ("bump", U8),
    )

    merchant_id: int
    last_chunk_index: int
    last_local_id: int
    active_chunk: Pubkey
    unused_chunks: List[Pubkey]
    bump: int


@dataclass
class KeywordRoot:
    """Shard metadata for one keyword."""

    ACCOUNT_NAME: ClassVar[str] = "KeywordRoot"
    LAYOUT: ClassVar[Layout] = (
        ("keyword", STRING),
        ("total_shards", U8),
        ("first_shard", PUBKEY),
        ("last_shard", PUBKEY),
        ("total_products", U32),
        ("bloom_filter", FixedBytes(256)),
        ("bump", U8),
    )

    keyword: str
    total_shards: int
    first_shard: Pubkey
    last_shard: Pubkey
    total_products: int
    bloom_filter: bytes
    bump: int


@dataclass
class KeywordShard:
    """A bounded list of product ids for one keyword shard."""

    ACCOUNT_NAME: ClassVar[str] = "KeywordShard"
    LAYOUT: ClassVar[Layout] = (
        ("keyword", STRING),
        ("shard_index", U32),
        ("prev_shard", PUBKEY),
        ("next_shard", Option(PUBKEY)),
        ("product_ids", Vec(U64)),
        ("min_id", U64),
        ("max_id", U64),
        ("bloom_summary", FixedBytes(32)),
        ("bump", U8),
    )

    keyword: str
    shard_index: int
    prev_shard: Pubkey
    next_shard: Optional[Pubkey]
    product_ids: List[int]
    min_id: int
    max_id: int
    bloom_summary: bytes
    bump: int


@dataclass
class PriceIndexNode:
    """Product ids whose price falls in ``[price_range_start, price_range_end)``."""

    ACCOUNT_NAME: ClassVar[str] = "PriceIndexNode"
    LAYOUT: ClassVar[Layout] = (
        ("price_range_start", U64),
        ("price_range_end", U64),
        ("product_ids", Vec(U64)),
        ("left_child", Option(PUBKEY)),
        ("right_child", Option(PUBKEY)),
        ("parent", Option(PUBKEY)),
        ("height", U8),
        ("bump", U8),
    )

    price_range_start: int
    price_range_end: int
    product_ids: List[int]
    left_child: Optional[Pubkey]
    right_child: Optional[Pubkey]
    parent: Optional[Pubkey]
    height: int
    bump: int


@dataclass
class ProductSales:
    """Top-seller summary embedded in a sales index node."""

    LAYOUT: ClassVar[Layout] = (
        ("product_id", U64),
        ("merchant", PUBKEY),
        ("name", STRING),
        ("price", U64),
        ("sales", U32),
        ("last_update", I64),
    )

    product_id: int
    merchant: Pubkey
    name: str
    price: int
    sales: int
    last_update: int


@dataclass
class SalesIndexNode:
    """Product ids whose sales count falls in ``[sales_range_start, sales_range_end)``."""

    ACCOUNT_NAME: ClassVar[str] = "SalesIndexNode"
    LAYOUT: ClassVar[Layout] = (
        ("sales_range_start", U32),
        ("sales_range_end", U32),
        ("product_ids", Vec(U64)),
        ("top_items", Vec(Struct(ProductSales))),
        ("left_child", Option(PUBKEY)),
        ("right_child", Option(PUBKEY)),
        ("parent", Option(PUBKEY)),
        ("height", U8),
        ("bump", U8),
    )

    sales_range_start: int
    sales_range_end: int
    product_ids: List[int]
    top_items: List[ProductSales]
    left_child: Optional[Pubkey]
    right_child: Optional[Pubkey]
    parent: Optional[Pubkey]
    height: int
    bump: int


@dataclass
class UserPurchaseCount:
    """Per-buyer order counter; orders are addressed by its value."""

    ACCOUNT_NAME: ClassVar[str] = "UserPurchaseCount"
    LAYOUT: ClassVar[Layout] = (
        ("buyer", PUBKEY),
        ("purchase_count", U64),
        ("created_at", I64),
        ("updated_at", I64),
        ("bump", U8),
    )

    buyer: Pubkey
    purchase_count: int
    created_at: int
    updated_at: int
    bump: int


# ============================================================================
# Instruction arguments (shop program)
# ============================================================================


@dataclass
class RegisterMerchantAtomicArgs:
    INSTRUCTION_NAME: ClassVar[str] = "register_merchant_atomic"
    LAYOUT: ClassVar[Layout] = (("name", STRING), ("description", STRING))

    name: str
    description: str


@dataclass
class DepositMerchantDepositArgs:
    INSTRUCTION_NAME: ClassVar[str] = "deposit_merchant_deposit"
    LAYOUT: ClassVar[Layout] = (("amount", U64),)

    amount: int


@dataclass
class CreateProductBaseArgs:
    INSTRUCTION_NAME: ClassVar[str] = "create_product_base"
    LAYOUT: ClassVar[Layout] = (
        ("name", STRING),
        ("description", STRING),
        ("price", U64),
        ("keywords", Vec(STRING)),
        ("inventory", U64),
        ("payment_token", PUBKEY),
        ("shipping_location", STRING),
    )

    name: str
    description: str
    price: int
    keywords: List[str]
    inventory: int
    payment_token: Pubkey
    shipping_location: str


@dataclass
class CreateProductExtendedArgs:
    INSTRUCTION_NAME: ClassVar[str] = "create_product_extended"
    LAYOUT: ClassVar[Layout] = (
        ("product_id", U64),
        ("image_video_urls", Vec(STRING)),
        ("sales_regions", Vec(STRING)),
        ("logistics_methods", Vec(STRING)),
    )

    product_id: int
    image_video_urls: List[str]
    sales_regions: List[str]
    logistics_methods: List[str]


@dataclass
class AddProductToKeywordIndexArgs:
    INSTRUCTION_NAME: ClassVar[str] = "add_product_to_keyword_index"
    LAYOUT: ClassVar[Layout] = (("keyword", STRING), ("product_id", U64))

    keyword: str
    product_id: int


@dataclass
class AddProductToPriceIndexArgs:
    INSTRUCTION_NAME: ClassVar[str] = "add_product_to_price_index"
    LAYOUT: ClassVar[Layout] = (
        ("product_id", U64),
        ("price", U64),
        ("price_range_start", U64),
        ("price_range_end", U64),
    )

    product_id: int
    price: int
    price_range_start: int
    price_range_end: int


@dataclass
class AddProductToSalesIndexArgs:
    INSTRUCTION_NAME: ClassVar[str] = "add_product_to_sales_index"
    LAYOUT: ClassVar[Layout] = (
        ("sales_range_start", U32),
        ("sales_range_end", U32),
        ("product_id", U64),
        ("sales", U32),
    )

    sales_range_start: int
    sales_range_end: int
    product_id: int
    sales: int


@dataclass
class UpdateProductArgs:
    INSTRUCTION_NAME: ClassVar[str] = "update_product"
    LAYOUT: ClassVar[Layout] = (
        ("product_id", U64),
        ("name", STRING),
        ("description", STRING),
        ("price", U64),
        ("keywords", Vec(STRING)),
        ("inventory", U64),
        ("payment_token", PUBKEY),
        ("image_video_urls", Vec(STRING)),
        ("shipping_location", STRING),
        ("sales_regions", Vec(STRING)),
        ("logistics_methods", Vec(STRING)),
    )

    product_id: int
    name: str
    description: str
    price: int
    keywords: List[str]
    inventory: int
    payment_token: Pubkey
    image_video_urls: List[str]
    shipping_location: str
    sales_regions: List[str]
    logistics_methods: List[str]


@dataclass
class DeleteProductArgs:
    INSTRUCTION_NAME: ClassVar[str] = "delete_product"
    LAYOUT: ClassVar[Layout] = (
        ("product_id", U64),
        ("hard_delete", BOOL),
        ("force", BOOL),
    )

    product_id: int
    hard_delete: bool
    force: bool


@dataclass
class CreateOrderArgs:
    INSTRUCTION_NAME: ClassVar[str] = "create_order"
    LAYOUT: ClassVar[Layout] = (
        ("product_id", U64),
        ("quantity", U32),
        ("shipping_address", STRING),
        ("notes", STRING),
        ("transaction_signature", STRING),
    )

    product_id: int
    quantity: int
    shipping_address: str
    notes: str
    transaction_signature: str


@dataclass
class PurchaseProductEscrowArgs:
    INSTRUCTION_NAME: ClassVar[str] = "purchase_product_escrow"
    LAYOUT: ClassVar[Layout] = (("product_id", U64), ("quantity", U64))

    product_id: int
    quantity: int


# ============================================================================
# Instruction arguments (vault program)
# ============================================================================


@dataclass
class StakeArgs:
    INSTRUCTION_NAME: ClassVar[str] = "stake"
    LAYOUT: ClassVar[Layout] = (("amount", U64),)

    amount: int


@dataclass
class RequestUnstakeArgs:
    INSTRUCTION_NAME: ClassVar[str] = "request_unstake"
    LAYOUT: ClassVar[Layout] = (("amount", U64),)

    amount: int


# ============================================================================
# Intent parameters
# ============================================================================


@dataclass
class RegisterMerchantParams:
    """Register the fee payer as a merchant and lock its security deposit."""

    name: str
    description: str
    deposit_amount: int
    payment_mint: Optional[Pubkey] = None


@dataclass
class ListProductParams:
    """Create a product and publish it to every search index in one transaction."""

    name: str
    description: str
    price: int
    keywords: Sequence[str]
    inventory: int
    shipping_location: str
    image_video_urls: Sequence[str] = field(default_factory=list)
    sales_regions: Sequence[str] = field(default_factory=list)
    logistics_methods: Sequence[str] = field(default_factory=list)
    payment_token: Optional[Pubkey] = None
    initial_sales: int = 0


@dataclass
class UpdateProductParams:
    """Replace the mutable fields of an existing product."""

    product_id: int
    name: str
    description: str
    price: int
    keywords: Sequence[str]
    inventory: int
    shipping_location: str
    image_video_urls: Sequence[str] = field(default_factory=list)
    sales_regions: Sequence[str] = field(default_factory=list)
    logistics_methods: Sequence[str] = field(default_factory=list)
    payment_token: Optional[Pubkey] = None


@dataclass
class DeleteProductParams:
    product_id: int
    hard_delete: bool = True
    force: bool = False


@dataclass
class PurchaseProductParams:
    """Create an order and move payment into escrow."""

    product_id: int
    merchant: Pubkey
    quantity: int
    shipping_address: str
    notes: str = ""
    payment_mint: Optional[Pubkey] = None


@dataclass
class StakeParams:
    amount: int


@dataclass
class RequestUnstakeParams:
    amount: int


# ============================================================================
# Index resolution
# ============================================================================


@dataclass(frozen=True)
class KeywordShardAddress:
    """Addresses a keyword's root and the shard a product lands in."""

    keyword: str
    root: Pubkey
    shard: Pubkey
    shard_index: int


@dataclass(frozen=True)
class RangeBucket:
    """A numeric index bucket covering ``[low, high)``.

    ``wire_high`` is ``high`` as written into seeds and instruction args; it
    saturates at the field's maximum for the topmost bucket.
    """

    address: Pubkey
    low: int
    high: int
    wire_high: int

    def contains(self, value: int) -> bool:
        return self.low <= value < self.high


# ============================================================================
# Submission
# ============================================================================


@dataclass(frozen=True)
class RecencyToken:
    """A recent blockhash and the last block height at which it is valid."""

    blockhash: Hash
    last_valid_block_height: int


@dataclass(frozen=True)
class SignatureStatus:
    """Snapshot of a submitted transaction's status."""

    slot: int
    confirmation_status: Optional[str]
    err: Optional[str] = None


@dataclass(frozen=True)
class ConfirmationResult:
    """Terminal outcome of one intent."""

    signature: Optional[str]
    finalized: bool
    confirmation_status: Optional[str] = None
    slot: Optional[int] = None
    error_kind: Optional[FailureKind] = None
    error: Optional[FocxError] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def from_error(cls, error: FocxError) -> "ConfirmationResult":
        return cls(
            signature=getattr(error, "signature", None),
            finalized=False,
            error_kind=error.kind,
            error=error,
        )
