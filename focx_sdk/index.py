"""Search index addressing: keyword shards and price/sales range buckets.

Buckets are a pure function of the indexed value, so any client can address
an index account without an on-chain lookup table.

Price buckets (u64):
    0           -> [0, 1)
    v >= 1      -> [2^k, 2^(k+1)) where 2^k <= v < 2^(k+1)

Sales buckets (u32):
    0 <= v < 10 -> [0, 10)
    v >= 10     -> [10^k, 10^(k+1)) where 10^k <= v < 10^(k+1)

The topmost bucket of each scheme extends past the field's range; its upper
bound saturates to the field maximum on the wire. Changing either function
moves existing index accounts and requires bumping ``BUCKET_SCHEME_VERSION``.
"""

from typing import Tuple

from solders.pubkey import Pubkey

from .constants import (
    DEFAULT_KEYWORD_SHARD_COUNT,
    FIRST_SALES_BUCKET_HIGH,
    MAX_SEED_LEN,
    MAX_U32,
    MAX_U64,
    SALES_BUCKET_BASE,
    SEED_KEYWORD_ROOT,
    SEED_KEYWORD_SHARD,
    SEED_PRICE_INDEX,
    SEED_SALES_INDEX,
    SHOP_PROGRAM_ID,
)
from .errors import InvalidArgumentError
from .pda import derive_address
from .types import KeywordShardAddress, RangeBucket
from .utils import encode_u32, encode_u64, require_int, sha256


# ============================================================================
# Keywords
# ============================================================================


def keyword_seed(keyword: str) -> bytes:
    """Return the keyword's seed bytes.

    Raises:
        InvalidArgumentError: If the keyword is not a string, is empty or is
            longer than a seed
    """
    if not isinstance(keyword, str):
        raise InvalidArgumentError(f"Keyword must be a string, got {type(keyword).__name__}")
    raw = keyword.encode("utf-8")
    if not raw:
        raise InvalidArgumentError("Keyword must not be empty")
    if len(raw) > MAX_SEED_LEN:
        raise InvalidArgumentError(
            f"Keyword {keyword!r} is {len(raw)} bytes (max {MAX_SEED_LEN})"
        )
    return raw


def keyword_shard_index(keyword: str, shard_count: int = DEFAULT_KEYWORD_SHARD_COUNT) -> int:
    """Stable shard for a keyword: first 4 bytes of sha256(keyword) mod shard_count."""
    if shard_count < 1:
        raise InvalidArgumentError(f"shard_count must be positive, got {shard_count}")
    digest = sha256(keyword_seed(keyword))
    return int.from_bytes(digest[:4], "little") % shard_count


def get_keyword_root_pda(
    keyword: str,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the keyword root PDA.

    Seeds: ["keyword_root", keyword]
    """
    return derive_address([SEED_KEYWORD_ROOT, keyword_seed(keyword)], program_id)


def get_keyword_shard_pda(
    keyword: str,
    shard_index: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive a keyword shard PDA.

    Seeds: ["keyword_shard", keyword, shard_index (u32 LE)]
    """
    return derive_address(
        [SEED_KEYWORD_SHARD, keyword_seed(keyword), encode_u32(shard_index)],
        program_id,
    )


def resolve_keyword_shard(
    keyword: str,
    shard_count: int = DEFAULT_KEYWORD_SHARD_COUNT,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> KeywordShardAddress:
    """Resolve the root and target shard addresses for a keyword."""
    shard_index = keyword_shard_index(keyword, shard_count)
    root, _ = get_keyword_root_pda(keyword, program_id)
    shard, _ = get_keyword_shard_pda(keyword, shard_index, program_id)
    return KeywordShardAddress(keyword=keyword, root=root, shard=shard, shard_index=shard_index)


# ============================================================================
# Price buckets
# ============================================================================


def price_bucket_bounds(price: int) -> Tuple[int, int]:
    """Return ``(low, high)`` for the price bucket containing ``price``."""
    require_int("price", price)
    if not 0 <= price <= MAX_U64:
        raise InvalidArgumentError(f"price out of range: {price}")
    if price == 0:
        return 0, 1
    low = 1 << (price.bit_length() - 1)
    return low, low << 1


def get_price_index_pda(
    low: int,
    high: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive a price index PDA.

    Seeds: ["price_index", low (u64 LE), high (u64 LE)]
    """
    return derive_address(
        [SEED_PRICE_INDEX, encode_u64(low), encode_u64(min(high, MAX_U64))],
        program_id,
    )


def resolve_price_bucket(price: int, program_id: Pubkey = SHOP_PROGRAM_ID) -> RangeBucket:
    """Resolve the price bucket and its index address."""
    low, high = price_bucket_bounds(price)
    address, _ = get_price_index_pda(low, high, program_id)
    return RangeBucket(address=address, low=low, high=high, wire_high=min(high, MAX_U64))


# ============================================================================
# Sales buckets
# ============================================================================


def sales_bucket_bounds(sales: int) -> Tuple[int, int]:
    """Return ``(low, high)`` for the sales bucket containing ``sales``."""
    require_int("sales", sales)
    if not 0 <= sales <= MAX_U32:
        raise InvalidArgumentError(f"sales out of range: {sales}")
    if sales < FIRST_SALES_BUCKET_HIGH:
        return 0, FIRST_SALES_BUCKET_HIGH
    low = FIRST_SALES_BUCKET_HIGH
    while low * SALES_BUCKET_BASE <= sales:
        low *= SALES_BUCKET_BASE
    return low, low * SALES_BUCKET_BASE


def get_sales_index_pda(
    low: int,
    high: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive a sales index PDA.

    Seeds: ["sales_index", low (u32 LE), high (u32 LE)]
    """
    return derive_address(
        [SEED_SALES_INDEX, encode_u32(low), encode_u32(min(high, MAX_U32))],
        program_id,
    )


def resolve_sales_bucket(sales: int, program_id: Pubkey = SHOP_PROGRAM_ID) -> RangeBucket:
    """Resolve the sales bucket and its index address."""
    low, high = sales_bucket_bounds(sales)
    address, _ = get_sales_index_pda(low, high, program_id)
    return RangeBucket(address=address, low=low, high=high, wire_high=min(high, MAX_U32))
