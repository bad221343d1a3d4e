"""Account deserialization for the FOCX SDK.

All accounts use the Anchor layout: an 8-byte discriminator
(``sha256("account:<Name>")[:8]``) followed by the Borsh-encoded fields.
"""

from typing import Type, TypeVar

from .codec import decode_account
from .types import (
    IdChunk,
    KeywordRoot,
    KeywordShard,
    MerchantIdAccount,
    PriceIndexNode,
    SalesIndexNode,
    UserPurchaseCount,
)

T = TypeVar("T")


def _deserialize(cls: Type[T], data: bytes) -> T:
    return decode_account(cls.ACCOUNT_NAME, cls, bytes(data))  # type: ignore[attr-defined]


def deserialize_id_chunk(data: bytes) -> IdChunk:
    """Deserialize an IdChunk account.

    Layout:
    - [0..8]: discriminator
    - merchant_id (u32), chunk_index (u32)
    - start_id, end_id, next_available (u64)
    - bitmap (vec<u8>)
    - bump (u8)
    """
    return _deserialize(IdChunk, data)


def deserialize_merchant_id_account(data: bytes) -> MerchantIdAccount:
    """Deserialize a MerchantIdAccount.

    Layout:
    - [0..8]: discriminator
    - merchant_id (u32), last_chunk_index (u32), last_local_id (u64)
    - active_chunk (Pubkey)
    - unused_chunks (vec<Pubkey>)
    - bump (u8)
    """
    return _deserialize(MerchantIdAccount, data)


def deserialize_keyword_root(data: bytes) -> KeywordRoot:
    """Deserialize a KeywordRoot account."""
    return _deserialize(KeywordRoot, data)


def deserialize_keyword_shard(data: bytes) -> KeywordShard:
    """Deserialize a KeywordShard account."""
    return _deserialize(KeywordShard, data)


def deserialize_price_index(data: bytes) -> PriceIndexNode:
    """Deserialize a PriceIndexNode account."""
    return _deserialize(PriceIndexNode, data)


def deserialize_sales_index(data: bytes) -> SalesIndexNode:
    """Deserialize a SalesIndexNode account."""
    return _deserialize(SalesIndexNode, data)


def deserialize_user_purchase_count(data: bytes) -> UserPurchaseCount:
    """Deserialize a UserPurchaseCount account."""
    return _deserialize(UserPurchaseCount, data)
