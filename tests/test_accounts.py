"""Tests for account deserialization."""

import pytest
from solders.pubkey import Pubkey

from focx_sdk import (
    IdChunk,
    InvalidAccountDataError,
    InvalidDiscriminatorError,
    PriceIndexNode,
    ProductSales,
    SalesIndexNode,
    UserPurchaseCount,
    deserialize_id_chunk,
    deserialize_keyword_root,
    deserialize_price_index,
    deserialize_sales_index,
    deserialize_user_purchase_count,
)
from focx_sdk.types import KeywordRoot

from fakes import account_bytes


def make_id_chunk() -> IdChunk:
    return IdChunk(
        merchant_id=1,
        chunk_index=2,
        start_id=10_000,
        end_id=19_999,
        next_available=5,
        bitmap=bytes([0b11111]) + bytes(15),
        bump=254,
    )


class TestDeserializeIdChunk:
    def test_valid(self):
        chunk = make_id_chunk()
        assert deserialize_id_chunk(account_bytes(chunk)) == chunk

    def test_trailing_padding_allowed(self):
        chunk = make_id_chunk()
        assert deserialize_id_chunk(account_bytes(chunk) + bytes(64)) == chunk

    def test_invalid_discriminator(self):
        data = bytearray(account_bytes(make_id_chunk()))
        data[0] ^= 0xFF
        with pytest.raises(InvalidDiscriminatorError):
            deserialize_id_chunk(bytes(data))

    def test_wrong_account_type(self):
        counter = UserPurchaseCount(
            buyer=Pubkey.new_unique(), purchase_count=1, created_at=0, updated_at=0, bump=1
        )
        with pytest.raises(InvalidDiscriminatorError):
            deserialize_id_chunk(account_bytes(counter))

    def test_too_short(self):
        with pytest.raises(InvalidAccountDataError):
            deserialize_id_chunk(b"\x00" * 4)

    def test_truncated_body(self):
        data = account_bytes(make_id_chunk())
        with pytest.raises(InvalidAccountDataError):
            deserialize_id_chunk(data[:20])

    def test_discriminator_error_shows_hex(self):
        data = b"\x01" * 8 + bytes(64)
        with pytest.raises(InvalidDiscriminatorError, match="0101010101010101"):
            deserialize_id_chunk(data)


class TestDeserializeKeywordRoot:
    def test_valid(self):
        root = KeywordRoot(
            keyword="iphone",
            total_shards=1,
            first_shard=Pubkey.new_unique(),
            last_shard=Pubkey.new_unique(),
            total_products=12,
            bloom_filter=bytes(256),
            bump=255,
        )
        assert deserialize_keyword_root(account_bytes(root)) == root

    def test_invalid_utf8_keyword(self):
        root = KeywordRoot(
            keyword="ab",
            total_shards=1,
            first_shard=Pubkey.default(),
            last_shard=Pubkey.default(),
            total_products=0,
            bloom_filter=bytes(256),
            bump=255,
        )
        data = bytearray(account_bytes(root))
        data[12] = 0xFF
        with pytest.raises(InvalidAccountDataError, match="utf-8"):
            deserialize_keyword_root(bytes(data))


class TestDeserializeIndexNodes:
    def test_price_index(self):
        node = PriceIndexNode(
            price_range_start=512,
            price_range_end=1024,
            product_ids=[10_000, 10_004],
            left_child=None,
            right_child=Pubkey.new_unique(),
            parent=None,
            height=1,
            bump=250,
        )
        assert deserialize_price_index(account_bytes(node)) == node

    def test_sales_index_with_top_items(self):
        node = SalesIndexNode(
            sales_range_start=10,
            sales_range_end=100,
            product_ids=[10_000],
            top_items=[
                ProductSales(
                    product_id=10_000,
                    merchant=Pubkey.new_unique(),
                    name="Vintage Camera",
                    price=1_000,
                    sales=42,
                    last_update=1_700_000_000,
                )
            ],
            left_child=None,
            right_child=None,
            parent=None,
            height=0,
            bump=249,
        )
        assert deserialize_sales_index(account_bytes(node)) == node

    def test_bad_option_tag(self):
        node = PriceIndexNode(
            price_range_start=0,
            price_range_end=1,
            product_ids=[],
            left_child=None,
            right_child=None,
            parent=None,
            height=0,
            bump=1,
        )
        data = bytearray(account_bytes(node))
        # discriminator (8) + two u64 (16) + empty vec prefix (4)
        data[28] = 2
        with pytest.raises(InvalidAccountDataError, match="option tag"):
            deserialize_price_index(bytes(data))


class TestDeserializeUserPurchaseCount:
    def test_valid(self):
        counter = UserPurchaseCount(
            buyer=Pubkey.new_unique(),
            purchase_count=3,
            created_at=1_700_000_000,
            updated_at=1_700_000_500,
            bump=253,
        )
        assert deserialize_user_purchase_count(account_bytes(counter)) == counter
