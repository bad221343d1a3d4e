"""Tests for instruction and account encoding."""

import hashlib

import pytest
from borsh_construct import Bool, Bytes, CStruct, I64, Option, String, U32, U64, U8, Vec
from solders.pubkey import Pubkey

from focx_sdk import (
    InvalidAccountDataError,
    InvalidArgumentError,
    InvalidDiscriminatorError,
    account_discriminator,
    decode_instruction,
    encode_instruction,
    instruction_discriminator,
)
from focx_sdk.codec import encode_struct
from focx_sdk.types import (
    AddProductToPriceIndexArgs,
    CreateOrderArgs,
    CreateProductBaseArgs,
    DeleteProductArgs,
    IdChunk,
    KeywordShard,
    MerchantIdAccount,
    UpdateProductArgs,
    UserPurchaseCount,
)

PUBKEY = U8[32]

CREATE_PRODUCT_BASE = CStruct(
    "name" / String,
    "description" / String,
    "price" / U64,
    "keywords" / Vec(String),
    "inventory" / U64,
    "payment_token" / PUBKEY,
    "shipping_location" / String,
)

CREATE_ORDER = CStruct(
    "product_id" / U64,
    "quantity" / U32,
    "shipping_address" / String,
    "notes" / String,
    "transaction_signature" / String,
)

DELETE_PRODUCT = CStruct("product_id" / U64, "hard_delete" / Bool, "force" / Bool)

MERCHANT_ID_ACCOUNT = CStruct(
    "merchant_id" / U32,
    "last_chunk_index" / U32,
    "last_local_id" / U64,
    "active_chunk" / PUBKEY,
    "unused_chunks" / Vec(PUBKEY),
    "bump" / U8,
)

KEYWORD_SHARD = CStruct(
    "keyword" / String,
    "shard_index" / U32,
    "prev_shard" / PUBKEY,
    "next_shard" / Option(PUBKEY),
    "product_ids" / Vec(U64),
    "min_id" / U64,
    "max_id" / U64,
    "bloom_summary" / U8[32],
    "bump" / U8,
)


def sample_base_args() -> CreateProductBaseArgs:
    return CreateProductBaseArgs(
        name="Vintage Camera",
        description="Film camera, 1978",
        price=1_000_000,
        keywords=["camera", "vintage"],
        inventory=5,
        payment_token=Pubkey.new_unique(),
        shipping_location="Lisbon",
    )


class TestDiscriminators:
    @pytest.mark.parametrize(
        "name",
        ["create_product_base", "add_product_to_keyword_index", "purchase_product_escrow", "stake"],
    )
    def test_instruction_discriminator(self, name):
        expected = hashlib.sha256(f"global:{name}".encode()).digest()[:8]
        assert instruction_discriminator(name) == expected

    @pytest.mark.parametrize("name", ["IdChunk", "MerchantIdAccount", "KeywordShard"])
    def test_account_discriminator(self, name):
        expected = hashlib.sha256(f"account:{name}".encode()).digest()[:8]
        assert account_discriminator(name) == expected

    def test_instruction_and_account_namespaces_differ(self):
        assert instruction_discriminator("stake") != account_discriminator("stake")


class TestInstructionEncoding:
    def test_payload_starts_with_discriminator(self):
        args = sample_base_args()
        data = encode_instruction(args.INSTRUCTION_NAME, args)
        assert data[:8] == instruction_discriminator("create_product_base")

    def test_create_product_base_matches_borsh(self):
        args = sample_base_args()
        data = encode_instruction(args.INSTRUCTION_NAME, args)
        parsed = CREATE_PRODUCT_BASE.parse(data[8:])
        assert parsed.name == "Vintage Camera"
        assert parsed.price == 1_000_000
        assert list(parsed.keywords) == ["camera", "vintage"]
        assert bytes(parsed.payment_token) == bytes(args.payment_token)
        assert parsed.shipping_location == "Lisbon"
        assert CREATE_PRODUCT_BASE.build(parsed) == data[8:]

    def test_create_order_matches_borsh(self):
        args = CreateOrderArgs(
            product_id=10_001,
            quantity=2,
            shipping_address="Rua Augusta 1",
            notes="",
            transaction_signature="atomic_purchase_tx",
        )
        body = encode_struct(args)
        expected = CREATE_ORDER.build(
            {
                "product_id": 10_001,
                "quantity": 2,
                "shipping_address": "Rua Augusta 1",
                "notes": "",
                "transaction_signature": "atomic_purchase_tx",
            }
        )
        assert body == expected

    def test_booleans_are_single_bytes(self):
        body = encode_struct(DeleteProductArgs(product_id=3, hard_delete=True, force=False))
        assert body == DELETE_PRODUCT.build({"product_id": 3, "hard_delete": True, "force": False})
        assert body[-2:] == b"\x01\x00"

    def test_decode_instruction(self):
        args = sample_base_args()
        data = encode_instruction(args.INSTRUCTION_NAME, args)
        assert decode_instruction(args.INSTRUCTION_NAME, CreateProductBaseArgs, data) == args

    def test_decode_rejects_other_instruction(self):
        args = sample_base_args()
        data = encode_instruction(args.INSTRUCTION_NAME, args)
        with pytest.raises(InvalidDiscriminatorError):
            decode_instruction("update_product", UpdateProductArgs, data)

    def test_decode_rejects_trailing_bytes(self):
        args = DeleteProductArgs(product_id=3, hard_delete=False, force=False)
        data = encode_instruction(args.INSTRUCTION_NAME, args) + b"\x00"
        with pytest.raises(InvalidAccountDataError):
            decode_instruction(args.INSTRUCTION_NAME, DeleteProductArgs, data)

    def test_decode_rejects_truncated_payload(self):
        args = sample_base_args()
        data = encode_instruction(args.INSTRUCTION_NAME, args)[:-3]
        with pytest.raises(InvalidAccountDataError):
            decode_instruction(args.INSTRUCTION_NAME, CreateProductBaseArgs, data)

    def test_no_argument_instruction(self):
        assert encode_instruction("unstake") == instruction_discriminator("unstake")


class TestEncodingErrors:
    def test_u64_overflow(self):
        args = AddProductToPriceIndexArgs(
            product_id=1, price=2**64, price_range_start=0, price_range_end=1
        )
        with pytest.raises(InvalidArgumentError, match="price"):
            encode_struct(args)

    def test_negative_integer(self):
        with pytest.raises(InvalidArgumentError):
            encode_struct(DeleteProductArgs(product_id=-1, hard_delete=False, force=False))

    def test_string_field_rejects_bytes(self):
        args = sample_base_args()
        args.name = b"raw"
        with pytest.raises(InvalidArgumentError, match="name"):
            encode_struct(args)

    def test_vec_field_rejects_plain_string(self):
        args = sample_base_args()
        args.keywords = "camera"
        with pytest.raises(InvalidArgumentError, match="keywords"):
            encode_struct(args)

    def test_integer_field_rejects_bool(self):
        args = sample_base_args()
        args.price = True
        with pytest.raises(InvalidArgumentError):
            encode_struct(args)


class TestAccountEncoding:
    def test_merchant_id_account_matches_borsh(self):
        chunk = Pubkey.new_unique()
        spare = Pubkey.new_unique()
        account = MerchantIdAccount(
            merchant_id=7,
            last_chunk_index=1,
            last_local_id=12,
            active_chunk=chunk,
            unused_chunks=[spare],
            bump=250,
        )
        parsed = MERCHANT_ID_ACCOUNT.parse(encode_struct(account))
        assert parsed.merchant_id == 7
        assert parsed.last_local_id == 12
        assert bytes(parsed.active_chunk) == bytes(chunk)
        assert [bytes(key) for key in parsed.unused_chunks] == [bytes(spare)]
        assert parsed.bump == 250

    def test_keyword_shard_option_field(self):
        shard = KeywordShard(
            keyword="iphone",
            shard_index=0,
            prev_shard=Pubkey.default(),
            next_shard=None,
            product_ids=[10_000, 10_001],
            min_id=10_000,
            max_id=10_001,
            bloom_summary=bytes(32),
            bump=255,
        )
        parsed = KEYWORD_SHARD.parse(encode_struct(shard))
        assert parsed.next_shard is None
        assert list(parsed.product_ids) == [10_000, 10_001]

    def test_id_chunk_matches_borsh(self):
        reference = CStruct(
            "merchant_id" / U32,
            "chunk_index" / U32,
            "start_id" / U64,
            "end_id" / U64,
            "next_available" / U64,
            "bitmap" / Bytes,
            "bump" / U8,
        )
        chunk = IdChunk(
            merchant_id=7,
            chunk_index=0,
            start_id=10_000,
            end_id=19_999,
            next_available=3,
            bitmap=b"\x07\x00",
            bump=253,
        )
        expected = reference.build(
            {
                "merchant_id": 7,
                "chunk_index": 0,
                "start_id": 10_000,
                "end_id": 19_999,
                "next_available": 3,
                "bitmap": b"\x07\x00",
                "bump": 253,
            }
        )
        assert encode_struct(chunk) == expected

    def test_signed_timestamps(self):
        reference = CStruct(
            "buyer" / PUBKEY,
            "purchase_count" / U64,
            "created_at" / I64,
            "updated_at" / I64,
            "bump" / U8,
        )
        counter = UserPurchaseCount(
            buyer=Pubkey.new_unique(),
            purchase_count=4,
            created_at=-5,
            updated_at=1_700_000_000,
            bump=1,
        )
        parsed = reference.parse(encode_struct(counter))
        assert parsed.created_at == -5
        assert parsed.updated_at == 1_700_000_000
