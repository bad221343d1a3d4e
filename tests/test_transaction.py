"""Tests for atomic transaction assembly and the pre-flight size check."""

import pytest
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.signature import Signature

from focx_sdk import (
    PACKET_DATA_SIZE,
    InvalidArgumentError,
    IntentKind,
    ListProductParams,
    MarketplaceClient,
    RecencyToken,
    TooManyInstructionsError,
    TransactionBuilder,
    build_add_product_to_keyword_index_instruction,
    instruction_discriminator,
)

from fakes import register_merchant_state


def listing(keywords) -> ListProductParams:
    return ListProductParams(
        name="Vintage Camera",
        description="Film camera, 1978",
        price=1_000,
        keywords=keywords,
        inventory=5,
        shipping_location="Lisbon",
        initial_sales=42,
    )


def token() -> RecencyToken:
    return RecencyToken(blockhash=Hash.new_unique(), last_valid_block_height=500)


class TestTransactionBuilder:
    def test_preserves_instruction_order(self):
        merchant = Pubkey.new_unique()
        instructions = [
            build_add_product_to_keyword_index_instruction(merchant, kw, 10_000)
            for kw in ("zebra", "apple", "mango")
        ]

        built = TransactionBuilder().build(instructions, merchant, token())

        assert list(built.instructions) == instructions
        compiled = [bytes(ix.data) for ix in built.message.instructions]
        assert compiled == [bytes(ix.data) for ix in instructions]

    def test_fee_payer_and_blockhash(self):
        merchant = Pubkey.new_unique()
        recency = token()
        ix = build_add_product_to_keyword_index_instruction(merchant, "camera", 1)

        built = TransactionBuilder().build([ix], merchant, recency)

        assert built.message.account_keys[0] == merchant
        assert built.message.recent_blockhash == recency.blockhash
        assert built.recency_token == recency
        assert built.transaction.signatures == [Signature.default()]

    def test_size_reported(self):
        merchant = Pubkey.new_unique()
        ix = build_add_product_to_keyword_index_instruction(merchant, "camera", 1)
        builder = TransactionBuilder()

        built = builder.build([ix], merchant, token())

        assert built.size == builder.preflight([ix], merchant)
        assert built.size <= PACKET_DATA_SIZE

    def test_oversized_bundle_rejected(self):
        merchant = Pubkey.new_unique()
        instructions = [
            build_add_product_to_keyword_index_instruction(merchant, f"kw{i}", 10_000)
            for i in range(60)
        ]

        with pytest.raises(TooManyInstructionsError) as exc_info:
            TransactionBuilder().preflight(instructions, merchant)

        assert exc_info.value.size > PACKET_DATA_SIZE
        assert exc_info.value.limit == PACKET_DATA_SIZE

    def test_custom_size_limit(self):
        merchant = Pubkey.new_unique()
        ix = build_add_product_to_keyword_index_instruction(merchant, "camera", 1)
        with pytest.raises(TooManyInstructionsError):
            TransactionBuilder(max_size=100).build([ix], merchant, token())

    def test_empty_bundle_rejected(self):
        with pytest.raises(InvalidArgumentError):
            TransactionBuilder().preflight([], Pubkey.new_unique())

    def test_second_signer_rejected(self):
        payer, other = Pubkey.new_unique(), Pubkey.new_unique()
        ix = Instruction(
            Pubkey.new_unique(),
            b"\x00",
            [
                AccountMeta(payer, is_signer=True, is_writable=True),
                AccountMeta(other, is_signer=True, is_writable=False),
            ],
        )
        with pytest.raises(InvalidArgumentError, match="signers"):
            TransactionBuilder().preflight([ix], payer)


class TestListProductBundle:
    @pytest.mark.asyncio
    async def test_canonical_order(self, ledger):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant)
        client = MarketplaceClient(ledger)

        built = await client.build_transaction(
            IntentKind.LIST_PRODUCT, listing(["camera", "vintage"]), merchant
        )

        names = [
            "create_product_base",
            "create_product_extended",
            "add_product_to_keyword_index",
            "add_product_to_keyword_index",
            "add_product_to_price_index",
            "add_product_to_sales_index",
        ]
        assert [bytes(ix.data[:8]) for ix in built.instructions] == [
            instruction_discriminator(name) for name in names
        ]
        assert built.size <= PACKET_DATA_SIZE

    @pytest.mark.asyncio
    async def test_blockhash_fetched_last(self, ledger):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant)

        await MarketplaceClient(ledger).build_transaction(
            IntentKind.LIST_PRODUCT, listing(["camera"]), merchant
        )

        assert ledger.calls[-1] == "get_recent_token"
        assert ledger.calls.count("get_recent_token") == 1

    @pytest.mark.asyncio
    async def test_too_many_keywords_never_reaches_network(self, ledger):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant)
        keywords = [f"keyword{i}" for i in range(60)]

        with pytest.raises(TooManyInstructionsError):
            await MarketplaceClient(ledger).build_transaction(
                IntentKind.LIST_PRODUCT, listing(keywords), merchant
            )

        assert ledger.network_calls == 0

    @pytest.mark.asyncio
    async def test_size_ceiling_checked_before_network(self, ledger):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant)
        keywords = [f"keyword{i}" for i in range(8)]

        with pytest.raises(TooManyInstructionsError) as exc_info:
            await MarketplaceClient(ledger).build_transaction(
                IntentKind.LIST_PRODUCT, listing(keywords), merchant
            )

        assert exc_info.value.size > PACKET_DATA_SIZE
        assert ledger.network_calls == 0

    @pytest.mark.asyncio
    async def test_six_short_keywords_exceed_packet_size(self, ledger):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant)

        with pytest.raises(TooManyInstructionsError) as exc_info:
            await MarketplaceClient(ledger).build_transaction(
                IntentKind.LIST_PRODUCT, listing(["a", "b", "c", "d", "e", "f"]), merchant
            )

        assert exc_info.value.size > PACKET_DATA_SIZE
        assert ledger.network_calls == 0

    @pytest.mark.asyncio
    async def test_invalid_keyword_never_reaches_network(self, ledger):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant)

        with pytest.raises(InvalidArgumentError):
            await MarketplaceClient(ledger).build_transaction(
                IntentKind.LIST_PRODUCT, listing(["camera", "camera"]), merchant
            )

        assert ledger.network_calls == 0
