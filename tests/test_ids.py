"""Tests for product id prediction."""

import asyncio

import pytest
from solders.pubkey import Pubkey

from focx_sdk import (
    AccountNotFoundError,
    IdAllocator,
    InvalidDiscriminatorError,
    get_merchant_id_pda,
)

from fakes import register_merchant_state


class TestIdAllocator:
    @pytest.mark.asyncio
    async def test_predicts_start_plus_next_available(self, ledger):
        merchant = Pubkey.new_unique()
        chunk = register_merchant_state(ledger, merchant, start_id=10_000, next_available=3)

        prediction = await IdAllocator(ledger).predict(merchant)

        assert prediction.product_id == 10_003
        assert prediction.active_chunk == chunk
        assert prediction.merchant_id_account == get_merchant_id_pda(merchant)[0]

    @pytest.mark.asyncio
    async def test_reads_fresh_state_each_time(self, ledger):
        merchant = Pubkey.new_unique()
        allocator = IdAllocator(ledger)
        register_merchant_state(ledger, merchant, next_available=0)
        assert await allocator.predict_next_id(merchant) == 10_000

        register_merchant_state(ledger, merchant, next_available=1)
        assert await allocator.predict_next_id(merchant) == 10_001

    @pytest.mark.asyncio
    async def test_concurrent_predictions_collide(self, ledger):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant)
        allocator = IdAllocator(ledger)

        first, second = await asyncio.gather(
            allocator.predict_next_id(merchant), allocator.predict_next_id(merchant)
        )

        # predictions are not reservations
        assert first == second

    @pytest.mark.asyncio
    async def test_unregistered_merchant(self, ledger):
        merchant = Pubkey.new_unique()
        with pytest.raises(AccountNotFoundError) as exc_info:
            await IdAllocator(ledger).predict(merchant)
        assert exc_info.value.address == str(get_merchant_id_pda(merchant)[0])

    @pytest.mark.asyncio
    async def test_missing_active_chunk(self, ledger):
        merchant = Pubkey.new_unique()
        chunk = register_merchant_state(ledger, merchant)
        del ledger.accounts[chunk]

        with pytest.raises(AccountNotFoundError) as exc_info:
            await IdAllocator(ledger).predict(merchant)
        assert exc_info.value.address == str(chunk)

    @pytest.mark.asyncio
    async def test_corrupt_merchant_id_account(self, ledger):
        merchant = Pubkey.new_unique()
        ledger.accounts[get_merchant_id_pda(merchant)[0]] = bytes(100)

        with pytest.raises(InvalidDiscriminatorError):
            await IdAllocator(ledger).predict(merchant)

    @pytest.mark.asyncio
    async def test_exhausted_chunk_still_predicts(self, ledger, caplog):
        merchant = Pubkey.new_unique()
        register_merchant_state(ledger, merchant, start_id=10_000, next_available=10_000)

        with caplog.at_level("WARNING", logger="focx_sdk.ids"):
            product_id = await IdAllocator(ledger).predict_next_id(merchant)

        assert product_id == 20_000
        assert "exhausted" in caplog.text
