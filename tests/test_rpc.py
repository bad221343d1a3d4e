"""Tests for the solana-py backed ledger."""

import asyncio

import pytest
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from focx_sdk import (
    LedgerReadError,
    RecencyFetchTimeoutError,
    RecencyToken,
    RecencyTokenExpiredError,
    RpcLedger,
    SubmissionNetworkError,
    SubmissionRejectedError,
    build_add_product_to_keyword_index_instruction,
)
from focx_sdk.rpc import confirmation_status_name


class MockResponse:
    def __init__(self, value):
        self.value = value


class MockAccount:
    def __init__(self, data):
        self.data = data


class MockBlockhash:
    def __init__(self, blockhash, last_valid_block_height):
        self.blockhash = blockhash
        self.last_valid_block_height = last_valid_block_height


class MockStatus:
    def __init__(self, slot, confirmation_status, err=None):
        self.slot = slot
        self.confirmation_status = confirmation_status
        self.err = err


class MockConnection:
    """Mock Solana connection for testing."""

    def __init__(self):
        self.accounts = {}
        self.blockhash = Hash.new_unique()
        self.blockhash_delay = 0.0
        self.send_error = None
        self.read_error = None
        self.statuses = {}
        self.blockhash_valid = True
        self.sent_opts = []
        self.closed = False

    async def get_account_info(self, pubkey, commitment=None):
        if self.read_error is not None:
            raise self.read_error
        data = self.accounts.get(pubkey)
        return MockResponse(None if data is None else MockAccount(data))

    async def get_latest_blockhash(self, commitment=None):
        if self.blockhash_delay:
            await asyncio.sleep(self.blockhash_delay)
        return MockResponse(MockBlockhash(self.blockhash, 321))

    async def send_raw_transaction(self, txn, opts=None):
        self.sent_opts.append(opts)
        if self.send_error is not None:
            raise self.send_error
        return MockResponse(Transaction.from_bytes(txn).signatures[0])

    async def get_signature_statuses(self, signatures):
        if self.read_error is not None:
            raise self.read_error
        return MockResponse([self.statuses.get(sig) for sig in signatures])

    async def is_blockhash_valid(self, blockhash, commitment=None):
        return MockResponse(self.blockhash_valid)

    async def close(self):
        self.closed = True


def signed_wire() -> bytes:
    payer = Keypair()
    ix = build_add_product_to_keyword_index_instruction(payer.pubkey(), "camera", 1)
    transaction = Transaction.new_signed_with_payer([ix], payer.pubkey(), [payer], Hash.new_unique())
    return bytes(transaction)


@pytest.fixture
def connection():
    return MockConnection()


@pytest.fixture
def rpc_ledger(connection):
    return RpcLedger(connection)


class TestReads:
    @pytest.mark.asyncio
    async def test_existing_account(self, connection, rpc_ledger):
        address = Pubkey.new_unique()
        connection.accounts[address] = b"\x01\x02"
        assert await rpc_ledger.get_account(address) == b"\x01\x02"

    @pytest.mark.asyncio
    async def test_missing_account(self, rpc_ledger):
        assert await rpc_ledger.get_account(Pubkey.new_unique()) is None

    @pytest.mark.asyncio
    async def test_read_failure(self, connection, rpc_ledger):
        connection.read_error = OSError("node unreachable")
        with pytest.raises(LedgerReadError):
            await rpc_ledger.get_account(Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_recent_token(self, connection, rpc_ledger):
        token = await rpc_ledger.get_recent_token(5.0)
        assert token.blockhash == connection.blockhash
        assert token.last_valid_block_height == 321

    @pytest.mark.asyncio
    async def test_recent_token_timeout(self, connection, rpc_ledger):
        connection.blockhash_delay = 1.0
        with pytest.raises(RecencyFetchTimeoutError) as exc_info:
            await rpc_ledger.get_recent_token(0.01)
        assert exc_info.value.timeout_secs == 0.01

    @pytest.mark.asyncio
    async def test_close(self, connection, rpc_ledger):
        await rpc_ledger.close()
        assert connection.closed


class TestSubmission:
    @pytest.mark.asyncio
    async def test_send_returns_signature(self, connection, rpc_ledger):
        wire = signed_wire()
        signature = await rpc_ledger.send_raw_transaction(wire)
        assert signature == Transaction.from_bytes(wire).signatures[0]
        assert connection.sent_opts[0].skip_preflight is False

    @pytest.mark.asyncio
    async def test_blockhash_not_found(self, connection, rpc_ledger):
        connection.send_error = RPCException("Transaction simulation failed: Blockhash not found")
        with pytest.raises(RecencyTokenExpiredError) as exc_info:
            await rpc_ledger.send_raw_transaction(signed_wire())
        assert exc_info.value.signature is not None

    @pytest.mark.asyncio
    async def test_preflight_rejection(self, connection, rpc_ledger):
        connection.send_error = RPCException("custom program error: 0x1770")
        with pytest.raises(SubmissionRejectedError, match="0x1770"):
            await rpc_ledger.send_raw_transaction(signed_wire())

    @pytest.mark.asyncio
    async def test_send_network_failure(self, connection, rpc_ledger):
        connection.send_error = OSError("connection refused")
        with pytest.raises(SubmissionNetworkError):
            await rpc_ledger.send_raw_transaction(signed_wire())

    @pytest.mark.asyncio
    async def test_signature_status(self, connection, rpc_ledger):
        signature = Signature.new_unique()
        connection.statuses[signature] = MockStatus(
            77, TransactionConfirmationStatus.Confirmed
        )

        status = await rpc_ledger.get_signature_status(signature)

        assert status.slot == 77
        assert status.confirmation_status == "confirmed"
        assert status.err is None

    @pytest.mark.asyncio
    async def test_unknown_signature(self, rpc_ledger):
        assert await rpc_ledger.get_signature_status(Signature.new_unique()) is None

    @pytest.mark.asyncio
    async def test_status_poll_failure(self, connection, rpc_ledger):
        connection.read_error = OSError("timed out")
        with pytest.raises(SubmissionNetworkError):
            await rpc_ledger.get_signature_status(Signature.new_unique())

    @pytest.mark.asyncio
    async def test_recency_token_validity(self, connection, rpc_ledger):
        token = RecencyToken(blockhash=connection.blockhash, last_valid_block_height=321)
        assert await rpc_ledger.is_recency_token_valid(token)
        connection.blockhash_valid = False
        assert not await rpc_ledger.is_recency_token_valid(token)


class TestConfirmationStatus:
    @pytest.mark.parametrize(
        "status,name",
        [
            (TransactionConfirmationStatus.Processed, "processed"),
            (TransactionConfirmationStatus.Confirmed, "confirmed"),
            (TransactionConfirmationStatus.Finalized, "finalized"),
        ],
    )
    def test_maps_each_status(self, status, name):
        assert confirmation_status_name(status) == name

    def test_missing_status(self):
        assert confirmation_status_name(None) is None

    @pytest.mark.asyncio
    async def test_finalized_status_reported(self, connection, rpc_ledger):
        signature = Signature.new_unique()
        connection.statuses[signature] = MockStatus(
            90, TransactionConfirmationStatus.Finalized
        )

        status = await rpc_ledger.get_signature_status(signature)

        assert status.confirmation_status == "finalized"
