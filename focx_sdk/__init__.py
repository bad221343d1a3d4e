"""FOCX SDK - Python client core for the FOCX marketplace on Solana.

Derives program addresses, encodes instructions, bundles them into atomic
transactions, hands them to an external signer and confirms submission.

Example:
    from focx_sdk import IntentKind, KeypairSigner, ListProductParams, MarketplaceClient

    client = MarketplaceClient.from_config()
    async for result in client.build_and_submit(
        IntentKind.LIST_PRODUCT, params, signer.pubkey, signer
    ):
        ...
"""

__version__ = "0.1.0"

# ============================================================================
# CLIENT
# ============================================================================

from .client import MarketplaceClient
from .config import NetworkConfig, RPC_URLS

# ============================================================================
# ADDRESS DERIVATION
# ============================================================================

from .pda import (
    create_program_address,
    derive_address,
    get_associated_token_address,
    get_deposit_escrow_pda,
    get_global_id_root_pda,
    get_initial_id_chunk_pda,
    get_merchant_id_pda,
    get_merchant_info_pda,
    get_order_pda,
    get_order_stats_pda,
    get_payment_config_pda,
    get_product_extended_pda,
    get_product_pda,
    get_program_authority_pda,
    get_program_token_account_pda,
    get_system_config_pda,
    get_user_purchase_count_pda,
    get_vault_depositor_pda,
    get_vault_pda,
    get_vault_token_account_pda,
)

# ============================================================================
# INDEX RESOLUTION
# ============================================================================

from .index import (
    get_keyword_root_pda,
    get_keyword_shard_pda,
    get_price_index_pda,
    get_sales_index_pda,
    keyword_shard_index,
    price_bucket_bounds,
    resolve_keyword_shard,
    resolve_price_bucket,
    resolve_sales_bucket,
    sales_bucket_bounds,
)

# ============================================================================
# ENCODING
# ============================================================================

from .codec import (
    account_discriminator,
    decode_instruction,
    encode_instruction,
    instruction_discriminator,
)
from .accounts import (
    deserialize_id_chunk,
    deserialize_keyword_root,
    deserialize_keyword_shard,
    deserialize_merchant_id_account,
    deserialize_price_index,
    deserialize_sales_index,
    deserialize_user_purchase_count,
)
from .instructions import (
    build_add_product_to_keyword_index_instruction,
    build_add_product_to_price_index_instruction,
    build_add_product_to_sales_index_instruction,
    build_create_order_instruction,
    build_create_product_base_instruction,
    build_create_product_extended_instruction,
    build_delete_product_instruction,
    build_deposit_merchant_deposit_instruction,
    build_initialize_vault_depositor_instruction,
    build_purchase_product_escrow_instruction,
    build_register_merchant_instruction,
    build_request_unstake_instruction,
    build_stake_instruction,
    build_unstake_instruction,
    build_update_product_instruction,
)

# ============================================================================
# TRANSACTIONS
# ============================================================================

from .ids import IdAllocator, IdPrediction
from .transaction import BuiltTransaction, TransactionBuilder
from .signing import KeypairSigner, SignedTransaction, SigningGateway
from .submission import SubmissionConfirmer
from .rpc import RpcLedger
from .ports import LedgerReader, RecencyTokenSource, Signer, TransactionSubmitter

# ============================================================================
# TYPES
# ============================================================================

from .types import (
    ConfirmationResult,
    DeleteProductParams,
    IdChunk,
    IntentKind,
    KeywordRoot,
    KeywordShard,
    KeywordShardAddress,
    ListProductParams,
    MerchantIdAccount,
    PriceIndexNode,
    ProductSales,
    PurchaseProductParams,
    RangeBucket,
    RecencyToken,
    RegisterMerchantParams,
    RequestUnstakeParams,
    SalesIndexNode,
    SignatureStatus,
    StakeParams,
    UpdateProductParams,
    UserPurchaseCount,
)

# ============================================================================
# ERRORS
# ============================================================================

from .errors import (
    AccountNotFoundError,
    AlreadySubmittedError,
    ConfigError,
    DerivationExhaustedError,
    DerivationFailure,
    ErrorCategory,
    FailureKind,
    FocxError,
    InvalidAccountDataError,
    InvalidArgumentError,
    InvalidDiscriminatorError,
    InvalidSeedError,
    LedgerReadError,
    RecencyFetchTimeoutError,
    RecencyTokenExpiredError,
    SignerError,
    SignerUnavailableError,
    SigningFailure,
    SigningRejectedError,
    SubmissionFailure,
    SubmissionNetworkError,
    SubmissionRejectedError,
    SubmissionUnconfirmedError,
    TooManyInstructionsError,
)

# ============================================================================
# CONSTANTS
# ============================================================================

from .constants import (
    BUCKET_SCHEME_VERSION,
    DEFAULT_PAYMENT_MINT,
    MAX_KEYWORDS_PER_PRODUCT,
    PACKET_DATA_SIZE,
    SHOP_PROGRAM_ID,
    VAULT_PROGRAM_ID,
)

__all__ = [
    "__version__",
    # Client
    "MarketplaceClient",
    "NetworkConfig",
    "RPC_URLS",
    # Address Derivation
    "create_program_address",
    "derive_address",
    "get_associated_token_address",
    "get_deposit_escrow_pda",
    "get_global_id_root_pda",
    "get_initial_id_chunk_pda",
    "get_merchant_id_pda",
    "get_merchant_info_pda",
    "get_order_pda",
    "get_order_stats_pda",
    "get_payment_config_pda",
    "get_product_extended_pda",
    "get_product_pda",
    "get_program_authority_pda",
    "get_program_token_account_pda",
    "get_system_config_pda",
    "get_user_purchase_count_pda",
    "get_vault_depositor_pda",
    "get_vault_pda",
    "get_vault_token_account_pda",
    # Index Resolution
    "get_keyword_root_pda",
    "get_keyword_shard_pda",
    "get_price_index_pda",
    "get_sales_index_pda",
    "keyword_shard_index",
    "price_bucket_bounds",
    "resolve_keyword_shard",
    "resolve_price_bucket",
    "resolve_sales_bucket",
    "sales_bucket_bounds",
    # Encoding
    "account_discriminator",
    "decode_instruction",
    "encode_instruction",
    "instruction_discriminator",
    "deserialize_id_chunk",
    "deserialize_keyword_root",
    "deserialize_keyword_shard",
    "deserialize_merchant_id_account",
    "deserialize_price_index",
    "deserialize_sales_index",
    "deserialize_user_purchase_count",
    "build_add_product_to_keyword_index_instruction",
    "build_add_product_to_price_index_instruction",
    "build_add_product_to_sales_index_instruction",
    "build_create_order_instruction",
    "build_create_product_base_instruction",
    "build_create_product_extended_instruction",
    "build_delete_product_instruction",
    "build_deposit_merchant_deposit_instruction",
    "build_initialize_vault_depositor_instruction",
    "build_purchase_product_escrow_instruction",
    "build_register_merchant_instruction",
    "build_request_unstake_instruction",
    "build_stake_instruction",
    "build_unstake_instruction",
    "build_update_product_instruction",
    # Transactions
    "IdAllocator",
    "IdPrediction",
    "BuiltTransaction",
    "TransactionBuilder",
    "KeypairSigner",
    "SignedTransaction",
    "SigningGateway",
    "SubmissionConfirmer",
    "RpcLedger",
    "LedgerReader",
    "RecencyTokenSource",
    "Signer",
    "TransactionSubmitter",
    # Types
    "ConfirmationResult",
    "DeleteProductParams",
    "IdChunk",
    "IntentKind",
    "KeywordRoot",
    "KeywordShard",
    "KeywordShardAddress",
    "ListProductParams",
    "MerchantIdAccount",
    "PriceIndexNode",
    "ProductSales",
    "PurchaseProductParams",
    "RangeBucket",
    "RecencyToken",
    "RegisterMerchantParams",
    "RequestUnstakeParams",
    "SalesIndexNode",
    "SignatureStatus",
    "StakeParams",
    "UpdateProductParams",
    "UserPurchaseCount",
    # Errors
    "AccountNotFoundError",
    "AlreadySubmittedError",
    "ConfigError",
    "DerivationExhaustedError",
    "DerivationFailure",
    "ErrorCategory",
    "FailureKind",
    "FocxError",
    "InvalidAccountDataError",
    "InvalidArgumentError",
    "InvalidDiscriminatorError",
    "InvalidSeedError",
    "LedgerReadError",
    "RecencyFetchTimeoutError",
    "RecencyTokenExpiredError",
    "SignerError",
    "SignerUnavailableError",
    "SigningFailure",
    "SigningRejectedError",
    "SubmissionFailure",
    "SubmissionNetworkError",
    "SubmissionRejectedError",
    "SubmissionUnconfirmedError",
    "TooManyInstructionsError",
    # Constants
    "BUCKET_SCHEME_VERSION",
    "DEFAULT_PAYMENT_MINT",
    "MAX_KEYWORDS_PER_PRODUCT",
    "PACKET_DATA_SIZE",
    "SHOP_PROGRAM_ID",
    "VAULT_PROGRAM_ID",
]
