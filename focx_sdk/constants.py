"""Program ids, PDA seeds and protocol limits for the FOCX marketplace."""

from solders.pubkey import Pubkey

# ============================================================================
# PROGRAM IDS
# ============================================================================

SHOP_PROGRAM_ID = Pubkey.from_string("H2ijJPLXRpj2Vw9mSPUSDU7tFZfqVSWkA5xZEkxdfin7")
VAULT_PROGRAM_ID = Pubkey.from_string("EHiKn3J5wywNG2rHV2Qt74AfNqtJajhPerkVzYXudEwn")

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")

# Devnet USDC; the marketplace settles prices and deposits in this mint.
DEFAULT_PAYMENT_MINT = Pubkey.from_string("4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU")

# ============================================================================
# PDA SEEDS (shop program)
# ============================================================================

SEED_GLOBAL_ID_ROOT = b"global_id_root"
SEED_SYSTEM_CONFIG = b"system_config"
SEED_PAYMENT_CONFIG = b"payment_config"
SEED_MERCHANT_INFO = b"merchant_info"
SEED_MERCHANT_ID = b"merchant_id"
SEED_ID_CHUNK = b"id_chunk"
SEED_DEPOSIT_ESCROW = b"deposit_escrow"
SEED_PRODUCT = b"product"
SEED_PRODUCT_EXTENDED = b"product_extended"
SEED_KEYWORD_ROOT = b"keyword_root"
SEED_KEYWORD_SHARD = b"keyword_shard"
SEED_PRICE_INDEX = b"price_index"
SEED_SALES_INDEX = b"sales_index"
SEED_USER_PURCHASE_COUNT = b"user_purchase_count"
SEED_BUYER_ORDER = b"buyer_order"
SEED_ORDER_STATS = b"order_stats"
SEED_PROGRAM_TOKEN_ACCOUNT = b"program_token_account"
SEED_PROGRAM_AUTHORITY = b"program_authority"

# ============================================================================
# PDA SEEDS (vault program)
# ============================================================================

SEED_VAULT = b"vault"
SEED_VAULT_DEPOSITOR = b"vault_depositor"
SEED_VAULT_TOKEN_ACCOUNT = b"vault_token_account"

VAULT_NAME = "Insurance Fund Vault"
VAULT_NAME_LEN = 32

# ============================================================================
# ADDRESS DERIVATION
# ============================================================================

PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEEDS = 16
MAX_SEED_LEN = 32

# ============================================================================
# ENCODING
# ============================================================================

DISCRIMINATOR_SIZE = 8
PUBKEY_SIZE = 32

MAX_U8 = 2**8 - 1
MAX_U16 = 2**16 - 1
MAX_U32 = 2**32 - 1
MAX_U64 = 2**64 - 1
MIN_I64 = -(2**63)
MAX_I64 = 2**63 - 1

# ============================================================================
# INDEX LAYOUT
# ============================================================================

# Bumped whenever price/sales bucket boundaries or shard partitioning change.
# Index accounts written under one version are unreachable under another.
BUCKET_SCHEME_VERSION = 2

DEFAULT_KEYWORD_SHARD_COUNT = 1
SALES_BUCKET_BASE = 10
FIRST_SALES_BUCKET_HIGH = 10

# Mirrors SystemConfig.max_keywords_per_product on the shop program.
MAX_KEYWORDS_PER_PRODUCT = 10

# ============================================================================
# TRANSACTIONS
# ============================================================================

# Solana packet data size: the serialized transaction ceiling.
PACKET_DATA_SIZE = 1232

DEFAULT_RECENCY_TIMEOUT_SECS = 30.0
DEFAULT_CONFIRMATION_TIMEOUT_SECS = 30.0
DEFAULT_POLL_INTERVAL_SECS = 1.0

# create_order is bundled with its payment, so no prior payment signature
# exists; the program records this marker instead.
ATOMIC_PURCHASE_MARKER = "atomic_purchase_tx"
