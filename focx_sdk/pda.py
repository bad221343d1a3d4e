"""PDA (Program Derived Address) derivation functions for the FOCX SDK."""

from typing import Sequence, Tuple

from solders.pubkey import Pubkey

from .constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    MAX_SEED_LEN,
    MAX_SEEDS,
    PDA_MARKER,
    SEED_BUYER_ORDER,
    SEED_DEPOSIT_ESCROW,
    SEED_GLOBAL_ID_ROOT,
    SEED_ID_CHUNK,
    SEED_MERCHANT_ID,
    SEED_MERCHANT_INFO,
    SEED_ORDER_STATS,
    SEED_PAYMENT_CONFIG,
    SEED_PRODUCT,
    SEED_PRODUCT_EXTENDED,
    SEED_PROGRAM_AUTHORITY,
    SEED_PROGRAM_TOKEN_ACCOUNT,
    SEED_SYSTEM_CONFIG,
    SEED_USER_PURCHASE_COUNT,
    SEED_VAULT,
    SEED_VAULT_DEPOSITOR,
    SEED_VAULT_TOKEN_ACCOUNT,
    SHOP_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    VAULT_NAME,
    VAULT_NAME_LEN,
    VAULT_PROGRAM_ID,
)
from .errors import DerivationExhaustedError, InvalidSeedError
from .utils import encode_u64, encode_u8, pad_seed_string, sha256


def _validate_seeds(seeds: Sequence[bytes], max_seeds: int) -> None:
    if len(seeds) > max_seeds:
        raise InvalidSeedError(f"{len(seeds)} seeds exceeds the limit of {max_seeds}")
    for i, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LEN:
            raise InvalidSeedError(f"seed {i} is {len(seed)} bytes (max {MAX_SEED_LEN})")


def _hash_seeds(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    return Pubkey.from_bytes(sha256(b"".join(seeds) + bytes(program_id) + PDA_MARKER))


def create_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    """Hash seeds with the program id and reject on-curve results.

    address = sha256(seed_0 || ... || seed_n || program_id || "ProgramDerivedAddress")

    Raises:
        InvalidSeedError: If the seeds break the runtime limits or the hash
            lands on the ed25519 curve.
    """
    seeds = [bytes(seed) for seed in seeds]
    _validate_seeds(seeds, MAX_SEEDS)
    address = _hash_seeds(seeds, program_id)
    if address.is_on_curve():
        raise InvalidSeedError("derived address lies on the ed25519 curve")
    return address


def derive_address(seeds: Sequence[bytes], program_id: Pubkey) -> Tuple[Pubkey, int]:
    """Find the canonical (address, bump) pair for a seed list.

    Tries bump seeds from 255 down to 0 and returns the first off-curve
    address. The bump occupies one seed slot, so at most 15 caller seeds
    are accepted.

    Raises:
        InvalidSeedError: If the seed list is malformed
        DerivationExhaustedError: If no bump yields an off-curve address
    """
    seeds = [bytes(seed) for seed in seeds]
    _validate_seeds(seeds, MAX_SEEDS - 1)

    for bump in range(255, -1, -1):
        address = _hash_seeds(seeds + [bytes([bump])], program_id)
        if not address.is_on_curve():
            return address, bump
    raise DerivationExhaustedError(str(program_id))


# ============================================================================
# Shop program
# ============================================================================


def get_global_id_root_pda(program_id: Pubkey = SHOP_PROGRAM_ID) -> Tuple[Pubkey, int]:
    """Derive the global id root PDA.

    Seeds: ["global_id_root"]
    """
    return derive_address([SEED_GLOBAL_ID_ROOT], program_id)


def get_system_config_pda(program_id: Pubkey = SHOP_PROGRAM_ID) -> Tuple[Pubkey, int]:
    """Derive the system config PDA.

    Seeds: ["system_config"]
    """
    return derive_address([SEED_SYSTEM_CONFIG], program_id)


def get_payment_config_pda(program_id: Pubkey = SHOP_PROGRAM_ID) -> Tuple[Pubkey, int]:
    """Derive the payment config PDA.

    Seeds: ["payment_config"]
    """
    return derive_address([SEED_PAYMENT_CONFIG], program_id)


def get_merchant_info_pda(
    merchant: Pubkey,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the merchant info PDA.

    Seeds: ["merchant_info", merchant]
    """
    return derive_address([SEED_MERCHANT_INFO, bytes(merchant)], program_id)


def get_merchant_id_pda(
    merchant: Pubkey,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the merchant id account PDA.

    Seeds: ["merchant_id", merchant]
    """
    return derive_address([SEED_MERCHANT_ID, bytes(merchant)], program_id)


def get_initial_id_chunk_pda(
    merchant: Pubkey,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the first id chunk allocated at merchant registration.

    Seeds: ["id_chunk", merchant, chunk_index (u8 = 0)]
    """
    return derive_address([SEED_ID_CHUNK, bytes(merchant), encode_u8(0)], program_id)


def get_deposit_escrow_pda(
    mint: Pubkey,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the merchant deposit escrow token account.

    Seeds: ["deposit_escrow", mint]
    """
    return derive_address([SEED_DEPOSIT_ESCROW, bytes(mint)], program_id)


def get_product_pda(
    product_id: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the base product record PDA.

    Seeds: ["product", product_id (u64 LE)]
    """
    return derive_address([SEED_PRODUCT, encode_u64(product_id)], program_id)


def get_product_extended_pda(
    product_id: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the extended product record PDA.

    Seeds: ["product_extended", product_id (u64 LE)]
    """
    return derive_address([SEED_PRODUCT_EXTENDED, encode_u64(product_id)], program_id)


def get_user_purchase_count_pda(
    buyer: Pubkey,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the buyer's purchase counter PDA.

    Seeds: ["user_purchase_count", buyer]
    """
    return derive_address([SEED_USER_PURCHASE_COUNT, bytes(buyer)], program_id)


def get_order_pda(
    buyer: Pubkey,
    purchase_count: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive an order PDA keyed by the buyer's purchase counter.

    Seeds: ["buyer_order", buyer, purchase_count (u64 LE)]
    """
    return derive_address(
        [SEED_BUYER_ORDER, bytes(buyer), encode_u64(purchase_count)],
        program_id,
    )


def get_order_stats_pda(program_id: Pubkey = SHOP_PROGRAM_ID) -> Tuple[Pubkey, int]:
    """Derive the order stats PDA.

    Seeds: ["order_stats"]
    """
    return derive_address([SEED_ORDER_STATS], program_id)


def get_program_token_account_pda(
    mint: Pubkey,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the escrow token account holding buyer payments.

    Seeds: ["program_token_account", mint]
    """
    return derive_address([SEED_PROGRAM_TOKEN_ACCOUNT, bytes(mint)], program_id)


def get_program_authority_pda(program_id: Pubkey = SHOP_PROGRAM_ID) -> Tuple[Pubkey, int]:
    """Derive the authority that owns program token accounts.

    Seeds: ["program_authority"]
    """
    return derive_address([SEED_PROGRAM_AUTHORITY], program_id)


# ============================================================================
# Vault program
# ============================================================================


def get_vault_pda(
    name: str = VAULT_NAME,
    program_id: Pubkey = VAULT_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive a vault PDA from its name.

    Seeds: ["vault", name (32 bytes, zero padded)]
    """
    return derive_address([SEED_VAULT, pad_seed_string(name, VAULT_NAME_LEN)], program_id)


def get_vault_depositor_pda(
    vault: Pubkey,
    user: Pubkey,
    program_id: Pubkey = VAULT_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive a user's depositor record for a vault.

    Seeds: ["vault_depositor", vault, user]
    """
    return derive_address([SEED_VAULT_DEPOSITOR, bytes(vault), bytes(user)], program_id)


def get_vault_token_account_pda(
    vault: Pubkey,
    program_id: Pubkey = VAULT_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the vault's token account.

    Seeds: ["vault_token_account", vault]
    """
    return derive_address([SEED_VAULT_TOKEN_ACCOUNT, bytes(vault)], program_id)


# ============================================================================
# Token accounts
# ============================================================================


def get_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Pubkey:
    """Derive the associated token account address for a wallet and mint."""
    seeds = [
        bytes(owner),
        bytes(token_program_id),
        bytes(mint),
    ]
    address, _ = derive_address(seeds, ASSOCIATED_TOKEN_PROGRAM_ID)
    return address
