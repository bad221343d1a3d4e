"""Instruction builders for the FOCX SDK.

Each builder fixes the account order and signer/writable flags the program
expects. Account order is part of the program interface; do not reorder.
"""

from typing import List, Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .codec import encode_instruction
from .constants import (
    RENT_SYSVAR_ID,
    SHOP_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    VAULT_PROGRAM_ID,
)
from .index import resolve_keyword_shard
from .pda import (
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
from .types import (
    AddProductToKeywordIndexArgs,
    AddProductToPriceIndexArgs,
    AddProductToSalesIndexArgs,
    CreateOrderArgs,
    CreateProductBaseArgs,
    CreateProductExtendedArgs,
    DeleteProductArgs,
    DepositMerchantDepositArgs,
    PurchaseProductEscrowArgs,
    RangeBucket,
    RegisterMerchantAtomicArgs,
    RequestUnstakeArgs,
    StakeArgs,
    UpdateProductArgs,
)


def _signer(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=True, is_writable=True)


def _writable(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=False, is_writable=True)


def _readonly(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=False, is_writable=False)


def _instruction(program_id: Pubkey, args, accounts: List[AccountMeta]) -> Instruction:
    data = encode_instruction(args.INSTRUCTION_NAME, args)
    return Instruction(program_id, data, accounts)


# ============================================================================
# Merchant
# ============================================================================


def build_register_merchant_instruction(
    merchant: Pubkey,
    name: str,
    description: str,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build register_merchant_atomic.

    Accounts:
    0. merchant (signer, writable) - payer
    1. merchant (signer, writable)
    2. global_root (writable)
    3. merchant_info (writable)
    4. system_config
    5. merchant_id_account (writable)
    6. initial_id_chunk (writable)
    7. system_program
    """
    global_root, _ = get_global_id_root_pda(program_id)
    merchant_info, _ = get_merchant_info_pda(merchant, program_id)
    system_config, _ = get_system_config_pda(program_id)
    merchant_id, _ = get_merchant_id_pda(merchant, program_id)
    initial_chunk, _ = get_initial_id_chunk_pda(merchant, program_id)

    accounts = [
        _signer(merchant),
        _signer(merchant),
        _writable(global_root),
        _writable(merchant_info),
        _readonly(system_config),
        _writable(merchant_id),
        _writable(initial_chunk),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    args = RegisterMerchantAtomicArgs(name=name, description=description)
    return _instruction(program_id, args, accounts)


def build_deposit_merchant_deposit_instruction(
    merchant: Pubkey,
    mint: Pubkey,
    amount: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build deposit_merchant_deposit.

    Accounts:
    0. merchant (signer, writable)
    1. merchant_info (writable)
    2. system_config
    3. merchant_token_account (writable) - merchant ATA for mint
    4. mint
    5. deposit_escrow (writable)
    6. token_program
    7. system_program
    """
    merchant_info, _ = get_merchant_info_pda(merchant, program_id)
    system_config, _ = get_system_config_pda(program_id)
    deposit_escrow, _ = get_deposit_escrow_pda(mint, program_id)
    merchant_ata = get_associated_token_address(merchant, mint)

    accounts = [
        _signer(merchant),
        _writable(merchant_info),
        _readonly(system_config),
        _writable(merchant_ata),
        _readonly(mint),
        _writable(deposit_escrow),
        _readonly(TOKEN_PROGRAM_ID),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    return _instruction(program_id, DepositMerchantDepositArgs(amount=amount), accounts)


# ============================================================================
# Products
# ============================================================================


def build_create_product_base_instruction(
    merchant: Pubkey,
    product_id: int,
    active_chunk: Pubkey,
    args: CreateProductBaseArgs,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build create_product_base.

    ``product_id`` is the predicted id; it only selects the product account.

    Accounts:
    0. merchant (signer, writable)
    1. global_root (writable)
    2. merchant_id_account (writable)
    3. merchant_info (writable)
    4. active_chunk (writable)
    5. payment_config
    6. product (writable)
    7. system_program
    """
    global_root, _ = get_global_id_root_pda(program_id)
    merchant_id, _ = get_merchant_id_pda(merchant, program_id)
    merchant_info, _ = get_merchant_info_pda(merchant, program_id)
    payment_config, _ = get_payment_config_pda(program_id)
    product, _ = get_product_pda(product_id, program_id)

    accounts = [
        _signer(merchant),
        _writable(global_root),
        _writable(merchant_id),
        _writable(merchant_info),
        _writable(active_chunk),
        _readonly(payment_config),
        _writable(product),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    return _instruction(program_id, args, accounts)


def build_create_product_extended_instruction(
    merchant: Pubkey,
    args: CreateProductExtendedArgs,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build create_product_extended.

    Accounts:
    0. merchant (signer, writable)
    1. product_extended (writable)
    2. product (writable)
    3. system_program
    """
    product_extended, _ = get_product_extended_pda(args.product_id, program_id)
    product, _ = get_product_pda(args.product_id, program_id)

    accounts = [
        _signer(merchant),
        _writable(product_extended),
        _writable(product),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    return _instruction(program_id, args, accounts)


def build_add_product_to_keyword_index_instruction(
    merchant: Pubkey,
    keyword: str,
    product_id: int,
    shard_count: int = 1,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build add_product_to_keyword_index.

    Accounts:
    0. keyword_root (writable)
    1. target_shard (writable)
    2. merchant (signer, writable)
    3. system_program
    """
    resolved = resolve_keyword_shard(keyword, shard_count, program_id)

    accounts = [
        _writable(resolved.root),
        _writable(resolved.shard),
        _signer(merchant),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    args = AddProductToKeywordIndexArgs(keyword=keyword, product_id=product_id)
    return _instruction(program_id, args, accounts)


def build_add_product_to_price_index_instruction(
    merchant: Pubkey,
    product_id: int,
    price: int,
    bucket: RangeBucket,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build add_product_to_price_index.

    Accounts:
    0. merchant (signer, writable)
    1. price_index (writable)
    2. system_program
    """
    accounts = [
        _signer(merchant),
        _writable(bucket.address),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    args = AddProductToPriceIndexArgs(
        product_id=product_id,
        price=price,
        price_range_start=bucket.low,
        price_range_end=bucket.wire_high,
    )
    return _instruction(program_id, args, accounts)


def build_add_product_to_sales_index_instruction(
    merchant: Pubkey,
    product_id: int,
    sales: int,
    bucket: RangeBucket,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build add_product_to_sales_index.

    Accounts:
    0. merchant (signer, writable)
    1. sales_index (writable)
    2. system_program
    """
    accounts = [
        _signer(merchant),
        _writable(bucket.address),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    args = AddProductToSalesIndexArgs(
        sales_range_start=bucket.low,
        sales_range_end=bucket.wire_high,
        product_id=product_id,
        sales=sales,
    )
    return _instruction(program_id, args, accounts)


def build_update_product_instruction(
    merchant: Pubkey,
    args: UpdateProductArgs,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build update_product.

    Accounts:
    0. merchant (signer, writable)
    1. product (writable)
    2. product_extended (writable)
    3. payment_config
    4. system_program
    """
    product, _ = get_product_pda(args.product_id, program_id)
    product_extended, _ = get_product_extended_pda(args.product_id, program_id)
    payment_config, _ = get_payment_config_pda(program_id)

    accounts = [
        _signer(merchant),
        _writable(product),
        _writable(product_extended),
        _readonly(payment_config),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    return _instruction(program_id, args, accounts)


def build_delete_product_instruction(
    merchant: Pubkey,
    product_id: int,
    hard_delete: bool = True,
    force: bool = False,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build delete_product.

    Accounts:
    0. merchant (signer, writable)
    1. merchant_info (writable)
    2. product (writable)
    3. beneficiary (signer, writable) - receives reclaimed rent
    4. system_program
    """
    merchant_info, _ = get_merchant_info_pda(merchant, program_id)
    product, _ = get_product_pda(product_id, program_id)

    accounts = [
        _signer(merchant),
        _writable(merchant_info),
        _writable(product),
        _signer(merchant),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    args = DeleteProductArgs(product_id=product_id, hard_delete=hard_delete, force=force)
    return _instruction(program_id, args, accounts)


# ============================================================================
# Orders
# ============================================================================


def build_create_order_instruction(
    buyer: Pubkey,
    merchant: Pubkey,
    purchase_count: int,
    args: CreateOrderArgs,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build create_order.

    ``purchase_count`` is the buyer's current counter value; it addresses
    the new order account.

    Accounts:
    0. user_purchase_count (writable)
    1. order (writable)
    2. order_stats (writable)
    3. product
    4. merchant_info
    5. buyer (signer, writable)
    6. system_program
    """
    user_purchase_count, _ = get_user_purchase_count_pda(buyer, program_id)
    order, _ = get_order_pda(buyer, purchase_count, program_id)
    order_stats, _ = get_order_stats_pda(program_id)
    product, _ = get_product_pda(args.product_id, program_id)
    merchant_info, _ = get_merchant_info_pda(merchant, program_id)

    accounts = [
        _writable(user_purchase_count),
        _writable(order),
        _writable(order_stats),
        _readonly(product),
        _readonly(merchant_info),
        _signer(buyer),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    return _instruction(program_id, args, accounts)


def build_purchase_product_escrow_instruction(
    buyer: Pubkey,
    mint: Pubkey,
    product_id: int,
    quantity: int,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> Instruction:
    """Build purchase_product_escrow.

    Accounts:
    0. buyer (signer, writable)
    1. product
    2. program_token_account (writable)
    3. program_authority
    4. buyer_token_account (writable)
    5. payment_mint
    6. token_program
    7. system_program
    """
    product, _ = get_product_pda(product_id, program_id)
    program_token_account, _ = get_program_token_account_pda(mint, program_id)
    program_authority, _ = get_program_authority_pda(program_id)
    buyer_ata = get_associated_token_address(buyer, mint)

    accounts = [
        _signer(buyer),
        _readonly(product),
        _writable(program_token_account),
        _readonly(program_authority),
        _writable(buyer_ata),
        _readonly(mint),
        _readonly(TOKEN_PROGRAM_ID),
        _readonly(SYSTEM_PROGRAM_ID),
    ]
    args = PurchaseProductEscrowArgs(product_id=product_id, quantity=quantity)
    return _instruction(program_id, args, accounts)


# ============================================================================
# Vault
# ============================================================================


def build_initialize_vault_depositor_instruction(
    user: Pubkey,
    program_id: Pubkey = VAULT_PROGRAM_ID,
) -> Instruction:
    """Build initialize_vault_depositor.

    Accounts:
    0. vault
    1. vault_depositor (writable)
    2. user (signer, writable)
    3. system_program
    4. rent sysvar
    """
    vault, _ = get_vault_pda(program_id=program_id)
    depositor, _ = get_vault_depositor_pda(vault, user, program_id)

    accounts = [
        _readonly(vault),
        _writable(depositor),
        _signer(user),
        _readonly(SYSTEM_PROGRAM_ID),
        _readonly(RENT_SYSVAR_ID),
    ]
    data = encode_instruction("initialize_vault_depositor")
    return Instruction(program_id, data, accounts)


def _vault_transfer_accounts(user: Pubkey, mint: Pubkey, program_id: Pubkey) -> List[AccountMeta]:
    vault, _ = get_vault_pda(program_id=program_id)
    depositor, _ = get_vault_depositor_pda(vault, user, program_id)
    vault_token_account, _ = get_vault_token_account_pda(vault, program_id)
    user_ata = get_associated_token_address(user, mint)
    return [
        _writable(vault),
        _writable(depositor),
        _writable(vault_token_account),
        _writable(user_ata),
        _signer(user),
        _readonly(TOKEN_PROGRAM_ID),
    ]


def build_stake_instruction(
    user: Pubkey,
    mint: Pubkey,
    amount: int,
    program_id: Pubkey = VAULT_PROGRAM_ID,
) -> Instruction:
    """Build stake.

    Accounts:
    0. vault (writable)
    1. vault_depositor (writable)
    2. vault_token_account (writable)
    3. user_token_account (writable)
    4. user (signer, writable)
    5. token_program
    """
    accounts = _vault_transfer_accounts(user, mint, program_id)
    return _instruction(program_id, StakeArgs(amount=amount), accounts)


def build_request_unstake_instruction(
    user: Pubkey,
    amount: int,
    program_id: Pubkey = VAULT_PROGRAM_ID,
) -> Instruction:
    """Build request_unstake.

    Accounts:
    0. vault (writable)
    1. vault_depositor (writable)
    2. user (signer, writable)
    """
    vault, _ = get_vault_pda(program_id=program_id)
    depositor, _ = get_vault_depositor_pda(vault, user, program_id)

    accounts = [
        _writable(vault),
        _writable(depositor),
        _signer(user),
    ]
    return _instruction(program_id, RequestUnstakeArgs(amount=amount), accounts)


def build_unstake_instruction(
    user: Pubkey,
    mint: Pubkey,
    program_id: Pubkey = VAULT_PROGRAM_ID,
) -> Instruction:
    """Build unstake. Same accounts as stake; withdraws the pending request."""
    accounts = _vault_transfer_accounts(user, mint, program_id)
    return Instruction(program_id, encode_instruction("unstake"), accounts)


def build_keyword_index_instructions(
    merchant: Pubkey,
    keywords: Sequence[str],
    product_id: int,
    shard_count: int = 1,
    program_id: Pubkey = SHOP_PROGRAM_ID,
) -> List[Instruction]:
    """One add_product_to_keyword_index per keyword, in the given order."""
    return [
        build_add_product_to_keyword_index_instruction(
            merchant, keyword, product_id, shard_count, program_id
        )
        for keyword in keywords
    ]
