# Command Handlers
# One adapter per bridge command, translating bridge params to backend calls

from walletbridge.handlers.context import HandlerContext
from walletbridge.handlers.chip0002 import (
    handle_chain_id,
    handle_connect,
    handle_get_public_keys,
    handle_filter_unlocked_coins,
    handle_get_asset_coins,
    handle_get_asset_balance,
    handle_sign_coin_spends,
    handle_sign_message,
    handle_send_transaction,
)
from walletbridge.handlers.high_level import (
    handle_get_nfts,
    handle_send,
    handle_get_address,
    handle_sign_message_by_address,
    handle_bulk_mint_nfts,
)
from walletbridge.handlers.offers import (
    handle_create_offer,
    handle_take_offer,
    handle_cancel_offer,
)

__all__ = [
    "HandlerContext",
    # CHIP-0002
    "handle_chain_id",
    "handle_connect",
    "handle_get_public_keys",
    "handle_filter_unlocked_coins",
    "handle_get_asset_coins",
    "handle_get_asset_balance",
    "handle_sign_coin_spends",
    "handle_sign_message",
    "handle_send_transaction",
    # High level
    "handle_get_nfts",
    "handle_send",
    "handle_get_address",
    "handle_sign_message_by_address",
    "handle_bulk_mint_nfts",
    # Offers
    "handle_create_offer",
    "handle_take_offer",
    "handle_cancel_offer",
]
