"""
Built-in Commands

The CHIP-0002 and Chia command surface served by the bridge. This module is
kept out of `walletbridge.commands.__init__` because it imports the handler
adapters, which themselves import the command schemas.
"""

from walletbridge.commands.registry import CommandRegistry, CommandSpec
from walletbridge.commands.schemas import (
    AssetBalance,
    BulkMintNftsParams,
    CancelOfferParams,
    ConnectParams,
    CreatedOffer,
    CreateOfferParams,
    EmptyParams,
    EmptyResult,
    FilterUnlockedCoinsParams,
    GetAssetBalanceParams,
    GetAssetCoinsParams,
    GetNftsParams,
    GetPublicKeysParams,
    MintedNfts,
    NftList,
    ReceiveAddress,
    SendParams,
    SendTransactionParams,
    SignCoinSpendsParams,
    SignedMessage,
    SignMessageByAddressParams,
    SignMessageParams,
    SpendableCoin,
    TakenOffer,
    TakeOfferParams,
    TransactionStatus,
)
from walletbridge import handlers


def builtin_commands() -> list[CommandSpec]:
    """Return a fresh list of every built-in command."""
    return [
        # === CHIP-0002 ===
        CommandSpec(
            name="chip0002_chainId",
            params_model=EmptyParams,
            return_type=str,
            requires_confirmation=False,
            handler=handlers.handle_chain_id,
            params_optional=True,
        ),
        CommandSpec(
            name="chip0002_connect",
            params_model=ConnectParams,
            return_type=bool,
            requires_confirmation=False,
            handler=handlers.handle_connect,
            params_optional=True,
        ),
        CommandSpec(
            name="chip0002_getPublicKeys",
            params_model=GetPublicKeysParams,
            return_type=list[str],
            requires_confirmation=False,
            handler=handlers.handle_get_public_keys,
            params_optional=True,
        ),
        CommandSpec(
            name="chip0002_filterUnlockedCoins",
            params_model=FilterUnlockedCoinsParams,
            return_type=list[str],
            requires_confirmation=False,
            handler=handlers.handle_filter_unlocked_coins,
        ),
        CommandSpec(
            name="chip0002_getAssetCoins",
            params_model=GetAssetCoinsParams,
            return_type=list[SpendableCoin],
            requires_confirmation=False,
            handler=handlers.handle_get_asset_coins,
        ),
        CommandSpec(
            name="chip0002_getAssetBalance",
            params_model=GetAssetBalanceParams,
            return_type=AssetBalance,
            requires_confirmation=False,
            handler=handlers.handle_get_asset_balance,
        ),
        CommandSpec(
            name="chip0002_signCoinSpends",
            params_model=SignCoinSpendsParams,
            return_type=str,
            requires_confirmation=True,
            handler=handlers.handle_sign_coin_spends,
            title="Sign Transaction",
            description="Review and approve the transaction details below",
        ),
        CommandSpec(
            name="chip0002_signMessage",
            params_model=SignMessageParams,
            return_type=str,
            requires_confirmation=True,
            handler=handlers.handle_sign_message,
            title="Sign Message",
            description="Sign a message with your private key",
        ),
        CommandSpec(
            name="chip0002_sendTransaction",
            params_model=SendTransactionParams,
            return_type=TransactionStatus,
            requires_confirmation=False,
            handler=handlers.handle_send_transaction,
        ),
        # === Offers ===
        CommandSpec(
            name="chia_createOffer",
            params_model=CreateOfferParams,
            return_type=CreatedOffer,
            requires_confirmation=True,
            handler=handlers.handle_create_offer,
            title="Create Offer",
            description="Review and create the offer",
        ),
        CommandSpec(
            name="chia_takeOffer",
            params_model=TakeOfferParams,
            return_type=TakenOffer,
            requires_confirmation=True,
            handler=handlers.handle_take_offer,
            title="Accept Offer",
            description="Review and accept the offer",
        ),
        CommandSpec(
            name="chia_cancelOffer",
            params_model=CancelOfferParams,
            return_type=EmptyResult,
            requires_confirmation=True,
            handler=handlers.handle_cancel_offer,
            title="Cancel Offer",
            description="Review and cancel the offer",
        ),
        # === High level ===
        CommandSpec(
            name="chia_getNfts",
            params_model=GetNftsParams,
            return_type=NftList,
            requires_confirmation=False,
            handler=handlers.handle_get_nfts,
        ),
        CommandSpec(
            name="chia_send",
            params_model=SendParams,
            return_type=EmptyResult,
            requires_confirmation=True,
            handler=handlers.handle_send,
        ),
        CommandSpec(
            name="chia_bulkMintNfts",
            params_model=BulkMintNftsParams,
            return_type=MintedNfts,
            requires_confirmation=True,
            handler=handlers.handle_bulk_mint_nfts,
        ),
        CommandSpec(
            name="chia_getAddress",
            params_model=EmptyParams,
            return_type=ReceiveAddress,
            requires_confirmation=False,
            handler=handlers.handle_get_address,
        ),
        CommandSpec(
            name="chia_signMessageByAddress",
            params_model=SignMessageByAddressParams,
            return_type=SignedMessage,
            requires_confirmation=True,
            handler=handlers.handle_sign_message_by_address,
            title="Sign Message",
            description="Sign a message with your address's private key",
        ),
    ]


def create_default_registry() -> CommandRegistry:
    """Create a registry holding every built-in command."""
    return CommandRegistry(builtin_commands())
