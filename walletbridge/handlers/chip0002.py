"""
CHIP-0002 Command Handlers

Thin adapters between the standard CHIP-0002 wallet methods and the wallet
backend. Each handler receives already-validated parameters.
"""

from decimal import Decimal

from walletbridge.commands.schemas import (
    AssetBalance,
    ConnectParams,
    EmptyParams,
    FilterUnlockedCoinsParams,
    GetAssetBalanceParams,
    GetAssetCoinsParams,
    GetPublicKeysParams,
    SendTransactionParams,
    SignCoinSpendsParams,
    SignMessageParams,
    SpendableCoin,
    TransactionStatus,
)
from walletbridge.handlers.context import HandlerContext

DEFAULT_PAGE_LIMIT = 10


async def handle_chain_id(params: EmptyParams | None, context: HandlerContext) -> str:
    data = await context.backend.get_network()
    network = data["network"]
    return network.get("network_id") or network["name"]


async def handle_connect(params: ConnectParams | None, context: HandlerContext) -> bool:
    # Kept for CHIP-0002 compatibility; there is nothing to do
    return True


async def handle_get_public_keys(
    params: GetPublicKeysParams | None,
    context: HandlerContext
) -> list[str]:
    limit = params.limit if params and params.limit is not None else DEFAULT_PAGE_LIMIT
    offset = params.offset if params and params.offset is not None else 0

    data = await context.backend.get_derivations({"limit": limit, "offset": offset})
    return [derivation["public_key"] for derivation in data["derivations"]]


async def handle_filter_unlocked_coins(
    params: FilterUnlockedCoinsParams,
    context: HandlerContext
) -> list[str]:
    data = await context.backend.filter_unlocked_coins({"coin_ids": params.coin_names})
    return data["coin_ids"]


async def handle_get_asset_coins(
    params: GetAssetCoinsParams,
    context: HandlerContext
) -> list[SpendableCoin]:
    records = await context.backend.get_asset_coins(
        params.model_dump(by_alias=True, exclude_none=True)
    )
    return [SpendableCoin.model_validate(record) for record in records]


async def handle_get_asset_balance(
    params: GetAssetBalanceParams,
    context: HandlerContext
) -> AssetBalance:
    request = params.model_dump(by_alias=True)
    request["includedLocked"] = True
    records = await context.backend.get_asset_coins(request)

    confirmed = Decimal(0)
    spendable = Decimal(0)
    spendable_coin_count = 0

    for record in records:
        amount = Decimal(str(record["coin"]["amount"]))
        confirmed += amount
        if not record["locked"]:
            spendable += amount
            spendable_coin_count += 1

    return AssetBalance(
        confirmed=str(confirmed),
        spendable=str(spendable),
        spendable_coin_count=spendable_coin_count,
    )


async def handle_sign_coin_spends(
    params: SignCoinSpendsParams,
    context: HandlerContext
) -> str:
    await context.require_auth("Authenticate to sign a transaction")

    coin_spends = [
        {
            "coin": {
                "parent_coin_info": spend.coin.parent_coin_info,
                "puzzle_hash": spend.coin.puzzle_hash,
                "amount": str(spend.coin.amount),
            },
            "puzzle_reveal": spend.puzzle_reveal,
            "solution": spend.solution,
        }
        for spend in params.coin_spends
    ]

    data = await context.backend.sign_coin_spends({
        "coin_spends": coin_spends,
        "partial": params.partial_sign,
        "auto_submit": False,
    })
    return data["spend_bundle"]["aggregated_signature"]


async def handle_sign_message(params: SignMessageParams, context: HandlerContext) -> str:
    await context.require_auth("Authenticate to sign a message")

    data = await context.backend.sign_message_with_public_key({
        "message": params.message,
        "publicKey": params.public_key,
    })
    return data["signature"]


async def handle_send_transaction(
    params: SendTransactionParams,
    context: HandlerContext
) -> TransactionStatus:
    data = await context.backend.send_transaction_immediately({
        "spend_bundle": params.spend_bundle.model_dump(),
    })
    return TransactionStatus.model_validate(data)
