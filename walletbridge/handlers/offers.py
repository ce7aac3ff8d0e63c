"""
Offer Command Handlers

Create, take and cancel offers. All three are sensitive and consult the
Authentication Gate before touching the backend.
"""

from walletbridge.commands.schemas import (
    AssetAmount,
    CancelOfferParams,
    CreatedOffer,
    CreateOfferParams,
    EmptyResult,
    TakenOffer,
    TakeOfferParams,
)
from walletbridge.handlers.context import HandlerContext


def _offer_asset(asset: AssetAmount) -> dict:
    # Empty asset id is the native asset
    return {
        "asset_id": asset.asset_id or None,
        "amount": asset.amount,
        "hidden_puzzle_hash": None,
    }


async def handle_create_offer(
    params: CreateOfferParams,
    context: HandlerContext
) -> CreatedOffer:
    await context.require_auth("Authenticate to create an offer")

    data = await context.backend.make_offer({
        "offered_assets": [_offer_asset(asset) for asset in params.offer_assets],
        "requested_assets": [_offer_asset(asset) for asset in params.request_assets],
        "fee": params.fee if params.fee is not None else 0,
        "receive_address": None,
        "expires_at_second": None,
        "auto_import": True,
    })
    return CreatedOffer(id=data["offer_id"], offer=data["offer"])


async def handle_take_offer(params: TakeOfferParams, context: HandlerContext) -> TakenOffer:
    await context.require_auth("Authenticate to accept an offer")

    data = await context.backend.take_offer({
        "offer": params.offer,
        "fee": params.fee if params.fee is not None else 0,
        "auto_submit": True,
    })
    return TakenOffer(id=data["transaction_id"])


async def handle_cancel_offer(params: CancelOfferParams, context: HandlerContext) -> EmptyResult:
    await context.require_auth("Authenticate to cancel an offer")

    await context.backend.cancel_offer({
        "offer_id": params.id,
        "fee": params.fee if params.fee is not None else 0,
        "auto_submit": True,
    })
    return EmptyResult()
