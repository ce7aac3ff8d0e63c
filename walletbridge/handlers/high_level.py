"""
High-Level Chia Command Handlers

Wallet operations beyond CHIP-0002: NFT listing and minting, sends,
receive address and message signing by address.
"""

from walletbridge.commands.schemas import (
    BulkMintNftsParams,
    EmptyParams,
    EmptyResult,
    GetNftsParams,
    MintedNfts,
    NftList,
    NftMint,
    NftRecord,
    ReceiveAddress,
    SendParams,
    SignedMessage,
    SignMessageByAddressParams,
)
from walletbridge.handlers.chip0002 import DEFAULT_PAGE_LIMIT
from walletbridge.handlers.context import HandlerContext
from walletbridge.protocol.errors import BackendError


def _nft_record(nft: dict) -> NftRecord:
    return NftRecord(
        launcher_id=nft["launcher_id"],
        collection_id=nft.get("collection_id"),
        collection_name=nft.get("collection_name"),
        minter_did=nft.get("minter_did"),
        owner_did=nft.get("owner_did"),
        name=nft.get("name"),
        created_height=nft.get("created_height"),
        coin_id=nft["coin_id"],
        address=nft["address"],
        royalty_address=nft["royalty_address"],
        royalty_ten_thousandths=nft["royalty_ten_thousandths"],
        data_uris=nft.get("data_uris", []),
        data_hash=nft.get("data_hash"),
        metadata_uris=nft.get("metadata_uris", []),
        metadata_hash=nft.get("metadata_hash"),
        license_uris=nft.get("license_uris", []),
        license_hash=nft.get("license_hash"),
        edition_number=nft.get("edition_number"),
        edition_total=nft.get("edition_total"),
    )


async def handle_get_nfts(params: GetNftsParams, context: HandlerContext) -> NftList:
    data = await context.backend.get_nfts({
        "limit": params.limit if params.limit is not None else DEFAULT_PAGE_LIMIT,
        "offset": params.offset if params.offset is not None else 0,
        "collection_id": params.collection_id,
        # TODO: expose sort mode and hidden NFTs once peers agree on parameter names
        "sort_mode": "name",
        "include_hidden": True,
    })
    return NftList(nfts=[_nft_record(nft) for nft in data["nfts"]])


async def handle_send(params: SendParams, context: HandlerContext) -> EmptyResult:
    await context.require_auth("Authenticate to send")

    request = {
        "address": params.address,
        "amount": params.amount,
        "fee": params.fee if params.fee is not None else 0,
        "memos": params.memos or [],
        "auto_submit": True,
    }

    if params.asset_id:
        await context.backend.send_cat({"asset_id": params.asset_id, **request})
    else:
        await context.backend.send_xch(request)

    return EmptyResult()


async def handle_get_address(params: EmptyParams, context: HandlerContext) -> ReceiveAddress:
    status = await context.backend.get_sync_status()
    return ReceiveAddress(address=status["receive_address"])


async def handle_sign_message_by_address(
    params: SignMessageByAddressParams,
    context: HandlerContext
) -> SignedMessage:
    await context.require_auth("Authenticate to sign a message")

    data = await context.backend.sign_message_by_address({
        "message": params.message,
        "address": params.address,
    })
    return SignedMessage.model_validate(data)


def _mint_request(nft: NftMint) -> dict:
    """Translate one mint entry, requiring a hash for every non-empty URI list."""
    if nft.data_uris and not nft.data_hash:
        raise BackendError("Data hash is required if data uris are provided")
    if nft.metadata_uris and not nft.metadata_hash:
        raise BackendError("Metadata hash is required if metadata uris are provided")
    if nft.license_uris and not nft.license_hash:
        raise BackendError("License hash is required if license uris are provided")

    return {
        "address": nft.address,
        "data_hash": nft.data_hash,
        "metadata_hash": nft.metadata_hash,
        "license_hash": nft.license_hash,
        "data_uris": nft.data_uris or [],
        "metadata_uris": nft.metadata_uris or [],
        "license_uris": nft.license_uris or [],
        "royalty_address": nft.royalty_address,
        "royalty_ten_thousandths": nft.royalty_ten_thousandths,
        "edition_number": nft.edition_number,
        "edition_total": nft.edition_total,
    }


async def handle_bulk_mint_nfts(
    params: BulkMintNftsParams,
    context: HandlerContext
) -> MintedNfts:
    await context.require_auth("Authenticate to mint NFTs")

    mints = [_mint_request(nft) for nft in params.nfts]

    data = await context.backend.bulk_mint_nfts({
        "did_id": params.did,
        "fee": params.fee if params.fee is not None else 0,
        "auto_submit": True,
        "mints": mints,
    })
    return MintedNfts(nft_ids=(data or {}).get("nft_ids", []))
