"""
Command Schemas

Pydantic models declaring the parameter and return shapes of every bridge
command. Parameter models are validated strictly: a peer sending `"5"` where
an integer is expected gets a ValidationError, not a silent coercion.

Wire conventions:
- Bridge-level fields are camelCase (aliases), Python fields are snake_case
- Coin, CoinSpend and SpendBundle keep the chain's native snake_case keys
- Amounts accept an integer or a decimal string (values above 2^53 arrive
  as strings from JavaScript peers)
- Optional parameters may be omitted but not sent as `null`; only fields
  declared nullable (e.g. `type`/`assetId` of the asset queries) accept it
"""

from enum import IntEnum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)

Amount = StrictInt | StrictStr

AssetCoinType = Literal["cat", "nft", "did"]


class CommandModel(BaseModel):
    """Base for command params/returns (camelCase aliases, unknown keys ignored)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _not_null(value: Any) -> Any:
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


def omittable(*fields: str):
    """Validator for optional fields that reject an explicit null."""
    return field_validator(*fields, mode="before")(_not_null)


# =============================================================================
# Chain primitives
# =============================================================================

class Coin(CommandModel):
    parent_coin_info: StrictStr
    puzzle_hash: StrictStr
    amount: StrictInt


class CoinSpend(CommandModel):
    coin: Coin
    puzzle_reveal: StrictStr
    solution: StrictStr


class SpendBundle(CommandModel):
    coin_spends: list[CoinSpend]
    aggregated_signature: StrictStr


class MempoolInclusionStatus(IntEnum):
    SUCCESS = 1  # Transaction added to mempool
    PENDING = 2  # Transaction not yet added to mempool
    FAILED = 3   # Transaction was invalid and dropped


# =============================================================================
# Parameters
# =============================================================================

class EmptyParams(CommandModel):
    pass


class ConnectParams(CommandModel):
    eager: StrictBool | None = None

    _eager = omittable("eager")


class GetPublicKeysParams(CommandModel):
    limit: StrictInt | None = None
    offset: StrictInt | None = None

    _paging = omittable("limit", "offset")


class FilterUnlockedCoinsParams(CommandModel):
    coin_names: list[StrictStr] = Field(..., alias="coinNames", min_length=1)


class GetAssetCoinsParams(CommandModel):
    # `type` and `assetId` are nullable but must be present
    kind: AssetCoinType | None = Field(..., alias="type")
    asset_id: StrictStr | None = Field(..., alias="assetId")
    included_locked: StrictBool | None = Field(default=None, alias="includedLocked")
    offset: StrictInt | None = None
    limit: StrictInt | None = None

    _optional = omittable("included_locked", "offset", "limit")


class GetAssetBalanceParams(CommandModel):
    kind: AssetCoinType | None = Field(..., alias="type")
    asset_id: StrictStr | None = Field(..., alias="assetId")


class SignCoinSpendsParams(CommandModel):
    coin_spends: list[CoinSpend] = Field(..., alias="coinSpends")
    partial_sign: StrictBool | None = Field(default=None, alias="partialSign")

    _partial_sign = omittable("partial_sign")


class SignMessageParams(CommandModel):
    message: StrictStr
    public_key: StrictStr = Field(..., alias="publicKey")


class SendTransactionParams(CommandModel):
    spend_bundle: SpendBundle = Field(..., alias="spendBundle")


class AssetAmount(CommandModel):
    # An empty asset id refers to the native asset
    asset_id: StrictStr = Field(..., alias="assetId")
    amount: Amount


class CreateOfferParams(CommandModel):
    offer_assets: list[AssetAmount] = Field(..., alias="offerAssets")
    request_assets: list[AssetAmount] = Field(..., alias="requestAssets")
    fee: Amount | None = None

    _fee = omittable("fee")


class TakeOfferParams(CommandModel):
    offer: StrictStr
    fee: Amount | None = None

    _fee = omittable("fee")


class CancelOfferParams(CommandModel):
    id: StrictStr
    fee: Amount | None = None

    _fee = omittable("fee")


class GetNftsParams(CommandModel):
    limit: StrictInt | None = None
    offset: StrictInt | None = None
    collection_id: StrictStr | None = Field(default=None, alias="collectionId")

    _optional = omittable("limit", "offset", "collection_id")


class SendParams(CommandModel):
    asset_id: StrictStr | None = Field(default=None, alias="assetId")
    amount: Amount
    fee: Amount | None = None
    address: StrictStr
    memos: list[StrictStr] | None = None

    _optional = omittable("asset_id", "fee", "memos")


class NftMint(CommandModel):
    address: StrictStr | None = None
    royalty_address: StrictStr | None = Field(default=None, alias="royaltyAddress")
    royalty_ten_thousandths: StrictInt | None = Field(
        default=None,
        alias="royaltyTenThousandths"
    )
    data_uris: list[StrictStr] | None = Field(default=None, alias="dataUris")
    data_hash: StrictStr | None = Field(default=None, alias="dataHash")
    metadata_uris: list[StrictStr] | None = Field(default=None, alias="metadataUris")
    metadata_hash: StrictStr | None = Field(default=None, alias="metadataHash")
    license_uris: list[StrictStr] | None = Field(default=None, alias="licenseUris")
    license_hash: StrictStr | None = Field(default=None, alias="licenseHash")
    edition_number: StrictInt | None = Field(default=None, alias="editionNumber")
    edition_total: StrictInt | None = Field(default=None, alias="editionTotal")

    _optional = omittable("*")


class BulkMintNftsParams(CommandModel):
    did: StrictStr
    nfts: list[NftMint]
    fee: Amount | None = None

    _fee = omittable("fee")


class SignMessageByAddressParams(CommandModel):
    message: StrictStr
    address: StrictStr


# =============================================================================
# Returns
# =============================================================================

class LineageProof(CommandModel):
    parent_name: str | None = Field(default=None, alias="parentName")
    inner_puzzle_hash: str | None = Field(default=None, alias="innerPuzzleHash")
    amount: int | None = None


class SpendableCoin(CommandModel):
    coin: Coin
    coin_name: str = Field(..., alias="coinName")
    puzzle: str
    confirmed_block_index: int = Field(..., alias="confirmedBlockIndex")
    locked: bool
    lineage_proof: LineageProof | None = Field(default=None, alias="lineageProof")


class AssetBalance(CommandModel):
    confirmed: str
    spendable: str
    spendable_coin_count: int = Field(..., alias="spendableCoinCount")


class TransactionStatus(CommandModel):
    status: MempoolInclusionStatus
    error: str | None = None


class CreatedOffer(CommandModel):
    id: str
    offer: str


class TakenOffer(CommandModel):
    id: str


class EmptyResult(CommandModel):
    pass


class NftRecord(CommandModel):
    launcher_id: str = Field(..., alias="launcherId")
    collection_id: str | None = Field(..., alias="collectionId")
    collection_name: str | None = Field(..., alias="collectionName")
    minter_did: str | None = Field(..., alias="minterDid")
    owner_did: str | None = Field(..., alias="ownerDid")
    name: str | None
    created_height: int | None = Field(..., alias="createdHeight")
    coin_id: str = Field(..., alias="coinId")
    address: str
    royalty_address: str = Field(..., alias="royaltyAddress")
    royalty_ten_thousandths: int = Field(..., alias="royaltyTenThousandths")
    data_uris: list[str] = Field(..., alias="dataUris")
    data_hash: str | None = Field(..., alias="dataHash")
    metadata_uris: list[str] = Field(..., alias="metadataUris")
    metadata_hash: str | None = Field(..., alias="metadataHash")
    license_uris: list[str] = Field(..., alias="licenseUris")
    license_hash: str | None = Field(..., alias="licenseHash")
    edition_number: int | None = Field(..., alias="editionNumber")
    edition_total: int | None = Field(..., alias="editionTotal")


class NftList(CommandModel):
    nfts: list[NftRecord]


class MintedNfts(CommandModel):
    nft_ids: list[str] = Field(default_factory=list, alias="nftIds")


class ReceiveAddress(CommandModel):
    address: str


class SignedMessage(CommandModel):
    public_key: str = Field(..., alias="publicKey")
    signature: str
