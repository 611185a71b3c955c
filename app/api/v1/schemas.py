from pydantic import BaseModel, ConfigDict, Field


class TraitAttribute(BaseModel):
    trait_type: str
    value: str


class TokenMetadataRead(BaseModel):
    name: str
    description: str
    image: str
    attributes: list[TraitAttribute]


class SelectionRead(BaseModel):
    fid: int
    traits: dict[str, str | None]


class TraitCatalogRead(BaseModel):
    version: str
    order: list[str]
    categories: dict[str, list[str]]


class TransactionParams(BaseModel):
    abi: list[dict]
    to: str
    data: str
    value: str


class TransactionRead(BaseModel):
    """Wallet transaction request consumed by the frame client."""

    model_config = ConfigDict(populate_by_name=True)

    chain_id: str = Field(alias="chainId")
    method: str
    params: TransactionParams
    attribution: bool = False
