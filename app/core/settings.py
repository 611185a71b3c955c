from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    public_base_url: str = Field(default="http://localhost:8080", validation_alias="PUBLIC_BASE_URL")
    app_name: str = Field(default="WarpCat", validation_alias="APP_NAME")
    app_domain: str = Field(default="warpcat.xyz", validation_alias="APP_DOMAIN")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    minted_file: str = Field(default="./data/minted.json", validation_alias="MINTED_FILE")
    traits_config_path: str | None = Field(default=None, validation_alias="TRAITS_CONFIG_PATH")
    fragments_dir: str | None = Field(default=None, validation_alias="FRAGMENTS_DIR")

    image_size: int = Field(default=1024, ge=1, validation_alias="IMAGE_SIZE")
    max_image_size: int = Field(default=1024, ge=1, validation_alias="MAX_IMAGE_SIZE")

    chain_id: str = Field(default="eip155:8453", validation_alias="CHAIN_ID")
    mint_contract_address: str = Field(
        default="0x0000000000000000000000000000000000000000",
        validation_alias="MINT_CONTRACT_ADDRESS",
    )
    mint_price_wei: str = Field(default="0", validation_alias="MINT_PRICE_WEI")

    neynar_app_key: str | None = Field(default=None, validation_alias="NEYNAR_APP_KEY")
    farcaster_header: str | None = Field(default=None, validation_alias="FARCASTER_HEADER")
    farcaster_payload: str | None = Field(default=None, validation_alias="FARCASTER_PAYLOAD")
    farcaster_signature: str | None = Field(default=None, validation_alias="FARCASTER_SIGNATURE")

    @property
    def base_url(self) -> str:
        return self.public_base_url.rstrip("/")


settings = Settings()
