"""Settings configuration for the Seaport marketplace core."""

from decimal import Decimal

from dotenv import load_dotenv
from eth_account import Account
from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.seaport_market.config.constants import (
    DEFAULT_OPENSEA_CHAIN,
    LISTING_SETTLE_SECONDS,
    MAX_OFFER_DECIMALS,
    MIN_OFFER_AMOUNT,
    OPENSEA_API_BASE,
    OPENSEA_CHAIN_BY_ID,
    OPENSEA_CONDUIT_KEY,
    OPENSEA_RETRY_DELAY_MS,
    OPENSEA_RETRY_STATUS,
    OPENSEA_TIMEOUT_MS,
    SEAPORT_V1_6_ADDRESS,
    TOAST_DURATION_SECONDS,
    WALLET_REQUEST_TIMEOUT_SECONDS,
)

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Constructed once at process start and passed explicitly to the gateway,
    the action engine and the catalog.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,  # Allow both alias and field name
    )

    # OpenSea API
    opensea_api_key: str = Field(
        ...,
        validation_alias=AliasChoices("opensea_api_key", "api_key"),
        description="Credential for the OpenSea REST API",
    )
    opensea_api_url: str = Field(default=OPENSEA_API_BASE, description="OpenSea API base URL")
    default_chain: str | None = Field(
        None,
        validation_alias=AliasChoices("default_chain", "opensea_chain"),
        description="Fallback OpenSea chain identifier (e.g. 'base', 'ethereum')",
    )
    chain_id: int | None = Field(
        None, description="Fallback EVM chain ID, used when default_chain is not set"
    )
    request_timeout_ms: int = Field(
        default=OPENSEA_TIMEOUT_MS, gt=0, le=120000, description="Per-request timeout"
    )
    retryable_statuses: str | frozenset[int] = Field(
        default=OPENSEA_RETRY_STATUS,
        description="HTTP status codes eligible for one retry",
    )
    retry_delay_ms: int = Field(
        default=OPENSEA_RETRY_DELAY_MS, ge=0, description="Fixed delay before the retry"
    )

    # Wallet / protocol
    rpc_url: str | None = Field(None, description="JSON-RPC endpoint for the local signer")
    wallet_private_key: str | None = Field(
        None,
        validation_alias=AliasChoices("wallet_private_key", "private_key"),
        description="Private key for the local signer (66 chars, 0x-prefixed)",
    )
    wallet_address: str | None = Field(
        None, description="Wallet address (derived from private key)"
    )
    seaport_address: str = Field(
        default=SEAPORT_V1_6_ADDRESS, description="Seaport contract address"
    )
    conduit_key: str = Field(default=OPENSEA_CONDUIT_KEY, description="Seaport conduit key")
    wallet_request_timeout_seconds: float = Field(
        default=WALLET_REQUEST_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for each wallet account discovery step",
    )

    # Action engine
    toast_duration_seconds: float = Field(
        default=TOAST_DURATION_SECONDS, gt=0, description="Notification auto-dismiss delay"
    )
    listing_settle_seconds: float = Field(
        default=LISTING_SETTLE_SECONDS, ge=0, description="Delay before a listing reports success"
    )
    min_offer_amount: Decimal = Field(
        default=Decimal(MIN_OFFER_AMOUNT), gt=0, description="Minimum offer amount in WETH"
    )
    max_offer_decimals: int = Field(
        default=MAX_OFFER_DECIMALS, ge=0, le=18, description="Maximum offer fractional digits"
    )

    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("wallet_private_key")
    @classmethod
    def validate_private_key(cls, v: str | None) -> str | None:
        """Validate private key format."""
        if v is None or v == "":
            return None
        if not v.startswith("0x") or len(v) != 66:
            raise ValueError("Private key must be a 66-character hex string starting with 0x")
        try:
            int(v, 16)
        except ValueError as e:
            raise ValueError("Private key must be a valid hexadecimal string") from e
        return v

    @field_validator("opensea_api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Reject empty API keys."""
        if not v or not v.strip():
            raise ValueError("OPENSEA_API_KEY is not set")
        return v.strip()

    @field_validator("opensea_api_url", "rpc_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate URL format."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("default_chain")
    @classmethod
    def validate_default_chain(cls, v: str | None) -> str | None:
        """Validate the OpenSea chain identifier."""
        if v is None or v == "":
            return None
        v_lower = v.strip().lower()
        if v_lower not in OPENSEA_CHAIN_BY_ID.values():
            raise ValueError(
                f"Unknown OpenSea chain '{v}', expected one of "
                f"{sorted(OPENSEA_CHAIN_BY_ID.values())}"
            )
        return v_lower

    @field_validator("retryable_statuses", mode="before")
    @classmethod
    def parse_retryable_statuses(cls, v) -> frozenset[int]:
        """Parse retryable statuses from a comma-separated string or iterable."""
        if isinstance(v, str):
            try:
                return frozenset(int(code.strip()) for code in v.split(",") if code.strip())
            except ValueError as e:
                raise ValueError(f"Invalid HTTP status list: {v}") from e
        return frozenset(int(code) for code in v)

    @field_validator("retryable_statuses")
    @classmethod
    def validate_retryable_statuses(cls, v: frozenset[int]) -> frozenset[int]:
        """Validate HTTP status code ranges."""
        for code in v:
            if code < 100 or code > 599:
                raise ValueError(f"Invalid HTTP status code: {code}")
        return v

    @field_validator("seaport_address")
    @classmethod
    def validate_seaport_address(cls, v: str) -> str:
        """Validate Seaport contract address."""
        if not v.startswith("0x") or len(v) != 42:
            raise ValueError(f"Invalid Ethereum address format: {v}")
        return v

    @field_validator("conduit_key")
    @classmethod
    def validate_conduit_key(cls, v: str) -> str:
        """Validate conduit key is a bytes32 hex string."""
        if not v.startswith("0x") or len(v) != 66:
            raise ValueError("Conduit key must be a 32-byte hex string")
        return v

    @field_validator("min_offer_amount", mode="before")
    @classmethod
    def parse_decimal(cls, v) -> Decimal:
        """Parse string or number to Decimal."""
        if isinstance(v, str):
            return Decimal(v)
        if isinstance(v, int | float):
            return Decimal(str(v))
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @model_validator(mode="after")
    def resolve_defaults(self) -> "Settings":
        """Derive the default chain and wallet address."""
        if self.default_chain is None:
            if self.chain_id is not None:
                self.default_chain = OPENSEA_CHAIN_BY_ID.get(self.chain_id, DEFAULT_OPENSEA_CHAIN)
            else:
                self.default_chain = DEFAULT_OPENSEA_CHAIN

        if self.wallet_private_key and not self.wallet_address:
            try:
                account = Account.from_key(self.wallet_private_key)
                self.wallet_address = account.address
            except Exception as e:
                raise ValueError(f"Failed to derive wallet address from private key: {e}") from e

        return self

    @property
    def request_timeout_seconds(self) -> float:
        """Request timeout in seconds."""
        return self.request_timeout_ms / 1000

    @property
    def retry_delay_seconds(self) -> float:
        """Retry delay in seconds."""
        return self.retry_delay_ms / 1000
