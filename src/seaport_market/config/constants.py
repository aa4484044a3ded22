"""Constants for the Seaport marketplace core."""

# EVM Chain IDs
ETHEREUM_CHAIN_ID = 1
OPTIMISM_CHAIN_ID = 10
POLYGON_CHAIN_ID = 137
BASE_CHAIN_ID = 8453
ARBITRUM_CHAIN_ID = 42161
CELO_CHAIN_ID = 42220
BASE_SEPOLIA_CHAIN_ID = 84532

# OpenSea chain identifiers used in API paths
OPENSEA_CHAIN_BY_ID: dict[int, str] = {
    ETHEREUM_CHAIN_ID: "ethereum",
    OPTIMISM_CHAIN_ID: "optimism",
    POLYGON_CHAIN_ID: "polygon",
    ARBITRUM_CHAIN_ID: "arbitrum",
    CELO_CHAIN_ID: "celo",
    BASE_CHAIN_ID: "base",
    BASE_SEPOLIA_CHAIN_ID: "base-sepolia",
}
DEFAULT_OPENSEA_CHAIN = "base"

# Wrapped ether used as the offer currency
WETH_BY_CHAIN: dict[int, str] = {
    ETHEREUM_CHAIN_ID: "0xC02aaA39b223FE8D0A0E5C4F27eAD9083C756Cc2",
    OPTIMISM_CHAIN_ID: "0x4200000000000000000000000000000000000006",
    ARBITRUM_CHAIN_ID: "0x82af49447d8a07e3bd95bd0d56f35241523fbab1",
    POLYGON_CHAIN_ID: "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619",
    BASE_CHAIN_ID: "0x4200000000000000000000000000000000000006",
    BASE_SEPOLIA_CHAIN_ID: "0x4200000000000000000000000000000000000006",
    CELO_CHAIN_ID: "0xE919F65739c26a42616b7b8eedC6b5524d1e3aC4",
}
NATIVE_DECIMALS = 18

# Seaport protocol (same deployment address on every supported chain)
SEAPORT_V1_6_ADDRESS = "0x0000000000000068F116a894984e2DB1123eB395"
SEAPORT_V1_5_ADDRESS = "0x00000000000000ADc04C56Bf30aC9d3c0aAF14dC"
SEAPORT_VERSIONS: dict[str, str] = {
    SEAPORT_V1_6_ADDRESS.lower(): "1.6",
    SEAPORT_V1_5_ADDRESS.lower(): "1.5",
}
SEAPORT_NAME = "Seaport"

# OpenSea conduit
OPENSEA_CONDUIT_KEY = "0x0000007b02230091a7ed01230072f7006a004d60a8d4e71d599b8104250f0000"
OPENSEA_CONDUIT_ADDRESS = "0x1E0049783F008A0085193E00003D00cd54003c71"
CONDUIT_ADDRESS_BY_KEY: dict[str, str] = {
    OPENSEA_CONDUIT_KEY.lower(): OPENSEA_CONDUIT_ADDRESS,
}

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = "0x" + "0" * 64

# Listings and offers expire after 30 days by default
ORDER_DURATION_SECONDS = 60 * 60 * 24 * 30

# OpenSea REST API
OPENSEA_API_BASE = "https://api.opensea.io/api/v2"
OPENSEA_TIMEOUT_MS = 12000
OPENSEA_RETRY_DELAY_MS = 450
OPENSEA_RETRY_STATUS: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504, 522, 524})
OPENSEA_MAX_PAGE_SIZE = 30
OPENSEA_POPULAR_MAX_COLLECTIONS = 24

# Wallet interaction
WALLET_REQUEST_TIMEOUT_SECONDS = 10.0

# Notifications
TOAST_DURATION_SECONDS = 3.2
LISTING_SETTLE_SECONDS = 0.4

# Offer constraints
MIN_OFFER_AMOUNT = "0.0001"
MAX_OFFER_DECIMALS = 4

# Protocol error codes remapped to friendly messages
INVALID_CANCELLER_ERROR = "InvalidCanceller"
INVALID_CANCELLER_SELECTOR = "0x80ec7374"
ONLY_CREATOR_CAN_CANCEL = "Only the creator can cancel this listing."


def get_opensea_chain(chain_id: int | None, default: str = DEFAULT_OPENSEA_CHAIN) -> str:
    """Map an EVM chain ID to the OpenSea chain identifier.

    Unknown or missing chain IDs fall back to ``default``.
    """
    if chain_id is None:
        return default
    return OPENSEA_CHAIN_BY_ID.get(chain_id, default)


def get_weth_address(chain_id: int | None) -> str | None:
    """Get the WETH contract address for a chain, or None when unsupported."""
    if chain_id is None:
        return None
    return WETH_BY_CHAIN.get(chain_id)


def get_seaport_version(protocol_address: str) -> str:
    """Get the Seaport EIP-712 domain version for a deployment address."""
    return SEAPORT_VERSIONS.get(protocol_address.lower(), "1.6")
