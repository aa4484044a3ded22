"""Core enumerations for the Seaport marketplace core."""

from enum import Enum, IntEnum


class ItemType(IntEnum):
    """Seaport item type."""

    NATIVE = 0
    ERC20 = 1
    ERC721 = 2
    ERC1155 = 3
    ERC721_WITH_CRITERIA = 4
    ERC1155_WITH_CRITERIA = 5


class OrderType(IntEnum):
    """Seaport order type."""

    FULL_OPEN = 0
    PARTIAL_OPEN = 1
    FULL_RESTRICTED = 2
    PARTIAL_RESTRICTED = 3


class TokenStandard(str, Enum):
    """NFT token standard as reported by OpenSea."""

    ERC721 = "erc721"
    ERC1155 = "erc1155"


class SellStatus(str, Enum):
    """Create-listing action status."""

    IDLE = "idle"
    VALIDATING = "validating"
    WALLET = "wallet"
    LISTING = "listing"  # Registering the signed listing with the marketplace
    SUCCESS = "success"
    ERROR = "error"


class OfferStatus(str, Enum):
    """Create-offer action status."""

    IDLE = "idle"
    CHECKING = "checking"  # Loading balance / validating the amount
    WALLET = "wallet"
    SUCCESS = "success"
    ERROR = "error"


class BuyStatus(str, Enum):
    """Fulfill-order action status."""

    IDLE = "idle"
    CONFIRM = "confirm"
    WALLET = "wallet"
    SUCCESS = "success"
    ERROR = "error"


class CancelStatus(str, Enum):
    """Cancel-order action status."""

    IDLE = "idle"
    VALIDATING = "validating"
    WALLET = "wallet"
    SUCCESS = "success"
    ERROR = "error"


class ToastVariant(str, Enum):
    """Notification variant."""

    SUCCESS = "success"
    ERROR = "error"
