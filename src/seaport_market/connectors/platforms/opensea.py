"""OpenSea v2 REST API client."""

import asyncio
from typing import Any
from urllib.parse import quote

import requests
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_fixed

from src.seaport_market.config.constants import (
    OPENSEA_MAX_PAGE_SIZE,
    OPENSEA_POPULAR_MAX_COLLECTIONS,
    get_opensea_chain,
)
from src.seaport_market.config.settings import Settings
from src.seaport_market.core.exceptions import MarketplaceApiError
from src.seaport_market.models.collection import (
    AccountNfts,
    CollectionDetail,
    CollectionStats,
    CollectionSummary,
    NftPrice,
    OpenSeaNft,
)
from src.seaport_market.models.order import SignedOrder
from src.seaport_market.utils.logger import get_logger
from src.seaport_market.utils.units import format_units

logger = get_logger(__name__)

TIMEOUT_522_MESSAGE = "OpenSea API timed out (522). Try again shortly."
DEFAULT_PAYMENT_DECIMALS = 18


def payment_decimals(payment_token: dict[str, Any]) -> int:
    """Decimals of an order's payment token; 18 only when not reported."""
    decimals = payment_token.get("decimals")
    return DEFAULT_PAYMENT_DECIMALS if decimals is None else int(decimals)


class OpenSeaClient:
    """Marketplace data gateway backed by the OpenSea v2 API.

    Every request is retried once after a fixed delay on transport failures
    and on retryable HTTP statuses. Any other HTTP error is raised right away
    as :class:`MarketplaceApiError` carrying the status and response body.
    Blocking HTTP calls run in a worker thread.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        """Initialize OpenSea client.

        Args:
            settings: Application settings (API key, base URL, retry policy)
            session: Optional pre-configured HTTP session
        """
        self.settings = settings
        self.api_url = settings.opensea_api_url.rstrip("/")
        self.default_chain = settings.default_chain
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "X-API-KEY": settings.opensea_api_key,
            }
        )

    def resolve_chain(self, chain_id: int | None = None) -> str:
        """Map a chain ID to an OpenSea chain, falling back to the default chain."""
        return get_opensea_chain(chain_id, self.default_chain)

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _is_retryable(self, error: BaseException) -> bool:
        if not isinstance(error, MarketplaceApiError):
            return False
        return error.is_transport_error or error.status in self.settings.retryable_statuses

    def _error_for(self, response: requests.Response) -> MarketplaceApiError:
        text = response.text
        if response.status_code == 522:
            message = TIMEOUT_522_MESSAGE
        else:
            message = f"OpenSea API error {response.status_code}: {text}"
        return MarketplaceApiError(message, status=response.status_code, body=text)

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request with the one-retry policy.

        Raises:
            MarketplaceApiError: On transport failure or non-2xx response
        """
        url = f"{self.api_url}{path}"
        query = {
            key: str(value).lower() if isinstance(value, bool) else value
            for key, value in (params or {}).items()
        }

        def _log_retry(retry_state) -> None:
            error = retry_state.outcome.exception()
            logger.warning(
                "Retrying OpenSea request",
                path=path,
                status=getattr(error, "status", None),
                error=str(error),
                delay_ms=self.settings.retry_delay_ms,
            )

        @retry(
            stop=stop_after_attempt(2),
            wait=wait_fixed(self.settings.retry_delay_seconds),
            retry=retry_if_exception(self._is_retryable),
            before_sleep=_log_retry,
            reraise=True,
        )
        def _send() -> Any:
            try:
                response = self.session.request(
                    method,
                    url,
                    params=query or None,
                    json=json_body,
                    timeout=self.settings.request_timeout_seconds,
                )
            except requests.exceptions.RequestException as e:
                raise MarketplaceApiError(f"OpenSea API request failed: {e}") from e

            if not response.ok:
                raise self._error_for(response)

            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError as e:
                raise MarketplaceApiError(
                    "OpenSea API returned invalid JSON",
                    status=response.status_code,
                    body=response.text,
                ) from e

        return _send()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await asyncio.to_thread(self._request, "GET", path, params)

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        return await asyncio.to_thread(self._request, "POST", path, None, body)

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def fetch_account_nfts(self, address: str, chain_id: int | None = None) -> AccountNfts:
        """Fetch NFTs owned by an account (first page, 50 items, with metadata)."""
        chain = self.resolve_chain(chain_id)
        data = await self._get(
            f"/chain/{chain}/account/{address}/nfts",
            {"include_metadata": True, "limit": 50},
        )
        return AccountNfts.model_validate(data or {})

    async def fetch_nft(
        self, contract_address: str, identifier: str, chain_id: int | None = None
    ) -> dict[str, Any] | None:
        """Fetch a single NFT including its owners."""
        chain = self.resolve_chain(chain_id)
        data = await self._get(
            f"/chain/{chain}/contract/{contract_address}/nfts/{quote(str(identifier), safe='')}"
        )
        nft = (data or {}).get("nft")
        return nft if isinstance(nft, dict) else None

    async def fetch_user_listings(
        self, address: str, chain_id: int | None = None, limit: int = 10
    ) -> list[dict[str, Any]]:
        """Fetch the newest active Seaport listings made by an account."""
        chain = self.resolve_chain(chain_id)
        data = await self._get(
            f"/orders/{chain}/seaport/listings",
            {
                "maker": address,
                "limit": limit,
                "order_by": "created_date",
                "order_direction": "desc",
            },
        )
        orders = (data or {}).get("orders")
        return orders if isinstance(orders, list) else []

    async def fetch_nft_price(
        self,
        contract_address: str,
        token_id: str | int,
        chain_override: str | None = None,
    ) -> NftPrice | None:
        """Fetch the cheapest active listing of a token.

        Returns:
            NftPrice | None: Price with the raw order, or None when the token
            has no listing
        """
        chain = chain_override or self.default_chain
        data = await self._get(
            f"/orders/{chain}/seaport/listings",
            {
                "asset_contract_address": contract_address,
                "token_ids": token_id,
                "limit": 1,
                "order_by": "eth_price",
                "order_direction": "asc",
            },
        )

        orders = (data or {}).get("orders") or []
        order = orders[0] if orders and isinstance(orders[0], dict) else None
        raw_price = order.get("current_price") if order else None
        if not raw_price:
            return None

        payment_token = order.get("payment_token") or {}
        try:
            decimals = payment_decimals(payment_token)
            price = format_units(raw_price, decimals)
        except ValueError as e:
            raise MarketplaceApiError(f"Malformed listing price: {e}") from e
        return NftPrice(
            price=price,
            currency=payment_token.get("symbol") or "ETH",
            raw_price=str(raw_price),
            decimals=decimals,
            order=order,
        )

    async def fetch_trending_collections(
        self, limit: int = 20, chain_id: int | None = None
    ) -> list[CollectionSummary]:
        """Fetch collections ordered by seven-day volume."""
        data = await self._get(
            "/collections",
            {
                "chain": self.resolve_chain(chain_id),
                "limit": min(limit, OPENSEA_MAX_PAGE_SIZE),
                "order_by": "seven_day_volume",
            },
        )
        return self._collections(data)

    async def fetch_collections_by_search(
        self, query: str, limit: int = 20, chain_id: int | None = None
    ) -> list[CollectionSummary]:
        """Search collections by free text."""
        data = await self._get(
            "/collections",
            {
                "chain": self.resolve_chain(chain_id),
                "search": query,
                "limit": min(limit, OPENSEA_MAX_PAGE_SIZE),
            },
        )
        return self._collections(data)

    async def fetch_collection(self, slug: str) -> CollectionDetail | None:
        """Fetch a collection by slug."""
        data = await self._get(f"/collections/{quote(slug, safe='')}")
        if not data:
            return None
        return CollectionDetail.model_validate(data)

    async def fetch_collection_stats(self, slug: str) -> CollectionStats | None:
        """Fetch aggregate collection statistics (all-time totals)."""
        data = await self._get(f"/collections/{quote(slug, safe='')}/stats")
        total = (data or {}).get("total")
        if not isinstance(total, dict):
            return None

        def _number(value: Any) -> float | None:
            return value if isinstance(value, int | float) and not isinstance(value, bool) else None

        num_owners = _number(total.get("num_owners"))
        return CollectionStats(
            floor_price=_number(total.get("floor_price")),
            total_volume=_number(total.get("volume")),
            num_owners=int(num_owners) if num_owners is not None else None,
            top_offer=None,
            total_supply=None,
        )

    async def fetch_collection_nfts(self, slug: str, limit: int = 20) -> list[OpenSeaNft]:
        """Fetch the first NFTs of a collection."""
        data = await self._get(f"/collection/{quote(slug, safe='')}/nfts", {"limit": limit})
        return AccountNfts.model_validate(data or {}).nfts

    async def fetch_popular_nfts(self, limit: int = 12) -> list[OpenSeaNft]:
        """Fetch one NFT from each of the top collections by volume.

        Collections whose NFTs cannot be fetched are skipped.
        """
        collections = await self.fetch_trending_collections(
            limit=min(limit, OPENSEA_POPULAR_MAX_COLLECTIONS)
        )

        results: list[OpenSeaNft] = []
        for collection in collections:
            slug = collection.slug or collection.collection
            if not slug:
                continue
            try:
                nfts = await self.fetch_collection_nfts(slug, limit=1)
            except MarketplaceApiError as e:
                logger.warning("Skipping collection", slug=slug, error=str(e))
                continue
            if nfts:
                results.append(nfts[0])
            if len(results) >= limit:
                break

        return results

    # ------------------------------------------------------------------
    # Order submission
    # ------------------------------------------------------------------

    async def post_listing(
        self, order: SignedOrder, protocol_address: str, chain_id: int | None = None
    ) -> dict[str, Any]:
        """Register a signed listing with OpenSea."""
        chain = self.resolve_chain(chain_id)
        logger.info("Posting listing", chain=chain, offerer=order.offerer)
        return await self._post(
            f"/orders/{chain}/seaport/listings", order.to_api_payload(protocol_address)
        )

    async def post_offer(
        self, order: SignedOrder, protocol_address: str, chain_id: int | None = None
    ) -> dict[str, Any]:
        """Register a signed offer with OpenSea."""
        chain = self.resolve_chain(chain_id)
        logger.info("Posting offer", chain=chain, offerer=order.offerer)
        return await self._post(
            f"/orders/{chain}/seaport/offers", order.to_api_payload(protocol_address)
        )

    async def cancel_order_offchain(
        self,
        order_hash: str,
        protocol_address: str,
        offerer_signature: str,
        chain_id: int | None = None,
    ) -> dict[str, Any]:
        """Cancel an order on OpenSea using an ``OrderHash`` signature."""
        chain = self.resolve_chain(chain_id)
        logger.info("Cancelling order off-chain", chain=chain, order_hash=order_hash)
        return await self._post(
            f"/orders/chain/{chain}/protocol/{protocol_address}/{order_hash}/cancel",
            {"offererSignature": offerer_signature},
        )

    @staticmethod
    def _collections(data: Any) -> list[CollectionSummary]:
        collections = (data or {}).get("collections") or []
        return [
            CollectionSummary.model_validate(collection)
            for collection in collections
            if isinstance(collection, dict)
        ]
