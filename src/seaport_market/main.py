"""Command line entry point for the Seaport marketplace core."""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from src.seaport_market.config.settings import Settings
from src.seaport_market.connectors.blockchain.wallet import LocalWalletSigner
from src.seaport_market.connectors.platforms.opensea import OpenSeaClient
from src.seaport_market.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    SeaportMarketError,
)
from src.seaport_market.models.item import NftItem
from src.seaport_market.models.wallet import WalletSession
from src.seaport_market.services.catalog import MarketplaceCatalog, item_from_nft
from src.seaport_market.trading.engine import OrderActionEngine
from src.seaport_market.trading.state import ActionRecord
from src.seaport_market.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


class MarketplaceRunner:
    """Builds components from settings and runs one command at a time."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.gateway = OpenSeaClient(settings)
        self.catalog = MarketplaceCatalog(self.gateway)
        self.wallet: LocalWalletSigner | None = None

    async def connect_wallet(self) -> LocalWalletSigner:
        """Create the local signer from settings.

        Raises:
            ConfigurationError: If RPC_URL or WALLET_PRIVATE_KEY is missing
        """
        if not self.settings.rpc_url or not self.settings.wallet_private_key:
            raise ConfigurationError("RPC_URL and WALLET_PRIVATE_KEY are required for this command")
        wallet = LocalWalletSigner(self.settings.rpc_url, self.settings.wallet_private_key)
        await wallet.connect()
        return wallet

    async def engine(self, offchain_cancel: bool = False) -> OrderActionEngine:
        wallet = await self.connect_wallet()
        self.wallet = wallet
        session = WalletSession(address=wallet.address, client=wallet)
        return OrderActionEngine(
            self.settings, session, self.gateway, offchain_cancel=offchain_cancel
        )

    async def load_item(self, contract: str, token_id: str, chain_id: int | None) -> NftItem:
        """Fetch an NFT with its current listing.

        Without ``chain_id`` the connected wallet's chain is used, so the
        order is read from the chain it will be signed on.

        Raises:
            NotFoundError: If the NFT does not exist
        """
        if chain_id is None and self.wallet is not None:
            chain_id = self.wallet.chain_id
        nft = await self.gateway.fetch_nft(contract, token_id, chain_id)
        if nft is None:
            raise NotFoundError(f"NFT {contract}-{token_id} not found.")

        price = await self.gateway.fetch_nft_price(
            contract, token_id, self.gateway.resolve_chain(chain_id)
        )
        item = item_from_nft(nft, price)

        owners = nft.get("owners") or []
        if len(owners) == 1 and isinstance(owners[0], dict):
            item = item.with_owner(owners[0].get("address"), None)
        return item


def _dump(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", exclude={"history", "updated_at"})
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def _record_payload(record: ActionRecord) -> dict[str, Any]:
    payload = _dump(record)
    payload["status"] = record.status.value
    payload["history"] = [status.value for status in record.history]
    payload["error"] = record.error or ""
    return payload


def _run(
    ctx: click.Context,
    command: Callable[[MarketplaceRunner], Awaitable[dict[str, Any]]],
    empty: dict[str, Any],
) -> None:
    """Run a command and print its JSON result.

    Failures print ``empty`` plus an ``error`` field and exit non-zero.
    """
    try:
        settings = Settings()
    except ValidationError as e:
        error = ConfigurationError(f"Invalid configuration: {e}")
        click.echo(json.dumps({**empty, "error": str(error)}))
        sys.exit(1)

    configure_logging(
        log_level=ctx.obj["log_level"] or settings.log_level,
        json_logs=ctx.obj["json_logs"] or settings.json_logs,
    )
    runner = MarketplaceRunner(settings)

    try:
        result = asyncio.run(command(runner))
    except SeaportMarketError as e:
        logger.error("Command failed", error=str(e), status_code=e.status_code)
        click.echo(json.dumps({**empty, "error": str(e)}))
        sys.exit(1)
    except Exception as e:
        logger.error("Fatal error", error=str(e), exc_info=True)
        click.echo(json.dumps({**empty, "error": str(e) or "OpenSea error"}))
        sys.exit(1)

    click.echo(json.dumps(result, indent=2))
    if result.get("error"):
        sys.exit(1)


@click.group()
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=".env",
    help="Path to .env file (default: .env)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level (default: LOG_LEVEL or INFO)",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Output logs in JSON format instead of human-readable format",
)
@click.pass_context
def main(ctx: click.Context, env_file: str, log_level: str | None, json_logs: bool) -> None:
    """Seaport marketplace - browse OpenSea data and trade NFTs through Seaport.

    Results are printed as JSON on stdout with an ``error`` field on failure.
    Configuration is loaded from environment variables or a .env file.
    """
    if Path(env_file).exists():
        load_dotenv(env_file)
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["json_logs"] = json_logs


chain_option = click.option("--chain-id", type=int, default=None, help="EVM chain ID")


@main.command()
@click.argument("address")
@chain_option
@click.pass_context
def nfts(ctx: click.Context, address: str, chain_id: int | None) -> None:
    """List the NFTs of ADDRESS with their listing prices."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        page = await runner.catalog.account_items(address, chain_id)
        return {"nfts": _dump(page.items), "next": page.next}

    _run(ctx, command, {"nfts": []})


@main.command()
@click.argument("slug")
@chain_option
@click.pass_context
def collection(ctx: click.Context, slug: str, chain_id: int | None) -> None:
    """Show collection SLUG with its first NFTs."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        page = await runner.catalog.collection_page(slug, chain_id)
        return {"collection": _dump(page.collection), "nfts": _dump(page.items)}

    _run(ctx, command, {"collection": None, "nfts": []})


@main.command()
@click.option("--query", default="", help="Search text (trending collections when empty)")
@chain_option
@click.pass_context
def collections(ctx: click.Context, query: str, chain_id: int | None) -> None:
    """List trending collections or search them."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        return {"collections": _dump(await runner.catalog.collections(query, chain_id))}

    _run(ctx, command, {"collections": []})


@main.command()
@click.argument("address")
@chain_option
@click.option("--limit", type=int, default=10, show_default=True)
@click.pass_context
def listings(ctx: click.Context, address: str, chain_id: int | None, limit: int) -> None:
    """List the active listings made by ADDRESS."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        return {"listings": _dump(await runner.catalog.user_listings(address, chain_id, limit))}

    _run(ctx, command, {"listings": []})


@main.command()
@click.option("--limit", type=int, default=20, show_default=True)
@click.pass_context
def popular(ctx: click.Context, limit: int) -> None:
    """Show one NFT from each top collection."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        return {"nfts": _dump(await runner.catalog.popular_items(limit))}

    _run(ctx, command, {"nfts": []})


@main.command()
@click.argument("contract")
@click.argument("token_id")
@click.argument("price")
@chain_option
@click.pass_context
def sell(ctx: click.Context, contract: str, token_id: str, price: str, chain_id: int | None) -> None:
    """List NFT CONTRACT/TOKEN_ID for PRICE in native currency."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        engine = await runner.engine()
        item = await runner.load_item(contract, token_id, chain_id)
        return _record_payload(await engine.sell(item, price))

    _run(ctx, command, {"status": "error"})


@main.command()
@click.argument("contract")
@click.argument("token_id")
@click.argument("amount")
@chain_option
@click.pass_context
def offer(ctx: click.Context, contract: str, token_id: str, amount: str, chain_id: int | None) -> None:
    """Offer AMOUNT WETH for NFT CONTRACT/TOKEN_ID."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        engine = await runner.engine()
        item = await runner.load_item(contract, token_id, chain_id)
        return _record_payload(await engine.offer(item, amount))

    _run(ctx, command, {"status": "error"})


@main.command()
@click.argument("contract")
@click.argument("token_id")
@chain_option
@click.pass_context
def buy(ctx: click.Context, contract: str, token_id: str, chain_id: int | None) -> None:
    """Buy the cheapest listing of NFT CONTRACT/TOKEN_ID."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        engine = await runner.engine()
        item = await runner.load_item(contract, token_id, chain_id)
        return _record_payload(await engine.buy(item))

    _run(ctx, command, {"status": "error"})


@main.command()
@click.argument("contract")
@click.argument("token_id")
@chain_option
@click.option("--offchain", is_flag=True, help="Cancel through the OpenSea API with a signature")
@click.pass_context
def cancel(ctx: click.Context, contract: str, token_id: str, chain_id: int | None, offchain: bool) -> None:
    """Cancel your listing of NFT CONTRACT/TOKEN_ID."""

    async def command(runner: MarketplaceRunner) -> dict[str, Any]:
        engine = await runner.engine(offchain_cancel=offchain)
        item = await runner.load_item(contract, token_id, chain_id)
        return _record_payload(await engine.cancel(item))

    _run(ctx, command, {"status": "error"})


if __name__ == "__main__":
    main()
