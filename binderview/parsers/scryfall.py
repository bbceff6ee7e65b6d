"""
Scryfall bulk data loader.

Downloads and caches Scryfall's default-cards bulk file, which holds one
record per printing (every language, tokens included).

Bulk data: https://scryfall.com/docs/api/bulk-data
"""

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from binderview.config import BULK_FILE_NAME, settings

logger = logging.getLogger(__name__)

USER_AGENT = "binderview/0.1"

# Stream download due to file size
CHUNK_SIZE = 64 * 1024


class BulkDataError(Exception):
    """Raised when the bulk data cannot be fetched or is not usable."""

    pass


def _make_client(retries: int, timeout: float) -> httpx.AsyncClient:
    transport = httpx.AsyncHTTPTransport(retries=retries)
    return httpx.AsyncClient(
        transport=transport,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        follow_redirects=True,
    )


async def get_bulk_data_url(client: httpx.AsyncClient, metadata_url: str) -> str:
    """
    Fetch the download URL for the default-cards bulk file.

    Args:
        client: HTTP client
        metadata_url: Bulk-data metadata endpoint

    Returns:
        URL to download the bulk JSON file

    Raises:
        BulkDataError: If the request fails or the response has no download_uri
    """
    try:
        response = await client.get(metadata_url)
        response.raise_for_status()
        meta = response.json()
    except httpx.HTTPStatusError as e:
        raise BulkDataError(
            f"Failed to fetch bulk data metadata: HTTP {e.response.status_code}"
        ) from e
    except httpx.RequestError as e:
        raise BulkDataError(f"Failed to fetch bulk data metadata: {e}") from e
    except ValueError as e:
        raise BulkDataError("Bulk data metadata is not valid JSON") from e

    download_uri = meta.get("download_uri") if isinstance(meta, dict) else None
    if not download_uri:
        raise BulkDataError("Download URI not found in Scryfall bulk data metadata")

    return str(download_uri)


def _remove_partial(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Failed to clean up partial cache file %s: %s", path, e)


async def download_bulk_data(
    output_path: Path,
    client: httpx.AsyncClient | None = None,
    metadata_url: str | None = None,
) -> Path:
    """
    Download the bulk file to output_path.

    The body is streamed to a temporary ".part" file and moved into place
    only once complete. On failure the partial file is removed and any
    previously cached copy is left untouched.

    Args:
        output_path: Where to save the JSON file
        client: HTTP client. A retrying client is created when omitted.
        metadata_url: Metadata endpoint, defaults to settings.scryfall_bulk_url

    Returns:
        output_path

    Raises:
        BulkDataError: If the metadata or the download fails
    """
    metadata_url = metadata_url or settings.scryfall_bulk_url
    output_path.parent.mkdir(parents=True, exist_ok=True)
    partial_path = output_path.with_name(output_path.name + ".part")

    owns_client = client is None
    if client is None:
        client = _make_client(settings.http_retries, settings.http_timeout)

    try:
        download_url = await get_bulk_data_url(client, metadata_url)
        logger.info("Downloading Scryfall bulk data from %s", download_url)

        async with client.stream("GET", download_url, timeout=300.0) as response:
            response.raise_for_status()
            with open(partial_path, "wb") as f:
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    f.write(chunk)
        partial_path.replace(output_path)
    except httpx.HTTPStatusError as e:
        _remove_partial(partial_path)
        raise BulkDataError(
            f"Failed to download bulk data file: HTTP {e.response.status_code}"
        ) from e
    except httpx.RequestError as e:
        _remove_partial(partial_path)
        raise BulkDataError(f"Failed to download bulk data file: {e}") from e
    except (BulkDataError, OSError):
        _remove_partial(partial_path)
        raise
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Bulk data cached at %s", output_path)
    return output_path


async def ensure_bulk_data(
    cache_dir: Path | None = None,
    *,
    refresh: bool = False,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """
    Return the cached bulk file, downloading it on a cache miss.

    Args:
        cache_dir: Cache directory, defaults to settings.cache_dir
        refresh: Download even when a cached copy exists
        client: HTTP client passed through to the download

    Returns:
        Path to the cached bulk file.
    """
    cache_dir = cache_dir or settings.cache_dir
    bulk_path = cache_dir / BULK_FILE_NAME

    if bulk_path.exists() and not refresh:
        logger.info("Using cached Scryfall bulk data from %s", bulk_path)
        return bulk_path

    logger.info("Cache miss, downloading Scryfall bulk data to %s", bulk_path)
    return await download_bulk_data(bulk_path, client=client)


def load_reference_records(bulk_data_path: Path) -> list[dict[str, Any]]:
    """
    Load the Scryfall records from a bulk file.

    Args:
        bulk_data_path: Path to downloaded Scryfall bulk JSON

    Returns:
        List of Scryfall card dicts

    Raises:
        BulkDataError: If the file is unreadable or is not a list of objects
    """
    try:
        with open(bulk_data_path, encoding="utf-8") as f:
            cards = json.load(f)
    except OSError as e:
        raise BulkDataError(f"Failed to read bulk data cache {bulk_data_path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BulkDataError(f"Bulk data cache {bulk_data_path} is not valid JSON: {e}") from e

    if not isinstance(cards, list) or not all(isinstance(card, dict) for card in cards):
        raise BulkDataError(f"Bulk data in {bulk_data_path} is not a list of card objects")

    logger.info("Loaded %d Scryfall records", len(cards))
    return cards
