"""Asset metadata provider interface for the asset system of record."""

import logging
from typing import Any, Protocol

import httpx

from agencybridge.contracts.models import AssetMetadata
from agencybridge.core.errors import MetadataFetchError

logger = logging.getLogger(__name__)


class AssetMetadataProvider(Protocol):
    """Protocol for fetching asset metadata by host and repository path."""

    async def fetch_asset_metadata(self, host: str, path: str) -> AssetMetadata:
        """Fetch metadata for one asset.

        Args:
            host: Author host, without scheme
            path: Repository path of the asset

        Returns:
            AssetMetadata with ``jcr:uuid`` and ``jcr:content.metadata``
        """
        ...


class HttpAssetMetadataProvider:
    """Reads the asset JSON rendition (``<path>.3.json``) over HTTP."""

    def __init__(
        self,
        access_token: str | None = None,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.access_token = access_token
        self.timeout_seconds = timeout_seconds
        self.http_client = http_client

    def asset_url(self, host: str, path: str) -> str:
        host = host.removeprefix("https://").removeprefix("http://").rstrip("/")
        return f"https://{host}{path}.3.json"

    async def fetch_asset_metadata(self, host: str, path: str) -> AssetMetadata:
        """Fetch and parse the asset JSON.

        Raises:
            MetadataFetchError: On transport errors, non-2xx status or a body
                that is not a JSON object
        """
        url = self.asset_url(host, path)
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            if self.http_client is not None:
                response = await self.http_client.get(url, headers=headers, timeout=self.timeout_seconds)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(url, headers=headers)
            response.raise_for_status()
            data: Any = response.json()
        except httpx.HTTPStatusError as e:
            raise MetadataFetchError(
                f"Asset metadata request for {path} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise MetadataFetchError(f"Asset metadata request for {path} failed: {type(e).__name__}") from e
        except ValueError as e:
            raise MetadataFetchError(f"Asset metadata for {path} is not valid JSON") from e

        if not isinstance(data, dict):
            raise MetadataFetchError(f"Asset metadata for {path} is not a JSON object")

        logger.debug(f"Fetched asset metadata for {path}")
        return AssetMetadata.from_aem_json(data, asset_path=path)


class MockAssetMetadataProvider:
    """Mock implementation for testing without external calls."""

    def __init__(
        self,
        default_document: dict[str, Any] | None = None,
        call_counter: dict[str, int] | None = None,
    ) -> None:
        """Initialize mock provider.

        Args:
            default_document: AEM asset JSON returned for any path
            call_counter: Optional dict to track calls per path
        """
        self._default_document = default_document or {}
        self._documents: dict[str, dict[str, Any]] = {}
        self._presigned: dict[str, str] = {}
        self._call_counter = call_counter if call_counter is not None else {}

    def set_document_for_path(
        self, path: str, document: dict[str, Any], presigned_url: str | None = None
    ) -> None:
        """Configure the asset JSON (and optional presigned URL) for a path."""
        self._documents[path] = document
        if presigned_url is not None:
            self._presigned[path] = presigned_url

    def get_call_count(self, path: str | None = None) -> int:
        if path is not None:
            return self._call_counter.get(path, 0)
        return sum(self._call_counter.values())

    async def fetch_asset_metadata(self, host: str, path: str) -> AssetMetadata:
        """Return configured metadata for path (mock implementation)."""
        self._call_counter[path] = self._call_counter.get(path, 0) + 1
        document = self._documents.get(path, self._default_document)
        return AssetMetadata.from_aem_json(document, asset_path=path, presigned_url=self._presigned.get(path))
