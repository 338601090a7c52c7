"""
Memos API Client

Fetch memos and resources from a self-hosted Memos server.

Two API generations are supported. They differ only in endpoint paths and
pagination parameters; callers pick one with create_memos_client() and use
the same three operations afterwards.

Payloads are returned exactly as the server sends them. An error body
(e.g. {"code": 16, "message": "unauthenticated"}) comes back as data, the
caller decides what it means.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

logger = logging.getLogger(__name__)


class MemosClient(ABC):
    """Base client holding the shared HTTP session"""

    API_VERSION = ""

    def __init__(self, base_url: str, token: str = "", timeout: float | None = None):
        """
        Initialize Memos client

        Args:
            base_url: Memos server URL, e.g. https://memos.example.com
            token: Access token (sent as a Bearer token when set)
            timeout: Request timeout in seconds (None waits indefinitely)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

        logger.info(f"Memos client initialized ({self.API_VERSION}, {self.base_url})")

    def _get(self, path: str, params: dict[str, Any] | None = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} params={params}")
        response = self.session.get(url, params=params, timeout=self.timeout)
        if not response.ok:
            logger.warning(f"Memos API returned HTTP {response.status_code} for {path}")
        return response

    @staticmethod
    def _decode(response: requests.Response, raw: bool = False) -> Any:
        """
        Decode a response body as JSON

        Args:
            response: Server response
            raw: Fall back to the undecoded body bytes instead of text

        Returns:
            Parsed JSON, else the body as text (or bytes when raw is set)
        """
        try:
            return response.json()
        except ValueError:
            return response.content if raw else response.text

    @abstractmethod
    def page_params(self, page_index: int, page_size: int) -> dict[str, Any]:
        """fetch_memos_list() params for the zero-based page of normal (not archived) memos"""

    @abstractmethod
    def fetch_memos_list(self, params: dict[str, Any]) -> Any:
        """Fetch one page of memos"""

    @abstractmethod
    def fetch_resources_list(self) -> Any:
        """Fetch the resource list"""

    @abstractmethod
    def download_resource(self, resource_id: str) -> Any:
        """Download one resource; binary bodies come back as bytes"""


class MemosV1(MemosClient):
    """Memos API before the resources/memos rename (0.1x servers)"""

    API_VERSION = "v1"

    def page_params(self, page_index: int, page_size: int) -> dict[str, Any]:
        return {"limit": page_size, "offset": page_index * page_size, "rowStatus": "NORMAL"}

    def fetch_memos_list(self, params: dict[str, Any]) -> Any:
        """
        Fetch a page of memos

        Args:
            params: {"limit": int, "offset": int, "rowStatus": "NORMAL"}

        Returns:
            List of memo dictionaries, or the server's error payload
        """
        return self._decode(self._get("/api/v1/memo", params=params))

    def fetch_resources_list(self) -> Any:
        return self._decode(self._get("/api/v1/resource"))

    def download_resource(self, resource_id: str) -> bytes:
        """Download raw resource bytes"""
        return self._get(f"/o/r/{resource_id}").content


class MemosV2(MemosClient):
    """Memos API with page/pageSize pagination and filter expressions"""

    API_VERSION = "v2"
    NORMAL_FILTER = 'row_status == "NORMAL"'

    def page_params(self, page_index: int, page_size: int) -> dict[str, Any]:
        return {"page": page_index + 1, "pageSize": page_size, "filter": self.NORMAL_FILTER}

    def fetch_memos_list(self, params: dict[str, Any]) -> Any:
        """
        Fetch a page of memos

        Args:
            params: {"page": int, "pageSize": int, "filter": str}

        Returns:
            Memo list payload, or the server's error payload
        """
        return self._decode(self._get("/api/v1/memos", params=params))

    def fetch_resources_list(self) -> Any:
        return self._decode(self._get("/api/v1/resources"))

    def download_resource(self, resource_id: str) -> Any:
        """
        Download a resource

        Returns:
            Parsed JSON for a JSON body (e.g. an error payload), else the raw bytes
        """
        return self._decode(self._get(f"/api/v1/resources/{resource_id}"), raw=True)


MEMOS_CLIENTS: dict[str, type[MemosClient]] = {
    MemosV1.API_VERSION: MemosV1,
    MemosV2.API_VERSION: MemosV2,
}


def create_memos_client(
    version: str, base_url: str, token: str = "", timeout: float | None = None
) -> MemosClient:
    """
    Create the client for a Memos API version

    Args:
        version: "v1" or "v2"
        base_url: Memos server URL
        token: Access token
        timeout: Request timeout in seconds

    Returns:
        MemosClient instance

    Raises:
        ValueError: If the version is not supported
    """
    client_class = MEMOS_CLIENTS.get(version)
    if client_class is None:
        raise ValueError(f"Unsupported Memos API version: {version!r} (expected v1 or v2)")

    return client_class(base_url, token=token, timeout=timeout)
