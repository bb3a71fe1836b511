import logging
from typing import Any, Dict, List

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from candle_sync.catalog.domain.catalog_errors import CatalogFormatError, CatalogUnavailableError
from candle_sync.catalog.domain.instrument_listing import InstrumentListing
from candle_sync.catalog.interfaces.catalog_source import CatalogSource

logger = logging.getLogger(__name__)


class HttpInstrumentCatalogClient(CatalogSource):
    """
    HTTP client for the local instrument catalog service.
    Retries transient server errors and normalizes failures to CatalogError.
    """

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 3.0, max_retries: int = 2):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = self._create_session(max_retries)

    def _create_session(self, max_retries: int) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=0.5,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def health(self) -> bool:
        try:
            response = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"Catalog health check failed: {e}")
            return False
        return response.status_code == 200

    def list_instruments(self) -> List[InstrumentListing]:
        payload = self._get("/otc")
        if not isinstance(payload, list):
            raise CatalogFormatError("Expected a list of instruments")
        return [self._parse_listing(item) for item in payload]

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Catalog network error: {e}")
            raise CatalogUnavailableError(f"Request failed: {str(e)}") from e

        if response.status_code != 200:
            raise CatalogUnavailableError(f"Catalog answered HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Catalog invalid JSON: {e}")
            raise CatalogFormatError("Invalid JSON response") from e

    def _parse_listing(self, item: Dict[str, Any]) -> InstrumentListing:
        if not isinstance(item, dict) or not item.get("symbol"):
            raise CatalogFormatError(f"Instrument entry without symbol: {item!r}")
        payout = item.get("payout")
        try:
            payout = float(payout) if payout is not None else None
        except (TypeError, ValueError):
            payout = None
        symbol = str(item["symbol"])
        return InstrumentListing(
            symbol=symbol,
            name=str(item.get("name") or symbol),
            active=bool(item.get("active", True)),
            payout=payout,
            category=item.get("category"),
            type=str(item.get("type") or "otc"),
        )
