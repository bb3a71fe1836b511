import logging
from threading import Lock
from typing import Optional

from candle_sync.catalog.domain.catalog_errors import CatalogError
from candle_sync.catalog.domain.instrument_listing import CatalogSnapshot, InstrumentListing
from candle_sync.catalog.interfaces.catalog_source import CatalogSource
from candle_sync.catalog.providers.static_catalog import StaticCatalogSource

logger = logging.getLogger(__name__)


class InstrumentCatalogService:
    """
    Loads the tradable instrument list from a remote source, keeping
    only listings whose payout meets the minimum. Any remote failure
    falls back to the built-in list.
    """

    def __init__(
        self,
        remote: Optional[CatalogSource] = None,
        fallback: Optional[CatalogSource] = None,
        min_payout: float = 85.0,
    ):
        self.remote = remote
        self.fallback = fallback or StaticCatalogSource()
        self.min_payout = min_payout
        self._last: Optional[CatalogSnapshot] = None
        self._lock = Lock()

    def load(self) -> CatalogSnapshot:
        snapshot = self._load_remote() or CatalogSnapshot(
            listings=tuple(self.fallback.list_instruments()),
            source="builtin",
            api_available=False,
        )
        with self._lock:
            self._last = snapshot
        logger.info("Loaded %d instruments from %s catalog", len(snapshot.listings), snapshot.source)
        return snapshot

    def snapshot(self) -> CatalogSnapshot:
        with self._lock:
            last = self._last
        return last or self.load()

    def find(self, symbol: str) -> Optional[InstrumentListing]:
        for listing in self.snapshot().listings:
            if listing.symbol == symbol:
                return listing
        return None

    def _load_remote(self) -> Optional[CatalogSnapshot]:
        if self.remote is None:
            return None
        if not self.remote.health():
            logger.warning("Instrument catalog unavailable; using built-in list")
            return None
        try:
            listings = self.remote.list_instruments()
        except CatalogError as exc:
            logger.warning("Instrument catalog failed (%s); using built-in list", exc)
            return None

        eligible = [l for l in listings if (l.payout or 0) >= self.min_payout]
        return CatalogSnapshot(
            listings=tuple(eligible or listings),
            source="remote",
            api_available=True,
        )
