from abc import ABC, abstractmethod
from typing import List

from candle_sync.catalog.domain.instrument_listing import InstrumentListing


class CatalogSource(ABC):
    @abstractmethod
    def health(self) -> bool:
        pass

    @abstractmethod
    def list_instruments(self) -> List[InstrumentListing]:
        """Raises CatalogError when the listing cannot be produced."""
        pass
