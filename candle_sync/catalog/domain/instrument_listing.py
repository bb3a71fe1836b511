from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class InstrumentListing:
    symbol: str
    name: str
    active: bool = True
    payout: Optional[float] = None
    category: Optional[str] = None
    type: str = "otc"


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    Result of one catalog load. source is "remote" or "builtin".
    """
    listings: Tuple[InstrumentListing, ...]
    source: str
    api_available: bool

    @property
    def symbols(self) -> Tuple[str, ...]:
        return tuple(listing.symbol for listing in self.listings)
