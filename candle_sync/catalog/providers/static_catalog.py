from typing import List, Tuple

from candle_sync.catalog.domain.instrument_listing import InstrumentListing
from candle_sync.catalog.interfaces.catalog_source import CatalogSource

_BUILTIN_PAIRS = (
    "AUDCAD", "AUDCHF", "AUDJPY", "AUDNZD", "AUDUSD",
    "CADCHF", "CADJPY", "CHFJPY",
    "EURAUD", "EURCAD", "EURCHF", "EURGBP", "EURJPY", "EURNZD", "EURUSD",
    "GBPAUD", "GBPCAD", "GBPCHF", "GBPJPY", "GBPNZD", "GBPUSD",
    "NZDCAD", "NZDCHF", "NZDJPY", "NZDUSD",
    "USDCAD", "USDCHF", "USDJPY",
)


def format_otc_symbol(symbol: str) -> str:
    """EURUSD_otc -> EUR/USD OTC"""
    base = symbol.replace("_otc", "")
    if len(base) == 6 and base.isalpha():
        base = f"{base[:3]}/{base[3:]}"
    return f"{base} OTC"


BUILTIN_LISTINGS: Tuple[InstrumentListing, ...] = tuple(
    InstrumentListing(
        symbol=f"{pair}_otc",
        name=format_otc_symbol(f"{pair}_otc"),
        active=True,
        category="forex",
    )
    for pair in _BUILTIN_PAIRS
)


class StaticCatalogSource(CatalogSource):
    """
    Fixed forex OTC list used when no remote catalog answers.
    """

    def health(self) -> bool:
        return True

    def list_instruments(self) -> List[InstrumentListing]:
        return list(BUILTIN_LISTINGS)
