class CatalogError(Exception):
    """Base class for instrument catalog errors."""
    pass


class CatalogUnavailableError(CatalogError):
    """Catalog endpoint unreachable or answered with an error status."""
    pass


class CatalogFormatError(CatalogError):
    """Catalog answered with a payload that is not a list of instruments."""
    pass
