from .catalog_fetcher import CatalogFetcher, CatalogFetchError, build_http_session

__all__ = ["CatalogFetcher", "CatalogFetchError", "build_http_session"]
