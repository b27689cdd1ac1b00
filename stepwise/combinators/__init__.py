from .aggregate import all_
from .cache import CachePolicy, RequestCache, caching_request_factory

__all__ = ("CachePolicy", "RequestCache", "all_", "caching_request_factory")
