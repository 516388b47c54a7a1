from .cache import RequestCache
from .client import ApiClient, ApiError

__all__ = ["ApiClient", "ApiError", "RequestCache"]
