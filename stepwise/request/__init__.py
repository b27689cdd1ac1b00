from .factory import (
    as_request,
    from_callback,
    from_coroutine,
    from_future,
    from_lazy,
    from_result,
    is_waitable,
    rejected,
    resolved,
)
from .request import AsyncRequest, RequestPolicy

__all__ = (
    "AsyncRequest",
    "RequestPolicy",
    "as_request",
    "from_callback",
    "from_coroutine",
    "from_future",
    "from_lazy",
    "from_result",
    "is_waitable",
    "rejected",
    "resolved",
)
