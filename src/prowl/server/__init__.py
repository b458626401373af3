"""Serving layer — the request dispatcher and its Chirp mount."""

from prowl.server.dispatcher import (
    DATA_MARKER,
    DispatchResult,
    Dispatcher,
    RouterState,
    is_data_request,
)

__all__ = ["DATA_MARKER", "DispatchResult", "Dispatcher", "RouterState", "is_data_request"]
