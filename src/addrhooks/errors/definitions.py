"""Registry error definitions surfaced verbatim to API and CLI callers."""

from __future__ import annotations

from addrhooks.errors.hook_errors import HookError

# -- Validation ------------------------------------------------------------

ErrBadAddress = HookError("invalid address", status_code=400, code="invalid-address")
ErrInvalidURL = HookError("not a valid url", status_code=400, code="invalid-url")

# -- Registry --------------------------------------------------------------

ErrDuplicateURL = HookError("url is already in the list", status_code=409, code="duplicate-url")
ErrNoCallbacks = HookError(
    "no callbacks listed for address", status_code=404, code="no-callbacks"
)
ErrCallbackNotFound = HookError(
    "cannot find the callback url for deletion", status_code=404, code="callback-not-found"
)

# -- Service ---------------------------------------------------------------

ErrEngineUnavailable = HookError(
    "service is not ready", status_code=503, code="engine-unavailable"
)
