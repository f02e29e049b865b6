"""Shared HTTP helpers used by the alignment service client.

Encapsulates request/timeout error handling so callers avoid duplicating
try/except blocks. Transport failures are raised as AlignmentServiceError
so the build sees a single failure outcome.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from constants import Constants
from common.errors import AlignmentServiceError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_post(
    url: str,
    *,
    context: str,
    data: Optional[str] = None,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a POST request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "alignment batch 2/3").
        data: Optional payload for the POST body.
        timeout: Seconds before the transport gives up; defaults to
            Constants.REQUEST_TIMEOUT.
        **kwargs: Passed through to requests.post.

    Returns:
        requests.Response: The HTTP response object.

    Raises:
        AlignmentServiceError: On timeout or any connection-level failure.
    """
    safe_target = safe_url(url)
    effective_timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="POST",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.post(url, data=data, timeout=effective_timeout, **kwargs)
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                effective_timeout,
            )
            raise AlignmentServiceError(
                f"{context}: request to {safe_target} timed out after {effective_timeout} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise AlignmentServiceError(
                f"{context}: connection error talking to {safe_target}: {exc}"
            ) from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="POST",
                    outcome="success",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res
