"""Shared HTTP helpers used by the registry clients.

Encapsulates request/timeout error handling and response caching so the
registry modules avoid duplicating try/except blocks. Failures never raise:
they come back as status code 0 with an explanatory body, and callers
decide what a failed lookup means for them.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from common.cache import CacheService
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from constants import Constants

logger = logging.getLogger(__name__)

_default_cache: Optional[CacheService] = None


def set_default_cache(cache: Optional[CacheService]) -> None:
    """Install the response cache used when callers do not pass one."""
    global _default_cache  # pylint: disable=global-statement
    _default_cache = cache


def _get_cache_key(url: str) -> str:
    return f"http:{url}"


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    cache: Optional[CacheService] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform a GET request with timeouts and caching, without retries.

    Returns:
        Tuple of (status_code, headers_dict, body). status_code is 0 when
        the request could not be completed.
    """
    cache = cache if cache is not None else _default_cache
    cache_key = _get_cache_key(url)
    safe_target = safe_url(url)

    if cache is not None:
        cached = cache.get(cache_key)
        if isinstance(cached, dict) and "text" in cached:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP cache hit",
                    extra=extra_context(
                        event="cache_hit",
                        component="http_client",
                        action="GET",
                        target=safe_target
                    )
                )
            return int(cached.get("status", 200)), dict(cached.get("headers") or {}), cached["text"]

    request_headers = {"User-Agent": Constants.USER_AGENT}
    if headers:
        request_headers.update(headers)

    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target
                )
            )
        try:
            response = requests.get(
                url,
                timeout=(Constants.CONNECT_TIMEOUT, Constants.REQUEST_TIMEOUT),
                headers=request_headers,
                **kwargs
            )
        except requests.Timeout:
            logger.debug(
                "HTTP timeout",
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    action="GET",
                    outcome="timeout",
                    target=safe_target
                )
            )
            return 0, {}, f"Request timed out after {Constants.REQUEST_TIMEOUT} seconds"
        except requests.RequestException as exc:  # includes ConnectionError
            logger.debug(
                "HTTP request exception",
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    action="GET",
                    outcome="request_exception",
                    target=safe_target
                )
            )
            return 0, {}, f"Request failed: {exc}"

    response_headers = dict(response.headers)
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="GET",
                status_code=response.status_code,
                duration_ms=t.duration_ms(),
                target=safe_target
            )
        )

    if cache is not None and response.status_code == 200:
        ttl = cache.cache_duration(response_headers)
        if ttl > 0:
            cache.set(
                cache_key,
                {"status": response.status_code, "headers": response_headers, "text": response.text},
                ttl=ttl,
            )

    return response.status_code, response_headers, response.text


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    cache: Optional[CacheService] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response.

    Args:
        url: Target URL
        headers: Optional request headers
        cache: Response cache; defaults to the one set with set_default_cache
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = robust_get(url, headers=headers, cache=cache, **kwargs)

    if status_code == 200 and text:
        try:
            return status_code, response_headers, json.loads(text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="json_decode_error",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, None

    return status_code, response_headers, None
