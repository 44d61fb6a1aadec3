"""Builds framework-free requests from mitmproxy flows."""
from typing import Optional
from urllib.parse import urlsplit
import json
import logging

from mitmproxy import http

from domain.value_objects import InboundRequest


def _parse_body(request: http.Request) -> dict:
    content_type = request.headers.get("content-type", "")
    if not request.content:
        return {}

    if "application/x-www-form-urlencoded" in content_type:
        return dict(request.urlencoded_form)

    if "json" in content_type or not content_type:
        try:
            data = json.loads(request.content)
        except ValueError as e:
            logging.warning(f"⚠️ Ignoring unparseable JSON body: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    return {}


def read_request(request: http.Request, path_params: Optional[dict] = None) -> InboundRequest:
    """Snapshot a mitmproxy request into an InboundRequest."""
    return InboundRequest(
        method=request.method.upper(),
        path=request_path(request),
        headers=dict(request.headers.items()),
        body=_parse_body(request),
        path_params=dict(path_params or {}),
        query=dict(request.query.items()),
        raw_body=request.content or b"",
        content_type=request.headers.get("content-type"),
    )


def request_path(request: http.Request) -> str:
    """Request path without the query string."""
    return urlsplit(request.path).path or "/"
