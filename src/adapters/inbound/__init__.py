"""Inbound adapters."""
from .mitmproxy_request_reader import read_request, request_path

__all__ = [
    'read_request',
    'request_path',
]
