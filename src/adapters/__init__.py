"""Adapters: upstream HTTP client, mitmproxy request reader, JSON renderer."""
