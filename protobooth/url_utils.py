"""Shared URL utilities — build capture URLs and derive stable screenshot names."""

from __future__ import annotations

from urllib.parse import urlparse


def build_capture_url(app_url: str, route_instance: str) -> str:
    """Join the application base URL and a concrete route path."""
    return f"{app_url.rstrip('/')}{route_instance}"


def screenshot_filename(route_instance: str, viewport_name: str) -> str:
    """Deterministic file name, so repeat runs overwrite instead of accumulating.

    ``/product/laptop`` at ``mobile`` -> ``product_laptop_mobile.png``; the
    root route is named ``index``.
    """
    route_path = "index" if route_instance == "/" else route_instance.lstrip("/")
    return f"{route_path.replace('/', '_')}_{viewport_name}.png"


def route_from_url(url: str) -> str:
    return urlparse(url).path or "/"
