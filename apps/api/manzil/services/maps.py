"""OpenStreetMap embed links for listing and project locations."""
from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlencode

OSM_EMBED_URL = "https://www.openstreetmap.org/export/embed.html"
OSM_VIEW_URL = "https://www.openstreetmap.org/"
BBOX_PADDING = 0.01
VIEW_ZOOM = 15


def _coordinate(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def build_map_links(location: Mapping[str, Any] | None) -> dict[str, str] | None:
    """Return embed and view URLs centred on the location, or None without coordinates."""

    if not location:
        return None
    lat = _coordinate(location.get("latitude"))
    lng = _coordinate(location.get("longitude"))
    if lat is None or lng is None:
        return None

    bbox = ",".join(
        f"{value:.6f}"
        for value in (lng - BBOX_PADDING, lat - BBOX_PADDING, lng + BBOX_PADDING, lat + BBOX_PADDING)
    )
    embed_query = urlencode({"bbox": bbox, "layer": "mapnik", "marker": f"{lat:.6f},{lng:.6f}"}, safe=",")
    view_query = urlencode({"mlat": f"{lat:.6f}", "mlon": f"{lng:.6f}", "zoom": VIEW_ZOOM})
    return {
        "embed_url": f"{OSM_EMBED_URL}?{embed_query}",
        "view_url": f"{OSM_VIEW_URL}?{view_query}",
    }
