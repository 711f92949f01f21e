"""Extract the subject entity id from an admin console path."""

from typing import Optional


def entity_id_from_path(path: str, marker: str) -> Optional[str]:
    """
    Return the path segment immediately following ``marker``.

    /app/customers/cus_01/edit with marker "customers" -> "cus_01"

    Args:
        path: Browser-style path (query string and fragment are ignored)
        marker: Segment preceding the id, e.g. "customers" or "products"

    Returns:
        The id, or None if the marker is missing or nothing follows it
    """
    path = path.split("?", 1)[0].split("#", 1)[0]
    parts = path.split("/")
    try:
        index = parts.index(marker)
    except ValueError:
        return None
    if index + 1 >= len(parts):
        return None
    return parts[index + 1] or None


def last_segment(path: str) -> Optional[str]:
    """Return the last non-empty path segment, or None."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    parts = [part for part in path.split("/") if part]
    return parts[-1] if parts else None
