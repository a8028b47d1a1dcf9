from __future__ import annotations

from typing import List, Optional

from .entities import Place

_SETTLEMENT_KEYS = ("city", "town", "village", "hamlet")


def place_name(place: Place) -> Optional[str]:
    """Settlement name of a reverse lookup, falling back to the display name."""
    for key in _SETTLEMENT_KEYS:
        value = place.address.get(key)
        if value:
            return value
    return place.display_name or None


def place_label(place: Place) -> str:
    """Label for a search suggestion: ``"primary, municipality, county, state"``."""
    address = place.address
    primary = (
        place_name(place)
        or address.get("neighbourhood")
        or address.get("suburb")
        or place.display_name
    )
    municipality = address.get("municipality")
    county = address.get("county")
    state = address.get("state") or address.get("state_district")
    parts: List[str] = []
    if municipality and municipality != primary:
        parts.append(municipality)
    if county and county not in (primary, municipality):
        parts.append(county)
    if state and state not in (county, municipality):
        parts.append(state)
    if not parts:
        return primary
    return f"{primary}, {', '.join(parts)}"


def coordinate_label(latitude: float, longitude: float, precision: int = 5) -> str:
    return f"{latitude:.{precision}f},{longitude:.{precision}f}"


__all__ = ["place_name", "place_label", "coordinate_label"]
