"""
Route Key - Lane identifier joining demand and supply.
"""
from typing import Optional

from ..exceptions import ValidationError


def build_route_key(pickup_code: Optional[str], dropoff_code: Optional[str]) -> str:
    """
    Build the route key for a lane from its location codes.

    Example: ('ruh', 'JED') -> 'RUHJED'
    """
    pickup = (pickup_code or "").strip().upper()
    dropoff = (dropoff_code or "").strip().upper()
    if not pickup:
        raise ValidationError("pickup_code", "location code is required")
    if not dropoff:
        raise ValidationError("dropoff_code", "location code is required")
    return f"{pickup}{dropoff}"


def require_route_key(route_key: Optional[str]) -> str:
    """Precondition for aggregation: rows must carry a non-empty route key."""
    assert route_key and route_key.strip(), "rows without a route key must be filtered out before aggregation"
    return route_key
