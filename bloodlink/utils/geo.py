import math

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points given in degrees (haversine).

    Coordinates are not range-checked; out-of-range input yields a number,
    not an error.
    """
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dlon / 2) ** 2
    # rounding can push a a hair outside [0, 1]
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def has_coordinates(obj) -> bool:
    """True when both ``lat`` and ``lng`` are set on *obj*."""
    return getattr(obj, "lat", None) is not None and getattr(obj, "lng", None) is not None


def coordinates_of(obj) -> tuple[float, float] | None:
    if not has_coordinates(obj):
        return None
    return obj.lat, obj.lng
