"""
Distancias sobre la esfera.

- haversine_km: distancia de gran círculo, la que puntúa la similitud.
- bounding_box: aproximación rápida en grados, SOLO para pre-filtrar
  candidatos en el store. No usar para puntuar.
"""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0

# 1 grado ~ 1/0.009 km (~111 km)
DEGREES_PER_KM = 0.009


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distancia de gran círculo en kilómetros."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True)
class BoundingBox:
    """Caja lat/lng alrededor de un punto."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


def bounding_box(latitude: float, longitude: float, radius_km: float) -> BoundingBox:
    """Caja de ``radius_km`` alrededor del punto usando la aproximación en grados."""
    delta = radius_km * DEGREES_PER_KM
    return BoundingBox(
        min_lat=latitude - delta,
        max_lat=latitude + delta,
        min_lng=longitude - delta,
        max_lng=longitude + delta,
    )
