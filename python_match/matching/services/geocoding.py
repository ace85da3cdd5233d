"""
Postal code geocoding for distance-based scoring.

The default geocoder is a static, read-only table covering the primary
service region (Colorado) plus a sample of major metro ZIP codes. A lookup
miss is not an error: callers skip distance scoring and rely on exact ZIP
matching only.
"""
import logging
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class Coordinates(NamedTuple):
    lat: float
    lng: float


ZIP_COORDINATES: Mapping[str, Coordinates] = MappingProxyType({
    # Arizona
    '85001': Coordinates(33.4484, -112.0740),
    '85002': Coordinates(33.4734, -112.0876),
    '85003': Coordinates(33.4455, -112.0952),
    '85004': Coordinates(33.4734, -112.0550),
    '85251': Coordinates(33.4990, -111.9193),
    '85281': Coordinates(33.4200, -111.9300),
    '85301': Coordinates(33.5387, -112.1859),
    '86001': Coordinates(35.2000, -111.6500),
    '86004': Coordinates(35.2100, -111.8200),
    '86301': Coordinates(34.5400, -112.4700),
    # California
    '90024': Coordinates(34.0628, -118.4426),
    '90210': Coordinates(34.0901, -118.4065),
    '90211': Coordinates(34.0823, -118.4009),
    '91101': Coordinates(34.1478, -118.1445),
    '92101': Coordinates(32.7157, -117.1611),
    '94102': Coordinates(37.7749, -122.4194),
    # Colorado
    '80202': Coordinates(39.7547, -105.0178),
    '80301': Coordinates(40.0150, -105.2705),
    '80904': Coordinates(38.8339, -104.8214),
    '81615': Coordinates(39.6403, -106.3742),
    '81620': Coordinates(39.1911, -106.8175),
    # Florida
    '32801': Coordinates(28.5383, -81.3792),
    '33101': Coordinates(25.7617, -80.1918),
    '33102': Coordinates(25.7814, -80.1398),
    '33139': Coordinates(25.7907, -80.1300),
    '33301': Coordinates(26.1224, -80.1373),
    # Texas
    '75201': Coordinates(32.7811, -96.7972),
    '75202': Coordinates(32.7767, -96.8089),
    '77001': Coordinates(29.7604, -95.3698),
    '78701': Coordinates(30.2672, -97.7431),
    # New York
    '10001': Coordinates(40.7505, -73.9980),
    '10002': Coordinates(40.7209, -73.9876),
    '11201': Coordinates(40.6928, -73.9903),
    # Illinois
    '60601': Coordinates(41.8781, -87.6298),
    '60602': Coordinates(41.8794, -87.6392),
    '60611': Coordinates(41.8918, -87.6224),
    # Georgia
    '30301': Coordinates(33.7490, -84.3880),
    '30303': Coordinates(33.7490, -84.3880),
    '30309': Coordinates(33.7901, -84.3902),
    # Washington
    '98101': Coordinates(47.6062, -122.3321),
    '98102': Coordinates(47.6237, -122.3017),
    # Massachusetts
    '02101': Coordinates(42.3584, -71.0598),
    '02108': Coordinates(42.3751, -71.0603),
})


class StaticZipGeocoder:
    """Resolves ZIP codes against an in-memory table."""

    def __init__(self, table: Optional[Mapping[str, Coordinates]] = None):
        self._table = MappingProxyType(dict(table)) if table is not None else ZIP_COORDINATES

    def resolve(self, postal_code: Optional[str]) -> Optional[Coordinates]:
        if not postal_code:
            return None
        coordinates = self._table.get(str(postal_code).strip())
        if coordinates is None:
            logger.debug(f"No coordinates for postal code {postal_code}")
        return coordinates


def get_geocoder():
    """
    Build the geocoder configured in MATCHING_GEOCODER.

    Any class exposing ``resolve(postal_code) -> Coordinates | None`` can be
    plugged in, e.g. a client for a hosted geocoding provider.
    """
    geocoder_path = getattr(
        settings,
        'MATCHING_GEOCODER',
        'matching.services.geocoding.StaticZipGeocoder'
    )
    return import_string(geocoder_path)()
