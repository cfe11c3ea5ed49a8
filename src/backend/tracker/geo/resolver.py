"""
IP geolocation backed by a MaxMind database.
"""

import ipaddress
import os
from dataclasses import dataclass

import geoip2.database
import geoip2.errors
from maxminddb.errors import InvalidDatabaseError

from tracker.core.exceptions import GeoResolverException

PREFERRED_DATABASE = "GeoLite2-City.mmdb"


@dataclass(frozen=True)
class GeoData:
    """Location of an IP address."""
    country: str | None
    region: str | None
    city: str | None
    zip: str | None
    lat: float | None
    lon: float | None


class MaxMindResolver:
    """Resolves IP addresses with a City database."""

    def __init__(self, reader: geoip2.database.Reader, path: str) -> None:
        self.reader = reader
        self.path = path

    def resolve(self, ip: str) -> GeoData | None:
        """
        Look up ``ip``.

        Returns:
            GeoData, or None for invalid or unknown addresses
        """
        try:
            ipaddress.ip_address(ip)
        except ValueError:
            return None

        try:
            response = self.reader.city(ip)
        except geoip2.errors.AddressNotFoundError:
            return None

        subdivision = response.subdivisions.most_specific
        return GeoData(
            country=response.country.iso_code,
            region=subdivision.iso_code,
            city=response.city.name,
            zip=response.postal.code,
            lat=response.location.latitude,
            lon=response.location.longitude,
        )

    def close(self) -> None:
        self.reader.close()

    def __repr__(self) -> str:
        return f"MaxMindResolver({self.path!r})"


def _find_database(path: str) -> str:
    if os.path.isfile(path):
        return path
    if not os.path.isdir(path):
        raise GeoResolverException(path, "no such file or directory")

    preferred = os.path.join(path, PREFERRED_DATABASE)
    if os.path.isfile(preferred):
        return preferred

    try:
        names = os.listdir(path)
    except OSError as e:
        raise GeoResolverException(path, str(e)) from e

    # City databases first, the resolver only answers city lookups
    candidates = sorted(
        (f for f in names if f.endswith(".mmdb")),
        key=lambda f: ("City" not in f, f),
    )
    if not candidates:
        raise GeoResolverException(path, "no .mmdb database found")
    return os.path.join(path, candidates[0])


def create_resolver(path: str) -> MaxMindResolver:
    """
    Open the MaxMind database at ``path`` (a .mmdb file or a directory holding one).

    Raises:
        GeoResolverException: nothing usable at ``path``
    """
    database = _find_database(path)
    try:
        reader = geoip2.database.Reader(database)
    except (OSError, InvalidDatabaseError, ValueError) as e:
        raise GeoResolverException(database, str(e)) from e

    database_type = reader.metadata().database_type
    if "City" not in database_type:
        reader.close()
        raise GeoResolverException(database, f"{database_type} is not a City database")
    return MaxMindResolver(reader, database)
