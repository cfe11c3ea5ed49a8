"""
Geolocation of client addresses.
"""

from tracker.geo.resolver import GeoData, MaxMindResolver, create_resolver

__all__ = ["GeoData", "MaxMindResolver", "create_resolver"]
