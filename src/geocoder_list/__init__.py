"""Geocoder list: one geocoding façade over an ordered list of backends."""

__version__ = "0.1.0"
