"""TripGo — multi-tenant travel booking platform backend."""

__version__ = "1.0.0"
