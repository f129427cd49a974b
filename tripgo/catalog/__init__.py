"""Catalog — cruises, cruise categories and departures, hotels, packages, reviews."""
