"""Checkout — cruise price calculator and quotes."""
