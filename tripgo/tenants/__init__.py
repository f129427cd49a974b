"""Tenants — organisations that own users, catalog and content."""
