"""Tenant admin dashboard."""
