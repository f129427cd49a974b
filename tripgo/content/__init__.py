"""Storefront content: site settings, hero banners, footer and static pages."""
