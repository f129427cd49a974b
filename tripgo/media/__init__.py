"""Media library: tenant-scoped file uploads."""
