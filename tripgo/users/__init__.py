"""Users — accounts scoped to a tenant."""
