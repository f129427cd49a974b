"""Auth — password login, JWT sessions, RBAC dependencies."""
