"""News articles scoped to branches."""
