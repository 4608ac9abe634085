"""Events scoped to branches."""
