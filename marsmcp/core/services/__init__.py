"""Application services (tool dispatch)."""
