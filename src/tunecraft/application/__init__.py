"""Application layer - services and background workers."""
