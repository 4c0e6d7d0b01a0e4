"""Core utilities: exception hierarchy and output directory locking."""
