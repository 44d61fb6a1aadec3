"""Application layer: credential resolution, routing policies and use cases."""
