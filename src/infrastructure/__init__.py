"""Infrastructure: configuration and dependency wiring."""
