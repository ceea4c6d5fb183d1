"""HTTP API: app factory, middleware and dependency wiring."""
