"""HTTP API for the Forum Stage application."""
