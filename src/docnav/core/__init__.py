"""Core content model and navigation resolution."""
