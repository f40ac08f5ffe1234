"""Boundary adapters: HTTP service clients and client-local document storage."""
