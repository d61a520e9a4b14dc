"""
HTTP API for ProcessHub.

This package provides the FastAPI application factory and route handlers.
"""
