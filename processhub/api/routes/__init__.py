"""
API route handlers for ProcessHub.

Each module exposes an ``APIRouter`` mounted under ``/api`` by the
application factory.
"""
