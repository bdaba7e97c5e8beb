"""
ASGI entry point.

Run with:
    uvicorn asgi:app --reload --port 4000
"""

from app import create_app

app = create_app()
