"""KostMan backend: rooms, meter readings, prorated bills and payments."""


def get_app():
    """Import and return the FastAPI app on demand.

    Alembic and the migration helpers import ``backend.app`` packages without
    needing the routers, so the application is never built at import time.
    """

    from .main import app

    return app


__all__ = ["get_app"]
