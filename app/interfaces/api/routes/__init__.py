from fastapi import FastAPI

from .activity import router as activity_router


def register_routes(app: FastAPI) -> None:
    """Registra todos los routers de la API en la aplicación FastAPI."""

    app.include_router(activity_router)
