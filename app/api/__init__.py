# api/__init__.py
from fastapi import FastAPI

from . import routes_chat, routes_health

def init_routers(app: FastAPI) -> None:
    """Include all API routers into the main app."""
    app.include_router(routes_chat.router)
    app.include_router(routes_health.router)
