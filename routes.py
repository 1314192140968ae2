# routes.py
from fastapi import FastAPI
from controller.check_controller import check_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(check_router)
