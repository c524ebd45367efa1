"""Router aggregation: one APIRouter per resource, all mounted under /api."""

from fastapi import FastAPI

from . import auth, budgets, categories, goals, preferences, transactions


def register_routers(app: FastAPI) -> None:
    """Attach all API routes to the FastAPI application."""

    app.include_router(auth.router, prefix="/api")
    app.include_router(transactions.router, prefix="/api")
    app.include_router(categories.router, prefix="/api")
    app.include_router(budgets.router, prefix="/api")
    app.include_router(goals.router, prefix="/api")
    app.include_router(preferences.router, prefix="/api")
