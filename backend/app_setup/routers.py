"""
Registre central des routers.
- API v1: basket
- Health: health_router
"""
from fastapi import FastAPI
from backend.basket import views as basket_views
from backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l’application.
    - L’ordre n’a pas d’impact sauf conflits de chemins (évités par préfixes).
    """
    # API v1
    app.include_router(basket_views.router)
    # Health & monitoring
    app.include_router(health_router)
