"""
Middlewares transverses de l’application.
- register_basic_middlewares: session cookie (stockage du panier), CORS, TrustedHost.
- register_no_cache_middleware: empêche la mise en cache des réponses du panier.
Notes:
- La session est signée (itsdangerous) mais non chiffrée: le snapshot du panier
  ne contient que des identifiants, quantités et prix, jamais de données de paiement.
"""
from fastapi import Request, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.sessions import SessionMiddleware
from backend.config import COOKIE_SECURE, CORS_ORIGINS, ALLOWED_HOSTS, SESSION_SECRET_KEY

def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute les middlewares « de base »:
    - SessionMiddleware: session basée sur cookie, porte le snapshot du panier.
    - CORSMiddleware: autorise les origines définies (dev/prod).
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    """
    app.add_middleware(
        SessionMiddleware,
        secret_key=SESSION_SECRET_KEY,
        same_site="lax",
        https_only=COOKIE_SECURE,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )

def register_no_cache_middleware(app: FastAPI) -> None:
    """
    Empêche la mise en cache du panier:
    - S’applique au sous-arbre /api/v1/basket.
    - Ajoute les en-têtes Cache-Control/Pragma/Expires pour forcer le rechargement.
    """
    @app.middleware("http")
    async def no_cache_for_basket(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/v1/basket"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response
