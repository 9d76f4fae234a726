"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- Un process manager (uvicorn, gunicorn + UvicornWorker, hypercorn) importe `backend.asgi:app`.
- La construction de l'app (middlewares session/CORS, handlers d'erreurs panier, routers)
  est centralisée dans backend.app_setup.factory; ce fichier n'expose que l'instance.
"""

from backend.app import app

__all__ = ["app"]
