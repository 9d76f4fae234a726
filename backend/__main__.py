"""
Point d'entrée principal de l'API panier.

Usage:
    python -m backend

Ce mode lance uvicorn directement et lit quelques variables d'environnement:
- HOST / PORT: interface et port d'écoute (par défaut 0.0.0.0:8000)
- UVICORN_RELOAD: active le reload auto en dev ("1"/"true"/"yes")
- LOG_LEVEL: niveau de logs (uvicorn et loggers backend.*)
"""
import logging
import os
import uvicorn

if __name__ == "__main__":
    log_level = os.environ.get("LOG_LEVEL", "info")
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # Activer le reload uniquement si explicitement demandé (ex: en local)
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "backend.asgi:app",  # on réutilise l'ASGI app unique
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=reload_flag,
        log_level=log_level,
    )
