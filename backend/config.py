# backend.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du backend panier.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose le contexte de présentation du panier (devise, locale)
- Normalise la configuration session/cookies et CORS/hosts
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

# Panier: contexte de présentation (non utilisé dans les calculs monétaires)
BASKET_CURRENCY = _clean_env(os.getenv("BASKET_CURRENCY") or "EUR").upper()
BASKET_LOCALE = _clean_env(os.getenv("BASKET_LOCALE") or "fr")

# Clé sous laquelle le snapshot du panier est rangé dans la session cookie
BASKET_SESSION_KEY = _clean_env(os.getenv("BASKET_SESSION_KEY") or "basket")

# Cookies / session
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "replace_me_with_a_long_random_secret")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]
