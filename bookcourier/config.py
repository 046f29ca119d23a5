import os
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env from the project root
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bookcourier.db")

JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

SITE_DOMAIN = os.getenv("SITE_DOMAIN", "http://localhost:5173")
CHECKOUT_CURRENCY = os.getenv("CHECKOUT_CURRENCY", "bdt")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
