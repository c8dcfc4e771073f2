import os
from dotenv import load_dotenv

load_dotenv()

PORT = int(os.environ.get("PORT", 5001))
DEBUG = os.environ.get("RENDER") is None  # debug only when running locally
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-portfolio-insights-key")

ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")

# Natural-language reasoning collaborator
REASONING_PROVIDER = os.environ.get("REASONING_PROVIDER", "anthropic")
REASONING_MODEL = os.environ.get("REASONING_MODEL", "")
REASONING_TIMEOUT = float(os.environ.get("REASONING_TIMEOUT", 20))
REASONING_MAX_WORKERS = int(os.environ.get("REASONING_MAX_WORKERS", 4))

# Platform property/lease REST API
PROPERTY_API_URL = os.environ.get("PROPERTY_API_URL", "http://localhost:5000/api")
PROPERTY_API_KEY = os.environ.get("PROPERTY_API_KEY", "")
PROPERTY_API_TIMEOUT = float(os.environ.get("PROPERTY_API_TIMEOUT", 15))

AI_FORECASTING = os.environ.get("AI_FORECASTING", "false").lower() == "true"
AI_TURNOVER_PREDICTOR = os.environ.get("AI_TURNOVER_PREDICTOR", "false").lower() == "true"

# Forecast policy overrides
FORECAST_RENEWAL_RATE = float(os.environ.get("FORECAST_RENEWAL_RATE", 0.8))
FORECAST_MAINTENANCE_INFLATION = float(os.environ.get("FORECAST_MAINTENANCE_INFLATION", 0.002))
FORECAST_OCCUPANCY_FLOOR = float(os.environ.get("FORECAST_OCCUPANCY_FLOOR", 0.7))
