import os
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent

APP_NAME = os.getenv("APP_NAME", "Interactive Soil Health Map")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

# Database settings
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./soil_health.db")
SEED_SAMPLE_DATA = os.getenv("SEED_SAMPLE_DATA", "true").lower() in ("1", "true", "yes")

# Reference data files
DATA_DIR = os.path.join(BASE_DIR, "data")
SAMPLE_DISTRICTS_PATH = os.path.join(DATA_DIR, "sample_districts.json")
CROP_REFERENCE_PATH = os.path.join(DATA_DIR, "crop_reference.json")

# Auth
TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))

# HTTP
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
