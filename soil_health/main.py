"""
Interactive Soil Health Map API.

Run with ``uvicorn soil_health.main:app``.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from soil_health.config import APP_NAME, APP_VERSION, CORS_ORIGINS, LOG_LEVEL, SEED_SAMPLE_DATA
from soil_health.core.exceptions import RecommendationValidationError
from soil_health.database import init_db
from soil_health.routers import auth, dashboard, map, recommendations

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_ENDPOINTS = {
    "health": "/health",
    "auth": "/api/auth",
    "map": "/api/map",
    "dashboard": "/api/dashboard",
    "recommendations": "/api/recommendations",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")
    init_db(seed=SEED_SAMPLE_DATA)
    yield
    logger.info(f"Shutting down {APP_NAME}")


app = FastAPI(
    title=APP_NAME,
    description="District soil nutrient map, dashboard and fertilizer recommendations",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(map.router)
app.include_router(dashboard.router)
app.include_router(recommendations.router)


@app.exception_handler(RecommendationValidationError)
async def recommendation_validation_handler(request: Request, exc: RecommendationValidationError):
    logger.info(f"Rejected recommendation request on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.get("/health")
def health():
    return {
        "status": "UP",
        "application": APP_NAME,
        "version": APP_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
    }


def api_info():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "endpoints": API_ENDPOINTS,
    }


@app.get("/api")
def api_root():
    return api_info()


@app.get("/")
def read_root():
    return api_info()
