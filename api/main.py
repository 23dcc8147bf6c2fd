"""
Comandas Pricing API - Main Application.

FastAPI application exposing the order pricing core, with CORS enabled for
the point-of-sale frontend.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from services.settings import configure_logging

configure_logging()

# Create FastAPI application
app = FastAPI(
    title="Comandas Pricing API",
    description="Order repricing with automatic promotions and manual discounts",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# TODO: Restrict origins once the frontend host is fixed per environment
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "comandas-pricing-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Comandas Pricing API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import pricing

app.include_router(pricing.router, prefix="/api/v1", tags=["Pricing"])
