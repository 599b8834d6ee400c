"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prediction_arena.config import settings
from prediction_arena.api.routes.battles import router as battles_router
from prediction_arena.api.routes.ratings import router as ratings_router

logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)

app = FastAPI(
    title="Prediction Arena",
    description="Debate battle scoring and resolution engine",
    version="0.1.0",
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "prediction-arena"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Prediction Arena API",
        "version": "0.1.0",
        "docs": "/docs",
    }


# Register routers
app.include_router(battles_router)
app.include_router(ratings_router)
