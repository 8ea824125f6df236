"""Agregador de routers de la API."""
from fastapi import APIRouter

from app.api.routers import auth, health, papers, paths, prompts, recordings, tags

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(tags.router)
api_router.include_router(papers.router)
api_router.include_router(recordings.router)
api_router.include_router(paths.router)
api_router.include_router(prompts.router)
