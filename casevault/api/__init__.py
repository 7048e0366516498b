"""API router registry used by the app factory."""

from __future__ import annotations

from fastapi import APIRouter

from . import audit, content, health

API_PREFIX = "/api/v1"

API_ROUTERS: tuple[APIRouter, ...] = (
    health.router,
    content.router,
    audit.router,
)

__all__ = ["API_PREFIX", "API_ROUTERS"]
