"""FastAPI application exposing the discovery runtime for inspection."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .errors import InvalidConstraintError, MissingExtensionError
from .runtime import DiscoveryRuntime


class PreferRequest(BaseModel):
    package: str = Field(..., description="Candidate package to move to the front")


def create_app(runtime: DiscoveryRuntime) -> FastAPI:
    app = FastAPI(title="capdiscover admin", version="0.1.0")

    def registry_or_404(name: str):
        try:
            return runtime.capability(name)
        except MissingExtensionError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/health")
    async def get_health() -> Dict[str, Any]:
        return {"status": "ok", "capabilities": len(runtime.capabilities())}

    @app.get("/api/capabilities")
    async def list_capabilities() -> Dict[str, Any]:
        return {"capabilities": [runtime.capability(name).describe() for name in runtime.capabilities()]}

    @app.get("/api/capabilities/{name}")
    async def capability_details(name: str) -> Dict[str, Any]:
        registry = registry_or_404(name)
        data = registry.describe()
        data["known"] = [str(c) for c in runtime.known_candidates(name)]
        try:
            data["explain"] = registry.explain()
        except InvalidConstraintError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return data

    @app.post("/api/capabilities/{name}/prefer")
    async def prefer_candidate(name: str, request: PreferRequest) -> Dict[str, Any]:
        registry = registry_or_404(name)
        if not registry.candidates().has(request.package.strip()):
            raise HTTPException(status_code=404, detail=f"{request.package} is not a candidate for {name}")
        registry.prefer(request.package)
        return {"candidates": registry.candidates().packages()}

    @app.delete("/api/capabilities/{name}/override")
    async def clear_override(name: str) -> Dict[str, Any]:
        registry = registry_or_404(name)
        registry.use(None)
        return {"status": "ok", "overridden": registry.overridden}

    return app


__all__ = ["create_app"]
