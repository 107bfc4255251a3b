# backend/builder-gen/main.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException  # type: ignore
from fastapi.middleware.cors import CORSMiddleware  # type: ignore
from pydantic import BaseModel  # type: ignore

import config
from builder_rules import (
    discover_builders,
    generate_all,
    generate_builder,
    render_marker_interface,
)
from log_setup import setup_logger

logger = setup_logger("builder-gen", config.LOG_LEVEL)

app = FastAPI(title="Builder Generator (CIR -> PHP builder classes)", version="0.3.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class BuilderRequest(BaseModel):
    cir: Dict[str, Any]  # expects { "nodes": [...], "edges": [...] }
    class_name: str      # e.g. "App\\Models\\User"


class BuilderResponse(BaseModel):
    ok: bool = True
    class_name: str
    builder_name: str
    generated: bool
    php: str = ""


class BatchRequest(BaseModel):
    cir: Dict[str, Any]


class BatchResponse(BaseModel):
    builders: List[BuilderResponse]


class MarkerRequest(BaseModel):
    marker_interface: Optional[str] = None


class MarkerResponse(BaseModel):
    marker_interface: str
    php: str


class DiscoverRequest(BaseModel):
    cir: Dict[str, Any]
    marker_interface: Optional[str] = None


class DiscoverResponse(BaseModel):
    builders: List[str]


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/builder", response_model=BuilderResponse)
def builder(req: BuilderRequest) -> BuilderResponse:
    try:
        result = generate_builder(req.cir, req.class_name)
    except ValueError as e:
        status = 404 if str(e).startswith("Class not found") else 400
        raise HTTPException(status_code=status, detail=str(e)) from e

    if not result["generated"]:
        logger.info("Not generating a builder for %s", result["class_name"])
    return BuilderResponse(**result)


@app.post("/builder/batch", response_model=BatchResponse)
def builder_batch(req: BatchRequest) -> BatchResponse:
    try:
        results = generate_all(req.cir)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return BatchResponse(builders=[BuilderResponse(**r) for r in results])


@app.post("/builder/marker", response_model=MarkerResponse)
def builder_marker(req: MarkerRequest) -> MarkerResponse:
    marker = (req.marker_interface or config.MARKER_INTERFACE).lstrip("\\")
    return MarkerResponse(marker_interface=marker, php=render_marker_interface(marker))


@app.post("/builder/discover", response_model=DiscoverResponse)
def builder_discover(req: DiscoverRequest) -> DiscoverResponse:
    try:
        names = discover_builders(req.cir, req.marker_interface)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return DiscoverResponse(builders=names)
