from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..emitters import emit, output_path
from ..errors import ConfigError
from ..lint import validate as lint_yaml
from ..model import Pipeline
from ..schemas import PipelineRecord
from ..templates import get_template, list_templates
from .db import SessionLocal, engine
from .models import Base, SavedConfig


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Creates tables if they don't exist.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield


app = FastAPI(title="ciforge", lifespan=lifespan)

# -------------------- Schemas --------------------

class GenerateRequest(BaseModel):
    config: PipelineRecord = Field(default_factory=PipelineRecord)
    template: str | None = None

class GenerateResponse(BaseModel):
    platform: str
    path: str
    yaml: str
    report: dict[str, Any]

class ValidateRequest(BaseModel):
    yaml: str = ""

class TemplateInfo(BaseModel):
    key: str
    name: str
    description: str

class SaveConfigRequest(BaseModel):
    config: PipelineRecord

class ConfigSummary(BaseModel):
    name: str
    platform: str
    job_count: int
    created_at: datetime
    updated_at: datetime

class ConfigResponse(BaseModel):
    name: str
    config: dict[str, Any]

# -------------------- Helpers --------------------

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def _http_error(e: ConfigError) -> HTTPException:
    status = 404 if e.kind in ("template", "missing") else 400
    return HTTPException(status_code=status, detail={"kind": e.kind, "message": e.message, **e.details})

def _summary(row: SavedConfig) -> ConfigSummary:
    return ConfigSummary(
        name=row.name,
        platform=row.platform,
        job_count=row.job_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )

# -------------------- Endpoints --------------------

@app.post("/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest):
    pipeline = req.config.to_pipeline()
    try:
        if req.template:
            pipeline = get_template(req.template).apply(pipeline)
        text = emit(pipeline)
    except ConfigError as e:
        raise _http_error(e)

    return GenerateResponse(
        platform=pipeline.platform,
        path=output_path(pipeline.platform),
        yaml=text,
        report=lint_yaml(text).to_dict(),
    )

@app.post("/validate")
async def validate(req: ValidateRequest) -> dict[str, Any]:
    return lint_yaml(req.yaml).to_dict()

@app.get("/templates", response_model=list[TemplateInfo])
async def templates():
    return [TemplateInfo(key=t.key, name=t.name, description=t.description) for t in list_templates()]

@app.get("/templates/{key}")
async def template(key: str) -> dict[str, Any]:
    try:
        return get_template(key).apply(Pipeline()).to_dict()
    except ConfigError as e:
        raise _http_error(e)

@app.put("/configs/{name}", response_model=ConfigSummary)
async def save_config(name: str, req: SaveConfigRequest):
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Please enter a configuration name")

    pipeline = req.config.to_pipeline()
    stamp = now_utc()

    async with SessionLocal() as s:
        async with s.begin():
            row = await s.get(SavedConfig, name)
            if row:
                row.platform = pipeline.platform
                row.job_count = len(pipeline.jobs)
                row.config = pipeline.to_dict()
                row.updated_at = stamp
            else:
                row = SavedConfig(
                    name=name,
                    platform=pipeline.platform,
                    job_count=len(pipeline.jobs),
                    config=pipeline.to_dict(),
                    created_at=stamp,
                    updated_at=stamp,
                )
                s.add(row)
        return _summary(row)

@app.get("/configs", response_model=list[ConfigSummary])
async def list_configs():
    async with SessionLocal() as s:
        q = sa.select(SavedConfig).order_by(SavedConfig.updated_at.desc(), SavedConfig.name)
        rows = (await s.execute(q)).scalars().all()
        return [_summary(r) for r in rows]

@app.get("/configs/{name}", response_model=ConfigResponse)
async def get_config(name: str):
    async with SessionLocal() as s:
        row = await s.get(SavedConfig, name)
        if not row:
            raise HTTPException(status_code=404, detail="Configuration not found")
        return ConfigResponse(name=row.name, config=Pipeline.from_dict(row.config).to_dict())

@app.delete("/configs/{name}")
async def delete_config(name: str):
    async with SessionLocal() as s:
        async with s.begin():
            row = await s.get(SavedConfig, name)
            if not row:
                raise HTTPException(status_code=404, detail="Configuration not found")
            await s.delete(row)
    return {"ok": True}
