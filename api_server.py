"""
FastAPI wrapper for the ingredient scan engine.

Endpoints:
- GET  /health                        : readiness probe
- POST /scan                          : analyse pasted text, a product or a barcode
- GET  /scans/{scan_id}               : stored scan result
- GET  /users/{user_id}/scans         : a user's recent scans (newest first)
- GET  /ingredients/{slug}            : trigger ingredient detail
- POST /scans/{scan_id}/overlay       : personalized reading for a skin profile
- POST /scans/{scan_id}/goal          : recommended support goal (+ ranked list)
- POST /scans/{scan_id}/oil-prefill   : draft custom oil formula

Run locally:
    uvicorn api_server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, validator

from scan_engine import (
    InputType,
    ScanEngineError,
    ScanRequest,
    ScanSettings,
    SkinProfile,
    SupportGoal,
    build_engine,
    generate_oil_prefill,
    get_all_applicable_goals,
    get_profile_overlay,
    get_recommended_goal,
    validate_profile,
)
from scan_engine.oil_prefill import goal_description, goal_label
from scan_engine.settings import configure_logging

log = logging.getLogger("api_server")

app = FastAPI(
    title="Ingredient Scan API",
    description="Flags potentially irritating cosmetic ingredients against a curated trigger database.",
    version="1.0.0",
)

# CORS for broad consumption; tighten in production by setting allowed origins.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ScanBody(BaseModel):
    input_type: str = Field(..., alias="inputType", description="paste, product or barcode")
    ingredients_text: Optional[str] = Field(None, alias="ingredientsText")
    product_id: Optional[str] = Field(None, alias="productId")
    barcode: Optional[str] = Field(None, description="Product barcode")
    user_id: Optional[str] = Field(None, alias="userId")

    @validator("input_type")
    def _known_input_type(cls, v: str) -> str:
        value = v.strip().lower()
        if value not in {t.value for t in InputType}:
            raise ValueError("inputType must be one of paste, product, barcode")
        return value


class ProfileBody(BaseModel):
    skinType: str = Field("normal", description="oily, dry, combination, normal or sensitive")
    flags: List[str] = Field(default_factory=list, description="Skin sensitivity flags")
    allergies: Optional[List[str]] = None
    updatedAt: Optional[str] = None

    def to_profile(self) -> SkinProfile:
        return validate_profile(
            {
                "skinType": self.skinType,
                "flags": self.flags,
                "allergies": self.allergies,
                "updatedAt": self.updatedAt,
            }
        )


class PrefillBody(BaseModel):
    profile: Optional[ProfileBody] = None
    goal: Optional[str] = None

    @validator("goal")
    def _known_goal(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        value = v.strip().lower()
        if value not in {g.value for g in SupportGoal}:
            raise ValueError("goal must be one of calm, barrier, acne, brighten")
        return value


# Shared singletons
settings = ScanSettings.from_env()
configure_logging(settings.log_level)
engine = build_engine(settings)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


def _stored_result(scan_id: str):
    try:
        event = engine.get_scan(scan_id)
    except ScanEngineError as exc:
        log.error("Scan lookup error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    if not event:
        raise HTTPException(status_code=404, detail="Scan not found")
    return event.result()


@app.post("/scan")
def scan(body: ScanBody) -> Dict:
    request = ScanRequest(
        input_type=InputType(body.input_type),
        ingredients_text=body.ingredients_text,
        product_id=body.product_id,
        barcode=body.barcode,
        user_id=body.user_id,
    )
    try:
        outcome = engine.scan(request)
    except ScanEngineError as exc:
        log.error("Analyze error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return outcome.to_dict()


@app.get("/scans/{scan_id}")
def get_scan(scan_id: str) -> Dict:
    result = _stored_result(scan_id)
    payload = {"scanId": scan_id}
    payload.update(result.to_dict())
    return payload


@app.get("/users/{user_id}/scans")
def user_scans(user_id: str, limit: int = Query(20, ge=1, le=100)) -> Dict:
    try:
        events = engine.scan_history(user_id, limit=limit)
    except ScanEngineError as exc:
        log.error("Scan history error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return {
        "scans": [
            {
                "scanId": event.id,
                "createdAt": event.created_at,
                "inputType": event.input_type.value,
                "riskScore": event.result_json.get("riskScore"),
                "riskTier": event.result_json.get("riskTier"),
            }
            for event in events
        ]
    }


@app.get("/ingredients/{slug}")
def ingredient_detail(slug: str) -> Dict:
    try:
        trigger = engine.trigger_source.get_by_slug(slug)
    except ScanEngineError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    if not trigger:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return trigger.to_dict()


@app.post("/scans/{scan_id}/overlay")
def overlay(scan_id: str, body: ProfileBody) -> Dict:
    result = _stored_result(scan_id)
    return get_profile_overlay(result, body.to_profile()).to_dict()


@app.post("/scans/{scan_id}/goal")
def goal(scan_id: str, body: Optional[ProfileBody] = None) -> Dict:
    result = _stored_result(scan_id)
    profile = body.to_profile() if body else None
    recommendation = get_recommended_goal(result, profile)
    return {
        "recommendation": recommendation.to_dict() if recommendation else None,
        "applicableGoals": [g.value for g in get_all_applicable_goals(result, profile)],
    }


@app.post("/scans/{scan_id}/oil-prefill")
def oil_prefill(scan_id: str, body: PrefillBody) -> Dict:
    result = _stored_result(scan_id)
    profile = body.profile.to_profile() if body.profile else None
    draft = generate_oil_prefill(
        result, profile=profile, goal=SupportGoal(body.goal) if body.goal else None
    )
    payload = draft.to_dict()
    payload["goalLabel"] = goal_label(draft.goal)
    payload["goalDescription"] = goal_description(draft.goal)
    return payload


if __name__ == "__main__":
    uvicorn.run("api_server:app", host="0.0.0.0", port=8000, reload=False)
