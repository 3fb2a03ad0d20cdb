"""
RMB Amount — FastAPI Server
============================

RESTful API for writing, reading and checking capitalized RMB amounts.

Endpoints:
    POST /encode            Figure → capitalized text
    POST /decode            Capitalized text → figure
    POST /validate          Check a written amount (and optionally its figure)
    GET  /health            Health check / readiness probe

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Docs:
    http://localhost:8000/docs             # Swagger UI (auto-generated)
    http://localhost:8000/redoc            # ReDoc (alternative)
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal
from enum import Enum
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from rmb_amount import __version__
from rmb_amount.config import configure_logging, load_settings
from rmb_amount.decoder import decode
from rmb_amount.encoder import encode
from rmb_amount.exceptions import AmountError, DecodeError
from rmb_amount.models import ValidationFinding, ValidationReport
from rmb_amount.pipeline import AmountValidationPipeline

# ─── Settings (.env is read by load_settings) ────────────────────────

_settings = load_settings()


# ─── Application Lifespan (pre-warm pipeline) ───────────────────────

_pipeline: AmountValidationPipeline | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and build the pipeline on startup."""
    global _pipeline  # noqa: PLW0603
    configure_logging(_settings.log_level)
    _pipeline = AmountValidationPipeline()
    yield
    _pipeline = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="RMB Amount API",
    description=(
        "Capitalized RMB amounts (人民币大写金额) for bills and settlement "
        "vouchers. Encode figures, decode written amounts, and check a "
        "written amount against the official zero-placement rules."
    ),
    version=__version__,
    lifespan=lifespan,
)


# ─── Request / Response Schemas ─────────────────────────────────────


class EncodeRequest(BaseModel):
    """Request body for the /encode endpoint."""

    amount: Decimal = Field(
        ...,
        description="The figure to write out; rounded half-up to fen.",
        json_schema_extra={"example": "1409.50"},
    )


class EncodeResponse(BaseModel):
    amount: Decimal
    text: str


class DecodeRequest(BaseModel):
    """Request body for the /decode endpoint."""

    text: str = Field(
        ...,
        min_length=1,
        description="The capitalized amount to read.",
        json_schema_extra={"example": "壹拾万零柒仟元伍角叁分"},
    )


class DecodeResponse(BaseModel):
    text: str
    amount: Decimal


class ValidateRequest(BaseModel):
    """Request body for the /validate endpoint."""

    text: str = Field(
        ...,
        description="The capitalized amount as written on the instrument.",
        json_schema_extra={"example": "叁佰伍拾万肆仟玖拾陆元肆角叁分"},
    )
    expected_amount: Optional[Decimal] = Field(
        default=None,
        description="The figure (小写) printed beside the written amount.",
        json_schema_extra={"example": "3504096.43"},
    )


class SeverityOut(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class FindingOut(ValidationFinding):
    """API-facing finding (inherits all fields from ValidationFinding)."""

    severity: SeverityOut  # type: ignore[assignment]  # narrow to str enum for OpenAPI


class ValidateResponse(BaseModel):
    """Structured validation report returned by the API."""

    text: str
    is_valid: bool
    amount: Optional[Decimal] = None
    expected_amount: Optional[Decimal] = None
    canonical_text: Optional[str] = None
    original_hash: str = Field(description="SHA-256 hash of the submitted text")
    error_count: int
    warning_count: int
    findings: list[FindingOut]

    model_config = {"json_schema_extra": {"example": {
        "text": "叁佰伍拾万零肆仟玖拾陆元肆角叁分",
        "is_valid": False,
        "amount": "3504096.43",
        "expected_amount": None,
        "canonical_text": "叁佰伍拾万零肆仟零玖拾陆元肆角叁分",
        "original_hash": "a1b2c3d4...",
        "error_count": 1,
        "warning_count": 0,
        "findings": [
            {
                "severity": "ERROR",
                "code": "MISSING_ZERO",
                "message": "Zero digits lie between 仟 and 拾; '零' must precede '玖拾'.",
                "details": {"before": "玖拾"},
            }
        ],
    }}}


class HealthResponse(BaseModel):
    status: str
    version: str


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_pipeline() -> AmountValidationPipeline:
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialised")
    return _pipeline


def _check_length(text: str) -> None:
    limit = _settings.max_text_length
    if len(text) > limit:
        raise HTTPException(
            status_code=413, detail=f"Text too long (max {limit} characters)"
        )


def _error_detail(exc: AmountError) -> dict:
    return {"code": exc.code, "message": str(exc), "details": exc.details}


def _build_response(report: ValidationReport) -> ValidateResponse:
    """Convert the internal ValidationReport to the API response schema."""
    findings_out = [
        FindingOut.model_validate(f, from_attributes=True)
        for f in report.findings
    ]

    error_count = sum(1 for f in report.findings if f.severity.value == "ERROR")
    warning_count = sum(1 for f in report.findings if f.severity.value == "WARNING")

    return ValidateResponse(
        text=report.text,
        is_valid=report.is_valid,
        amount=report.amount,
        expected_amount=report.expected_amount,
        canonical_text=report.canonical_text,
        original_hash=report.original_hash,
        error_count=error_count,
        warning_count=warning_count,
        findings=findings_out,
    )


# ─── Endpoints ───────────────────────────────────────────────────────


@app.post(
    "/encode",
    summary="Write a figure in capitalized numerals",
    tags=["Conversion"],
    responses={422: {"description": "Amount is not finite or beyond 仟兆"}},
)
def encode_amount(request: EncodeRequest) -> EncodeResponse:
    try:
        text = encode(request.amount)
    except AmountError as exc:
        raise HTTPException(status_code=422, detail=_error_detail(exc)) from exc
    return EncodeResponse(amount=decode(text), text=text)


@app.post(
    "/decode",
    summary="Read a capitalized amount as a figure",
    tags=["Conversion"],
    responses={
        413: {"description": "Text longer than the configured maximum"},
        422: {"description": "Text contains a glyph outside the alphabet, or no digits"},
    },
)
def decode_text(request: DecodeRequest) -> DecodeResponse:
    """Decode is lenient: it reads any sequence of digits and units.

    Use **/validate** to find out whether the text is correctly written.
    """
    _check_length(request.text)
    try:
        amount = decode(request.text)
    except DecodeError as exc:
        raise HTTPException(status_code=422, detail=_error_detail(exc)) from exc
    return DecodeResponse(text=request.text, amount=amount)


@app.post(
    "/validate",
    summary="Check a written amount against the placement rules",
    tags=["Validation"],
    responses={
        413: {"description": "Text longer than the configured maximum"},
        503: {"description": "Pipeline not yet initialised"},
    },
)
async def validate_text(request: ValidateRequest) -> ValidateResponse:
    """Run the cross-check pipeline on one written amount.

    Returns a structured report with:
    - **is_valid**: `true` if no ERROR finding was raised
    - **findings**: the first rule violation, plus any figure mismatch
    - **canonical_text**: how the decoded amount is written out in full
    - **original_hash**: SHA-256 of the input for audit trail
    """
    _check_length(request.text)
    pipeline = _get_pipeline()
    report = await asyncio.to_thread(pipeline.run, request.text, request.expected_amount)
    return _build_response(report)


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Pipeline not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and version."""
    _get_pipeline()
    return HealthResponse(status="healthy", version=__version__)
