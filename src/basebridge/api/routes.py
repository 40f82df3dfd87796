"""API routes for basebridge."""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..formulas import (
    FormulaRewriter,
    TranslationResult,
    compile_rollup,
    find_blocking_function,
    is_convertible,
)
from ..formulas.rollup import ROLLUP_FUNCTIONS
from ..properties import FormulaStrategy, PropertyMapping, map_database_properties

router = APIRouter()


class FormulaRequest(BaseModel):
    """Request carrying one source formula."""

    expression: str
    properties: Optional[dict[str, dict[str, Any]]] = None


class CheckResponse(BaseModel):
    """Response for a convertibility check."""

    expression: str
    convertible: bool
    blocking_function: Optional[str] = None


class RollupRequest(BaseModel):
    """Request to compile a rollup into a formula."""

    function: str
    relation_property: str
    target_property: Optional[str] = None


class RollupResponse(BaseModel):
    """Compiled rollup formula, or an error when unsupported."""

    success: bool
    formula: Optional[str] = None
    error: Optional[str] = None


class PropertyMapRequest(BaseModel):
    """Request to map a database property schema."""

    properties: dict[str, dict[str, Any]]
    strategy: Optional[str] = None


# Formula endpoints


@router.post("/formulas/check", response_model=CheckResponse)
async def check_formula(request: FormulaRequest):
    """Check whether a formula can be translated."""
    return CheckResponse(
        expression=request.expression,
        convertible=is_convertible(request.expression),
        blocking_function=find_blocking_function(request.expression),
    )


@router.post("/formulas/translate", response_model=TranslationResult)
async def translate_formula(request: FormulaRequest):
    """Translate a formula into target syntax."""
    try:
        rewriter = FormulaRewriter(request.properties)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return rewriter.rewrite(request.expression)


# Rollup endpoints


@router.post("/rollups/compile", response_model=RollupResponse)
async def compile_rollup_formula(request: RollupRequest):
    """Compile a rollup aggregation into a formula."""
    formula = compile_rollup(request.function, request.relation_property, request.target_property)
    if formula is None:
        return RollupResponse(
            success=False,
            error=f"Rollup function {request.function!r} cannot be converted with the given properties",
        )
    return RollupResponse(success=True, formula=formula)


@router.get("/rollups/functions")
async def list_rollup_functions():
    """List supported rollup functions."""
    return {
        "functions": [
            {"name": name, "requires_target": requires_target}
            for name, (_, requires_target) in ROLLUP_FUNCTIONS.items()
        ]
    }


# Property endpoints


@router.post("/properties/map", response_model=PropertyMapping)
async def map_properties(request: PropertyMapRequest):
    """Map a database property schema to base-file entries."""
    if request.strategy is not None and request.strategy not in {s.value for s in FormulaStrategy}:
        raise HTTPException(status_code=400, detail=f"Unknown formula strategy: {request.strategy}")
    try:
        return map_database_properties(request.properties, request.strategy)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# Health and configuration


@router.get("/health")
async def health_check():
    """Health check endpoint with configuration summary."""
    from ..config import settings

    return {
        "status": "ok",
        "service": "basebridge",
        "config": {
            "formula_strategy": settings.formula_strategy,
            "max_nesting_depth": settings.max_nesting_depth,
            "max_formula_length": settings.max_formula_length,
        },
    }


@router.get("/config/limits")
async def get_limits():
    """Get translation limits."""
    from ..config import settings

    return {
        "max_nesting_depth": settings.max_nesting_depth,
        "max_formula_length": settings.max_formula_length,
    }
