"""Pydantic models for the JSON bodies returned by the HTTP API."""
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class BinaryOperationResult(BaseModel):
    """Result of one of the direct two-operand endpoints."""

    action: str = Field(..., description="Operator name, e.g. 'add'")
    v1: float = Field(..., description="Left operand")
    v2: float = Field(..., description="Right operand")
    result: float = Field(..., description="Computed value of v1 <action> v2")


class CalculationResult(BaseModel):
    """Result of evaluating an expression tree."""

    action: str = Field(default="calculate", description="Always 'calculate'")
    result: float = Field(..., description="Evaluated numeric result of the expression")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(..., description="Human readable error message")


class ApiIndex(BaseModel):
    """Discovery document served at /api/."""

    message: str
    endpoints: List[str]
    example_expression: Dict[str, Any]
