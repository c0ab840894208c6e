"""FastAPI application exposing the direct operators and the expression evaluator."""
import json
import math
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.staticfiles import StaticFiles

from arithmetic_api.common.errors import (
    DepthLimitExceeded,
    InvalidJSONBody,
    InvalidParameters,
    MissingExpression,
    NonFiniteValue,
)
from arithmetic_api.common.evaluator import ExpressionEvaluator
from arithmetic_api.common.logger import logger
from arithmetic_api.common.models import OperatorKind
from arithmetic_api.common.operations import (
    ApiIndex,
    BinaryOperationResult,
    CalculationResult,
    ErrorResponse,
)
from arithmetic_api.common.validator import ExpressionValidator
from arithmetic_api.server.config import ServerConfig
from arithmetic_api.server.handlers import register_exception_handlers

EXAMPLE_EXPRESSION: Dict[str, Any] = {
    "op": "add",
    "args": [
        1,
        {"op": "power", "args": [2, 3]},
        {"op": "multiply", "args": [4, 5, 6]},
    ],
}

# Plain decimal or exponent notation, e.g. "-1.5", ".5", "2e10"
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\Z", re.ASCII)

ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {400: {"model": ErrorResponse}}

router = APIRouter(prefix="/api")


def parse_operands(v1: Optional[str], v2: Optional[str]) -> Tuple[float, float]:
    """
    Parse the v1 and v2 query parameters as finite floats.

    :param str v1: Raw left operand
    :param str v2: Raw right operand

    :return: Tuple (v1, v2) as floats
    :rtype: Tuple[float, float]
    :raises InvalidParameters: If a parameter is missing, not in decimal or exponent notation, or overflows
    """
    if not all(isinstance(v, str) and NUMBER_PATTERN.match(v.strip()) for v in (v1, v2)):
        raise InvalidParameters()
    operands = (float(v1), float(v2))
    if not all(math.isfinite(v) for v in operands):
        raise InvalidParameters()
    return operands


def ensure_finite(result: float) -> float:
    """Reject a final result that JSON cannot represent (NaN or infinity)."""
    if not math.isfinite(result):
        raise NonFiniteValue()
    return result


def _binary_endpoint(op: OperatorKind) -> Callable[..., BinaryOperationResult]:
    """Build the GET handler computing ``v1 <op> v2``."""

    def endpoint(
        v1: Optional[str] = Query(default=None, description="Left operand"),
        v2: Optional[str] = Query(default=None, description="Right operand"),
    ) -> BinaryOperationResult:
        left, right = parse_operands(v1, v2)
        result = ensure_finite(ExpressionEvaluator.evaluate_binary(op, left, right))
        logger.debug(f"🧮 {op.value}({left}, {right}) = {result}")
        return BinaryOperationResult(action=op.value, v1=left, v2=right, result=result)

    endpoint.__name__ = f"{op.value}_endpoint"
    return endpoint


for _op in OperatorKind:
    router.add_api_route(
        f"/{_op.value}",
        _binary_endpoint(_op),
        methods=["GET"],
        response_model=BinaryOperationResult,
        responses=ERROR_RESPONSES,
        summary=f"{_op.value.capitalize()} v1 and v2",
    )


@router.post("/calculate", response_model=CalculationResult, responses=ERROR_RESPONSES)
async def calculate(request: Request) -> CalculationResult:
    """
    Evaluate the expression tree sent as JSON body.

    Example body: {"op": "add", "args": [1, 2, {"op": "multiply", "args": [3, 4]}]}
    """
    body: bytes = await request.body()
    if not body.strip():
        raise MissingExpression()
    config: ServerConfig = request.app.state.config
    try:
        payload: Any = json.loads(body)
    except ValueError:
        raise InvalidJSONBody() from None
    except RecursionError:
        # Nested deeper than the JSON decoder can follow
        raise DepthLimitExceeded(config.max_depth) from None

    tree = ExpressionValidator.validate(payload, max_depth=config.max_depth)
    result = ensure_finite(ExpressionEvaluator.evaluate(tree))
    logger.debug(f"🧮 calculate = {result}")
    return CalculationResult(result=result)


@router.get("/", response_model=ApiIndex)
async def index() -> ApiIndex:
    """List the available endpoints with an example expression."""
    endpoints: List[str] = [
        f"GET /api/{op.value}?v1=<number>&v2=<{'degree' if op is OperatorKind.ROOT else 'number'}>"
        for op in OperatorKind
    ]
    endpoints.append("POST /api/calculate  (JSON: { <expression tree> })")
    return ApiIndex(
        message="Math Operations API",
        endpoints=endpoints,
        example_expression=EXAMPLE_EXPRESSION,
    )


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    API routes are registered first; when a static directory is configured
    it is mounted at '/' and only receives the paths the API does not own.

    :param ServerConfig config: Server settings, defaults when omitted

    :return: Configured application
    :rtype: FastAPI
    """
    config = config or ServerConfig()

    app = FastAPI(
        title="Arithmetic API",
        description="Direct arithmetic operators and an expression-tree evaluator.",
    )
    app.state.config = config
    app.include_router(router)
    register_exception_handlers(app)

    if config.static_dir is not None:
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
        logger.info(f"📁 Serving static files from {config.static_dir}")

    return app
