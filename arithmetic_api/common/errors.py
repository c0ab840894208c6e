"""Errors raised while validating, evaluating or reading calculation requests."""
from typing import Any, Optional

from arithmetic_api.common.models import OperatorKind


class CalculatorError(Exception):
    """
    Base class of every error reported back to the caller as a 400 response.

    Each subclass carries a stable ``code`` so callers can tell error
    categories apart without parsing messages.
    """

    code: str = "calculator_error"
    message: str = "Calculation failed."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


# Structural errors, raised by the validator


class ValidationError(CalculatorError):
    code = "validation_error"
    message = "Invalid expression."


class NotANodeOrNumber(ValidationError):
    code = "not_a_node_or_number"
    message = "Invalid node: must be a number or { op, args }."


class UnsupportedOperator(ValidationError):
    code = "unsupported_operator"

    def __init__(self, op: Any) -> None:
        self.op = op
        supported = ", ".join(kind.value for kind in OperatorKind)
        super().__init__(f'Unsupported "op" {op!r}. Supported: {supported}')


class EmptyArgs(ValidationError):
    code = "empty_args"

    def __init__(self, op: OperatorKind) -> None:
        self.op = op
        super().__init__(self._describe(op))

    @staticmethod
    def _describe(op: OperatorKind) -> str:
        return f'"{op.value}" requires at least one argument.'


class ArgsNotASequence(EmptyArgs):
    code = "args_not_a_sequence"

    @staticmethod
    def _describe(op: OperatorKind) -> str:
        return f'"{op.value}" requires "args" to be a list of arguments.'


class DepthLimitExceeded(ValidationError):
    code = "depth_limit_exceeded"

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"Expression is nested deeper than {max_depth} levels.")


# Arithmetic errors, raised by the evaluator


class EvaluationError(CalculatorError):
    code = "evaluation_error"
    message = "Expression could not be evaluated."


class DivisionByZero(EvaluationError):
    code = "division_by_zero"
    message = "Cannot divide by zero."


class ZeroDegreeRoot(EvaluationError):
    code = "zero_degree_root"
    message = "Cannot extract root with degree zero."


class NonFiniteValue(EvaluationError):
    code = "non_finite_value"
    message = "Non-numeric value encountered."


# Request errors, raised by the HTTP layer


class InvalidParameters(CalculatorError):
    code = "invalid_parameters"
    message = "Invalid parameters. Both v1 and v2 must be valid numbers."


class MissingExpression(CalculatorError):
    code = "missing_expression"
    message = "Missing the expression in POST body."


class InvalidJSONBody(CalculatorError):
    code = "invalid_json_body"
    message = "Invalid JSON in POST body."
