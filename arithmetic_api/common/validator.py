"""Turn untyped JSON values into validated expression trees."""
import math
from typing import Any, List, Optional

from arithmetic_api.common.errors import (
    ArgsNotASequence,
    DepthLimitExceeded,
    EmptyArgs,
    NotANodeOrNumber,
    UnsupportedOperator,
)
from arithmetic_api.common.models import ExpressionNode, Literal, Operation, OperatorKind

# Maximum number of nested operation levels accepted by default
DEFAULT_MAX_DEPTH: int = 64


class ExpressionValidator:
    """
    Validate a decoded JSON value and build the matching expression tree.

    Accepted shapes:
        - a finite number, e.g. ``3.5``
        - an operation record, e.g. ``{"op": "add", "args": [1, 2]}``,
          whose arguments are themselves accepted shapes

    The walk is depth-first, left to right, and stops at the first problem:
    the corresponding ValidationError subclass is raised and no partial
    tree is returned.
    """

    @staticmethod
    def _as_finite_number(value: Any) -> Optional[float]:
        """
        Return value as a float if it is a finite JSON number, else None.

        Booleans are rejected even though ``bool`` subclasses ``int``.

        :param Any value: Decoded JSON value

        :return: The value as float, or None
        :rtype: Optional[float]
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        try:
            number = float(value)
        except OverflowError:
            # Integer literal too large for a double
            return None
        return number if math.isfinite(number) else None

    @staticmethod
    def _parse_operator(op: Any) -> OperatorKind:
        """
        Map an operator name onto OperatorKind.

        :param Any op: Value of the "op" field

        :return: Matching operator
        :rtype: OperatorKind
        :raises UnsupportedOperator: If op is not one of the supported names
        """
        if not isinstance(op, str):
            raise UnsupportedOperator(op)
        try:
            return OperatorKind(op)
        except ValueError:
            raise UnsupportedOperator(op) from None

    @staticmethod
    def _validate_node(value: Any, depth: int, max_depth: int) -> ExpressionNode:
        number = ExpressionValidator._as_finite_number(value)
        if number is not None:
            return Literal(value=number)

        if not isinstance(value, dict) or ("op" not in value and "args" not in value):
            raise NotANodeOrNumber()

        if depth > max_depth:
            raise DepthLimitExceeded(max_depth)

        op: OperatorKind = ExpressionValidator._parse_operator(value.get("op"))

        args = value.get("args")
        if not isinstance(args, list):
            raise ArgsNotASequence(op)
        if not args:
            raise EmptyArgs(op)

        children: List[ExpressionNode] = [
            ExpressionValidator._validate_node(arg, depth + 1, max_depth) for arg in args
        ]
        return Operation(op=op, args=tuple(children))

    @staticmethod
    def validate(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> ExpressionNode:
        """
        Validate a decoded JSON value and return its expression tree.

        :param Any value: Decoded JSON value (number, dict, list, str, ...)
        :param int max_depth: Maximum nesting of operation nodes

        :return: Root of the validated tree
        :rtype: ExpressionNode
        :raises ValidationError: On the first structural problem found
        """
        return ExpressionValidator._validate_node(value, 1, max_depth)
