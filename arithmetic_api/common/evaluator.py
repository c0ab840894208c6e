"""Evaluate validated expression trees with left-associative n-ary folds."""
from collections.abc import Callable as ABCCallable
from functools import reduce
import math
import operator
from typing import Callable, Dict, List, Sequence

from arithmetic_api.common.errors import DivisionByZero, NonFiniteValue, ZeroDegreeRoot
from arithmetic_api.common.models import ExpressionNode, Literal, OperatorKind


# Type alias for fold steps (accumulator, next operand) -> new accumulator
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]


def ieee_power(base: float, exponent: float) -> float:
    """
    Raise base to exponent with IEEE-754 results instead of Python exceptions.

    ``math.pow`` raises where IEEE arithmetic returns a special value:
    overflow becomes infinity, zero to a negative power becomes infinity,
    and a negative base with a fractional exponent becomes NaN.

    :param float base: Base
    :param float exponent: Exponent

    :return: base ** exponent, possibly infinite or NaN
    :rtype: float
    """
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and float(exponent).is_integer() and exponent % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        return math.inf if base == 0 else math.nan


def ieee_sqrt(value: float) -> float:
    """Square root returning NaN for negative input, like IEEE sqrt."""
    return math.sqrt(value) if value >= 0 else math.nan


def nth_root(value: float, degree: float) -> float:
    """Degree-th root computed as value ** (1 / degree)."""
    return ieee_power(value, 1 / degree)


# Fold step of each operator; total over OperatorKind
OPERATORS: Dict[OperatorKind, OperatorFn] = {
    OperatorKind.ADD: operator.add,
    OperatorKind.SUBTRACT: operator.sub,
    OperatorKind.MULTIPLY: operator.mul,
    OperatorKind.DIVIDE: operator.truediv,
    OperatorKind.POWER: ieee_power,
    OperatorKind.ROOT: nth_root,
}


class ExpressionEvaluator:
    """
    Reduce expression trees to a single float.

    Children are evaluated before their parent, left to right, and the
    parent's operator is then folded over the results:

        - ``subtract [10, 3, 2]`` is ``(10 - 3) - 2 = 5``
        - ``power [2, 3, 2]`` is ``(2 ** 3) ** 2 = 64``
        - ``root [a]`` is the square root of ``a``; ``root [a, n]`` is ``a ** (1 / n)``

    The evaluator holds no state, so evaluating the same tree twice
    always gives the same result.
    """

    @staticmethod
    def apply(op: OperatorKind, values: Sequence[float]) -> float:
        """
        Fold an operator over already evaluated operands.

        :param OperatorKind op: Operator to apply
        :param Sequence[float] values: At least one operand, left to right

        :return: Folded result (may be non-finite after an overflow)
        :rtype: float
        :raises NonFiniteValue: If an operand is NaN or infinite
        :raises DivisionByZero: If a divisor (any operand after the first) is zero
        :raises ZeroDegreeRoot: If a root degree (any operand after the first) is zero
        """
        if not all(math.isfinite(v) for v in values):
            raise NonFiniteValue()

        first, rest = values[0], values[1:]

        if not rest:
            return ieee_sqrt(first) if op is OperatorKind.ROOT else first

        # Guards scan every divisor / degree before folding starts
        if op is OperatorKind.DIVIDE and any(v == 0 for v in rest):
            raise DivisionByZero()
        if op is OperatorKind.ROOT and any(v == 0 for v in rest):
            raise ZeroDegreeRoot()

        return reduce(OPERATORS[op], rest, first)

    @staticmethod
    def evaluate(node: ExpressionNode) -> float:
        """
        Evaluate a validated expression tree.

        :param ExpressionNode node: Root of the tree

        :return: Result of the expression
        :rtype: float
        :raises EvaluationError: On the first arithmetic failure in the tree
        """
        if isinstance(node, Literal):
            return node.value

        # A failing argument stops the comprehension before its siblings run
        values: List[float] = [ExpressionEvaluator.evaluate(arg) for arg in node.args]
        return ExpressionEvaluator.apply(node.op, values)

    @staticmethod
    def evaluate_binary(op: OperatorKind, v1: float, v2: float) -> float:
        """
        Apply a single operator to two operands, as the direct endpoints do.

        :param OperatorKind op: Operator
        :param float v1: Left operand
        :param float v2: Right operand (divisor, exponent or root degree)

        :return: Result of v1 op v2
        :rtype: float
        :raises EvaluationError: On division by zero, zero-degree root or non-finite input
        """
        return ExpressionEvaluator.apply(op, (v1, v2))
