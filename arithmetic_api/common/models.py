"""Expression tree: a closed set of operators, numeric leaves and operator nodes."""
from enum import Enum
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class OperatorKind(str, Enum):
    """Supported operators, in the order they are listed to clients."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"
    ROOT = "root"


class Literal(BaseModel):
    """Leaf of the tree holding a finite number."""

    model_config = ConfigDict(frozen=True)

    value: float = Field(..., allow_inf_nan=False, description="Finite numeric value")


class Operation(BaseModel):
    """Interior node applying an operator to an ordered list of sub-expressions."""

    model_config = ConfigDict(frozen=True)

    op: OperatorKind = Field(..., description="Operator folded over the arguments")
    args: Tuple["ExpressionNode", ...] = Field(..., min_length=1, description="Operands, left to right")


ExpressionNode = Union[Literal, Operation]

Operation.model_rebuild()
