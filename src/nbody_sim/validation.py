"""
Input validation utilities for the simulation core.

Provides the exception hierarchy raised by the core and centralized
validation functions for simulation parameters. Raises descriptive
exceptions on invalid input.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

# Recursion guard for tree construction and traversal
MAX_TREE_DEPTH = 256


class ValidationError(ValueError):
    """Base exception for simulation validation errors."""

    pass


class InvalidParameterError(ValidationError):
    """Raised when a simulation parameter is out of range."""

    pass


class InvalidBodyError(ValidationError):
    """Raised when a body is malformed."""

    pass


class OutOfBoundsError(ValidationError):
    """
    Raised (or reported) when bodies lie outside the root bounds of a tree.

    Attributes:
        indices: Indices of the excluded bodies, in input order
        bounds: The root bounds the bodies were checked against
    """

    def __init__(self, indices: Sequence[int], bounds: Optional[Any] = None) -> None:
        self.indices: list[int] = list(indices)
        self.bounds = bounds
        preview = ", ".join(str(i) for i in self.indices[:10])
        if len(self.indices) > 10:
            preview += ", ..."
        super().__init__(
            f"{len(self.indices)} body(ies) outside root bounds {bounds}: [{preview}]"
        )


class DegenerateAggregateError(ValidationError):
    """Raised when the quadtree depth cap is misconfigured."""

    pass


def validate_theta(theta: float) -> float:
    """
    Validate the Barnes-Hut approximation threshold.

    Args:
        theta: Opening angle threshold

    Returns:
        Validated theta

    Raises:
        InvalidParameterError: If theta is negative or not finite
    """
    theta = float(theta)
    if not math.isfinite(theta) or theta < 0:
        raise InvalidParameterError(f"theta must be >= 0, got {theta}")
    return theta


def validate_positive(value: float, name: str) -> float:
    """
    Validate that a parameter is a positive finite number.

    Args:
        value: Value to check
        name: Parameter name used in the error message

    Returns:
        Validated value as float

    Raises:
        InvalidParameterError: If value is not positive and finite
    """
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError(f"{name} must be positive, got {value}")
    return value


def validate_finite(value: float, name: str) -> float:
    """Validate that a parameter is a finite number."""
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value}")
    return value


def validate_max_depth(max_depth: int) -> int:
    """
    Validate the quadtree depth cap.

    Args:
        max_depth: Maximum depth at which a leaf may still split

    Returns:
        Validated depth

    Raises:
        DegenerateAggregateError: If max_depth < 1 (every body would collapse
            into a single aggregate)
        InvalidParameterError: If max_depth exceeds MAX_TREE_DEPTH
    """
    max_depth = int(max_depth)
    if max_depth < 1:
        raise DegenerateAggregateError(f"max_depth must be >= 1, got {max_depth}")
    if max_depth > MAX_TREE_DEPTH:
        raise InvalidParameterError(
            f"max_depth must be <= {MAX_TREE_DEPTH}, got {max_depth}"
        )
    return max_depth


def validate_steps(steps: int) -> int:
    """
    Validate step count is positive.

    Raises:
        ValidationError: If steps < 1
    """
    if steps < 1:
        raise ValidationError(f"steps must be >= 1, got {steps}")
    return steps


__all__ = [
    "MAX_TREE_DEPTH",
    "ValidationError",
    "InvalidParameterError",
    "InvalidBodyError",
    "OutOfBoundsError",
    "DegenerateAggregateError",
    "validate_theta",
    "validate_positive",
    "validate_finite",
    "validate_max_depth",
    "validate_steps",
]
