"""Unit helpers for sotm.

Everything inside the library is a plain SI float: meters, seconds, radians.
Field constants and calibration sheets are usually written in inches and
degrees, so these helpers convert at the edges.

Design principles:
- Explicit over implicit: conversions are named functions
- Type safe: beartype checks at runtime
- No magic: unknown units raise instead of guessing

Example:
    >>> from sotm.units import inches, degrees
    >>> deadband = inches(0.5)  # 0.0127 m
    >>> offset = degrees(180.0)  # pi
"""

import math

from beartype import beartype

# =============================================================================
# Unit Definitions
# =============================================================================

# Conversion factors TO base SI unit
# e.g., 1 in = 0.0254 m, so CONVERSIONS["in"] = (0.0254, "length")
CONVERSIONS: dict[str, tuple[float, str]] = {
    # Length
    "m": (1.0, "length"),
    "cm": (0.01, "length"),
    "mm": (0.001, "length"),
    "ft": (0.3048, "length"),
    "in": (0.0254, "length"),
    # Time
    "s": (1.0, "time"),
    "ms": (0.001, "time"),
    # Angle
    "rad": (1.0, "angle"),
    "deg": (math.pi / 180.0, "angle"),
    "rot": (2.0 * math.pi, "angle"),
    # Velocity
    "m/s": (1.0, "velocity"),
    "ft/s": (0.3048, "velocity"),
    "in/s": (0.0254, "velocity"),
    # Angular velocity
    "rad/s": (1.0, "angular_velocity"),
    "deg/s": (math.pi / 180.0, "angular_velocity"),
}


def _get_dimension(unit: str) -> str:
    """Get the dimension for a unit string."""
    if unit not in CONVERSIONS:
        raise ValueError(f"Unknown unit: {unit!r}")
    return CONVERSIONS[unit][1]


def _get_conversion_factor(unit: str) -> float:
    """Get the conversion factor to SI base unit."""
    if unit not in CONVERSIONS:
        raise ValueError(f"Unknown unit: {unit!r}")
    return CONVERSIONS[unit][0]


@beartype
def convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a value between units of the same dimension.

    Args:
        value: Numeric value in ``from_unit``
        from_unit: Source unit (e.g. "in")
        to_unit: Target unit (e.g. "m")

    Returns:
        Value expressed in ``to_unit``

    Raises:
        ValueError: If either unit is unknown or the dimensions differ
    """
    from_dim = _get_dimension(from_unit)
    to_dim = _get_dimension(to_unit)

    if from_dim != to_dim:
        raise ValueError(
            f"Cannot convert between different dimensions: {from_dim} and {to_dim}"
        )

    si_value = value * _get_conversion_factor(from_unit)
    return si_value / _get_conversion_factor(to_unit)


# =============================================================================
# Shorthand Constructors (always return SI)
# =============================================================================


@beartype
def inches(value: float) -> float:
    """Inches to meters."""
    return convert(value, "in", "m")


@beartype
def degrees(value: float) -> float:
    """Degrees to radians."""
    return convert(value, "deg", "rad")


@beartype
def to_degrees(value: float) -> float:
    """Radians to degrees."""
    return convert(value, "rad", "deg")
