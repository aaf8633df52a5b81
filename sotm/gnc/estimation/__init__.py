"""State estimation derived from localization outputs."""

from sotm.gnc.estimation.acceleration import AccelerationEstimator

__all__ = [
    "AccelerationEstimator",
]
