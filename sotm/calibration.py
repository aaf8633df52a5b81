"""Calibration data: built-in tables plus JSON load/save.

Calibration is loaded once when the firing cycle is constructed and never
mutated afterwards. The JSON document has one key per table, each a list
of ``[distance, value]`` pairs (power values are ``[left_rpm, right_rpm]``):

    {
        "flight_time": [[1.36, 0.55], [4.0, 0.9]],
        "launch_angle": [[1.36, 58.0], [4.0, 40.0]],
        "launch_power": [[1.36, [3000.0, 2400.0]], [4.0, [4800.0, 3800.0]]],
        "heading_tolerance": [[1.36, 30.0353], [4.6, 10.0]],
        "launch_angle_tolerance": [[1.36, 1.5], [3.53, 0.6]]
    }

Example:
    >>> from sotm.calibration import default_calibration, load_calibration
    >>> calibration = default_calibration()
    >>> calibration.ballistics.flight_time(4.0)
    0.9
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from beartype import beartype

from sotm.ballistics import BallisticModel, InterpolatingTable, PowerTable, ToleranceMaps

# =============================================================================
# Built-in Tables
# =============================================================================

# Distance [m] -> flight time [s]
FLIGHT_TIME_POINTS: dict[float, float] = {
    1.36: 0.55,
    2.0: 0.62,
    3.0: 0.76,
    4.0: 0.90,
    5.0: 1.04,
    6.0: 1.18,
}

# Distance [m] -> launcher angle [deg]
LAUNCH_ANGLE_POINTS: dict[float, float] = {
    1.36: 58.0,
    2.0: 52.0,
    3.0: 45.0,
    4.0: 40.0,
    5.0: 36.5,
    6.0: 34.0,
}

# Distance [m] -> (left, right) wheel speed [rpm]
LAUNCH_POWER_POINTS: dict[float, tuple[float, float]] = {
    1.36: (3000.0, 2400.0),
    3.0: (4000.0, 3200.0),
    4.0: (4800.0, 3800.0),
    6.0: (5600.0, 4600.0),
}

# Distance [m] -> allowed platform heading error [deg]
HEADING_TOLERANCE_POINTS: dict[float, float] = {
    1.36: 30.0353,
    1.88: 25.0,
    3.0: 15.0,
    4.6: 10.0,
}

# Distance [m] -> allowed launcher angle error [deg]
LAUNCH_ANGLE_TOLERANCE_POINTS: dict[float, float] = {
    1.36: 1.5,
    1.8: 0.80,
    3.53: 0.60,
}

_KEYS = (
    "flight_time",
    "launch_angle",
    "launch_power",
    "heading_tolerance",
    "launch_angle_tolerance",
)


# =============================================================================
# Calibration Bundle
# =============================================================================


@beartype
@dataclass(frozen=True)
class CalibrationData:
    """Everything measured on the practice field.

    Attributes:
        ballistics: Distance -> flight time / angle / power
        tolerances: Distance -> heading / launcher angle tolerance
    """
    ballistics: BallisticModel
    tolerances: ToleranceMaps

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON document layout."""
        return {
            "flight_time": [list(p) for p in self.ballistics.time_table.points()],
            "launch_angle": [list(p) for p in self.ballistics.angle_table.points()],
            "launch_power": [
                [d, list(speeds)] for d, speeds in self.ballistics.power_table.points()
            ],
            "heading_tolerance": [list(p) for p in self.tolerances.heading_map.points()],
            "launch_angle_tolerance": [
                list(p) for p in self.tolerances.launch_angle_map.points()
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CalibrationData":
        """Build from the JSON document layout.

        Raises:
            ValueError: If a key is missing or a table is malformed
        """
        missing = [key for key in _KEYS if key not in data]
        if missing:
            raise ValueError(f"Calibration is missing tables: {', '.join(missing)}")

        try:
            scalar = {
                key: [(float(d), float(v)) for d, v in data[key]]
                for key in _KEYS
                if key != "launch_power"
            }
            power = [
                (float(d), (float(v[0]), float(v[1])))
                for d, v in data["launch_power"]
            ]
        except (TypeError, ValueError, IndexError) as exc:
            raise ValueError(f"Malformed calibration table: {exc}") from exc

        return cls(
            ballistics=BallisticModel(
                time_table=InterpolatingTable.from_points(scalar["flight_time"]),
                angle_table=InterpolatingTable.from_points(scalar["launch_angle"]),
                power_table=PowerTable.from_points(power),
            ),
            tolerances=ToleranceMaps(
                heading_map=InterpolatingTable.from_points(scalar["heading_tolerance"]),
                launch_angle_map=InterpolatingTable.from_points(
                    scalar["launch_angle_tolerance"]
                ),
            ),
        )


# =============================================================================
# Loading / Saving
# =============================================================================


@beartype
def default_calibration() -> CalibrationData:
    """Built-in calibration for the competition launcher."""
    return CalibrationData(
        ballistics=BallisticModel(
            time_table=InterpolatingTable.from_points(FLIGHT_TIME_POINTS),
            angle_table=InterpolatingTable.from_points(LAUNCH_ANGLE_POINTS),
            power_table=PowerTable.from_points(LAUNCH_POWER_POINTS),
        ),
        tolerances=ToleranceMaps(
            heading_map=InterpolatingTable.from_points(HEADING_TOLERANCE_POINTS),
            launch_angle_map=InterpolatingTable.from_points(LAUNCH_ANGLE_TOLERANCE_POINTS),
        ),
    )


@beartype
def load_calibration(path: str | Path) -> CalibrationData:
    """Load calibration tables from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not valid calibration JSON
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Calibration file not found at {path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Calibration file {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Calibration file {path} must contain a JSON object")
    return CalibrationData.from_dict(data)


@beartype
def save_calibration(calibration: CalibrationData, path: str | Path) -> Path:
    """Write calibration tables to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(calibration.to_dict(), f, indent=2)
    return path
