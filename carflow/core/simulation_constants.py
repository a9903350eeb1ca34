# Copyright (C) 2022. Huawei Technologies Co., Ltd. All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.
from dataclasses import dataclass, fields
from functools import lru_cache

from carflow.core.configuration import Config


@dataclass(frozen=True)
class SimulationConstants:
    """Tuning values that stay fixed for the lifetime of a simulation."""

    acceleration: float = 10.0
    """Rate (per second) at which a car's speed approaches the street speed limit."""
    wait_time: float = 1.0
    """Seconds a car waits at an intersection that requires a stop."""
    car_spacing: float = 1.25
    """Spacing between cars as a multiple of the car size."""
    packing_ratio: float = 10.0
    """Divides street length when estimating how many cars a street can hold."""
    car_length: float = 5.0
    car_width: float = 2.5
    max_transitions_per_frame: int = 64
    """Upper bound on street/path changes a single car can make in one frame."""

    _SECTION = "simulation"

    def __post_init__(self):
        assert self.acceleration >= 0.0, f"acceleration={self.acceleration}"
        assert self.wait_time >= 0.0, f"wait_time={self.wait_time}"
        assert self.car_spacing > 0.0, f"car_spacing={self.car_spacing}"
        assert self.packing_ratio > 0.0, f"packing_ratio={self.packing_ratio}"
        assert self.car_length > 0.0 and self.car_width > 0.0
        assert self.max_transitions_per_frame > 0

    @classmethod
    @lru_cache(1)
    def _FEATURE_KEYS(cls):
        return {f.name: f.type for f in fields(cls)}

    @classmethod
    def from_config(cls, config: Config) -> "SimulationConstants":
        """This is intended to be used in the following way:
        >>> from carflow.core import config
        >>> constants = SimulationConstants.from_config(config())
        """
        casts = {"float": float, "int": int, float: float, int: int}
        return cls(
            **{
                name: config(cls._SECTION, name, cast=casts[type_])
                for name, type_ in cls._FEATURE_KEYS().items()
            }
        )
