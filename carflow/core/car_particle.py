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
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence

import numpy as np

from carflow.core.coordinates import Point
from carflow.core.utils.math import rotation_from_direction

NOT_IN_INTERSECTION = -1

# Used when a car has never had a usable heading.
_DEFAULT_ROTATION = np.array(
    [
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0],
    ]
)
_DEFAULT_ROTATION.setflags(write=False)


class Orientation(NamedTuple):
    """The heading of a car on the render plane and the sprite rotation derived from it."""

    direction: np.ndarray
    """2D heading; the y component is negated for the render plane."""
    rotation: np.ndarray
    """3x3 rotation built from the normalized direction."""

    @classmethod
    def from_direction(
        cls, direction: Sequence[float], previous: Optional["Orientation"] = None
    ) -> "Orientation":
        """Builds an orientation. A zero-length direction keeps the previous rotation."""
        direction = np.array(direction[:2], dtype=np.float64)
        rotation = rotation_from_direction(direction)
        if rotation is None:
            rotation = previous.rotation if previous is not None else _DEFAULT_ROTATION
        return cls(direction=direction, rotation=rotation)


class CarParticleState(NamedTuple):
    """An immutable copy of what a renderer needs to draw a car."""

    position: Point
    direction: Optional[tuple]
    rotation: Optional[tuple]
    type: int


@dataclass(eq=False)
class CarParticle:
    """A car moving through the road network."""

    x: float
    y: float
    z: float
    speed: float
    street: int  # street id; while `intersection` is set, the id of the path inside that intersection
    segment: int  # segment of the current street/path
    segment_dist: float  # distance travelled along the current segment
    waiting: float  # seconds left to wait before moving again
    intersection: int  # intersection being crossed; NOT_IN_INTERSECTION otherwise
    type: int  # visual variant
    orientation: Optional[Orientation] = None  # None until the car has been oriented

    @property
    def position(self) -> Point:
        """The current position of the car."""
        return Point(self.x, self.y, self.z)

    @property
    def in_intersection(self) -> bool:
        """True while the car follows a path through an intersection."""
        return self.intersection != NOT_IN_INTERSECTION

    @property
    def direction(self) -> Optional[np.ndarray]:
        """The render-plane heading, if the car has been oriented."""
        return self.orientation.direction if self.orientation is not None else None

    @property
    def rotation(self) -> Optional[np.ndarray]:
        """The sprite rotation, if the car has been oriented."""
        return self.orientation.rotation if self.orientation is not None else None

    def set_position(self, point: Sequence[float]):
        """Moves the car to the given point."""
        self.x, self.y, self.z = (float(point[0]), float(point[1]), float(point[2]))

    def set_direction(self, direction: Sequence[float]):
        """Orients the car along the given render-plane direction."""
        self.orientation = Orientation.from_direction(direction, self.orientation)

    def snapshot(self) -> CarParticleState:
        """Copies the drawable state of this car."""
        return CarParticleState(
            position=self.position,
            direction=None
            if self.orientation is None
            else tuple(self.orientation.direction.tolist()),
            rotation=None
            if self.orientation is None
            else tuple(map(tuple, self.orientation.rotation.tolist())),
            type=self.type,
        )
