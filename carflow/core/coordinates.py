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
from typing import Iterable, NamedTuple, Optional, Tuple


class Dimensions(NamedTuple):
    """Representation of the ground footprint of a car sprite."""

    width: float
    length: float

    def scaled(self, factor: float) -> "Dimensions":
        """Returns these dimensions multiplied by `factor`."""
        return Dimensions(width=self.width * factor, length=self.length * factor)


class Point(NamedTuple):
    """A coordinate in space."""

    x: float
    y: float
    z: Optional[float] = 0


@dataclass(frozen=True)
class BoundingBox:
    """A 2-dimensional axis aligned box located in a [x, y] coordinate system."""

    min_pt: Point
    max_pt: Point

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Optional["BoundingBox"]:
        """The smallest box containing all `points`, or None if there are none."""
        points = list(points)
        if not points:
            return None
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min_pt=Point(min(xs), min(ys)), max_pt=Point(max(xs), max(ys)))

    @property
    def corners(self) -> Tuple[Point, Point, Point, Point]:
        """The four ground-plane corners, counter-clockwise from the minimum corner."""
        return (
            Point(self.min_pt.x, self.min_pt.y, 0),
            Point(self.max_pt.x, self.min_pt.y, 0),
            Point(self.max_pt.x, self.max_pt.y, 0),
            Point(self.min_pt.x, self.max_pt.y, 0),
        )

    def contains(self, pt: Point) -> bool:
        """Returns True iff pt lies within the bounding box or on its border."""
        return (
            self.min_pt.x <= pt.x <= self.max_pt.x
            and self.min_pt.y <= pt.y <= self.max_pt.y
        )
