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
"""Moves cars along the segments of a single street or intersection path."""

from carflow.core.car_particle import CarParticle
from carflow.core.road_network import Street
from carflow.core.utils.math import approach, lerp_points, safe_division

NO_TIME_LEFT = -1.0
"""Returned by `advance_on_street` when the car used its whole time on the street."""


def set_position_on_street(car: CarParticle, street: Street):
    """Places the car on its current segment according to `car.segment_dist`."""
    pts = street.np_points
    ratio = safe_division(car.segment_dist, street.distance[car.segment], default=0.0)
    car.set_position(lerp_points(pts[car.segment], pts[car.segment + 1], ratio))


def set_direction_on_street(car: CarParticle, street: Street):
    """Orients the car along its current segment, or along the last segment once
    it has run past the end of the street."""
    pts = street.np_points
    if len(pts) < 2:
        # a single point street has no direction; keep whatever the car had
        if car.orientation is None:
            car.set_direction((0.0, 0.0))
        return
    if car.segment >= len(pts) - 1:
        delta = pts[-1] - pts[-2]
    else:
        delta = pts[car.segment + 1] - pts[car.segment]
    # the render plane has y pointing down
    car.set_direction((delta[0], -delta[1]))


def advance_on_street(
    car: CarParticle, street: Street, elapsed_seconds: float, acceleration: float
) -> float:
    """Moves the car along `street` for `elapsed_seconds`.

    Returns:
        `NO_TIME_LEFT` if the car is still on the street, otherwise the seconds left over
        after reaching the end of the street (always >= 0).
    """
    car.speed = approach(car.speed, street.speed, acceleration * elapsed_seconds)
    car.segment_dist += elapsed_seconds * car.speed

    num_segments = street.segment_count
    if car.segment < num_segments and car.segment_dist < street.distance[car.segment]:
        set_position_on_street(car, street)
        return NO_TIME_LEFT

    # Consume every segment the travelled distance spans
    while car.segment < num_segments and car.segment_dist >= street.distance[car.segment]:
        car.segment_dist -= street.distance[car.segment]
        car.segment += 1

    if car.segment < num_segments:
        set_position_on_street(car, street)
        set_direction_on_street(car, street)
        return NO_TIME_LEFT

    # Ran past the end of the street
    car.segment = num_segments
    car.set_position(street.np_points[-1])
    time_left = safe_division(car.segment_dist, car.speed, default=0.0)
    car.segment_dist = street.distance[-1] if num_segments else 0.0
    set_direction_on_street(car, street)
    return max(time_left, 0.0)
