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
import logging
from typing import Optional

from carflow.core.car_particle import NOT_IN_INTERSECTION, CarParticle
from carflow.core.road_network import RoadNetwork
from carflow.core.street_kinematics import (
    set_direction_on_street,
    set_position_on_street,
)
from carflow.core.utils.math import cumulative_index


class CarEmitter:
    """Creates cars on the network and puts cars that left it back onto an entry street.

    Args:
        network: The streets cars are placed on.
        num_types: The number of visual variants to choose from.
        rng: The source of randomness; anything with `random()` and `randint()`.
    """

    def __init__(self, network: RoadNetwork, num_types: int, rng):
        assert num_types > 0, f"num_types={num_types}"
        self._logger = logging.getLogger(self.__class__.__name__)
        self._network = network
        self._num_types = num_types
        self._rng = rng

    def random_type(self) -> int:
        """Pick a visual variant uniformly."""
        return self._rng.randint(0, self._num_types - 1)

    def pick_start_street(self) -> int:
        """Pick an entry street using the network's cumulative start probabilities."""
        indices = self._network.start_street_indices
        if not indices:
            return self._rng.randint(0, len(self._network.streets) - 1)
        probabilities = self._network.start_street_probabilities
        if not probabilities:
            return indices[self._rng.randint(0, len(indices) - 1)]
        index = cumulative_index(probabilities, self._rng.random())
        if index is None:
            # the draw landed at or past the last boundary
            index = len(indices) - 1
        return indices[index]

    def emit_car(
        self,
        street: Optional[int] = None,
        segment: Optional[int] = None,
        distance: Optional[float] = None,
    ) -> CarParticle:
        """Create a car on `street` (an entry street if not given), `distance` along
        `segment`. Without a segment the car starts at the beginning of the street.
        """
        if street is None:
            street = self.pick_start_street()
        s = self._network.streets[street]

        car = CarParticle(
            x=0.0,
            y=0.0,
            z=0.0,
            speed=0.0,
            street=street,
            segment=0,
            segment_dist=0.0,
            waiting=0.0,
            intersection=NOT_IN_INTERSECTION,
            type=self.random_type(),
        )
        car.set_position(s.np_points[0])

        if segment is not None and s.segment_count > 0:
            if segment >= s.segment_count:
                # clamp onto the end of the last segment
                car.segment = s.segment_count - 1
                car.segment_dist = s.distance[car.segment]
                car.set_position(s.np_points[-1])
            else:
                car.segment = segment
                if distance is not None:
                    car.segment_dist = distance
                    set_position_on_street(car, s)

        set_direction_on_street(car, s)
        return car

    def restart_car(self, car: CarParticle):
        """Move a car to the start of an entry street as if it were new."""
        street = self.pick_start_street()
        car.set_position(self._network.streets[street].np_points[0])
        car.speed = 0.0
        car.street = street
        car.segment = 0
        car.segment_dist = 0.0
        car.waiting = 0.0
        car.intersection = NOT_IN_INTERSECTION
        car.type = self.random_type()
        set_direction_on_street(car, self._network.streets[street])
        self._logger.debug("Respawned car on street %d", street)
