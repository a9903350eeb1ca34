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

from carflow.core.car_emitter import CarEmitter
from carflow.core.car_particle import NOT_IN_INTERSECTION, CarParticle
from carflow.core.road_network import Intersection, RoadNetwork, Street
from carflow.core.simulation_constants import SimulationConstants
from carflow.core.street_kinematics import (
    NO_TIME_LEFT,
    advance_on_street,
    set_direction_on_street,
)
from carflow.core.utils.math import cumulative_index


class IntersectionRouter:
    """Drives cars through a frame: along streets, into intersections and out the other side."""

    def __init__(
        self,
        network: RoadNetwork,
        emitter: CarEmitter,
        constants: SimulationConstants,
        rng,
    ):
        self._logger = logging.getLogger(self.__class__.__name__)
        self._network = network
        self._emitter = emitter
        self._constants = constants
        self._rng = rng

    def next_street(self, intersection: Intersection, street_in: int) -> Optional[int]:
        """Uses probability to pick the next street to travel on.

        Returns None if the inbound street has no probabilities or the draw misses every bucket.
        """
        probabilities = intersection.in_out_probabilities.get(street_in)
        if probabilities is None:
            return None
        index = cumulative_index(probabilities, self._rng.random())
        if index is None:
            return None
        return intersection.streets_out[index]

    def current_street(self, car: CarParticle) -> Optional[Street]:
        """The street, or intersection path, the car is travelling along."""
        if not car.in_intersection:
            return self._network.streets[car.street]
        intersection = self._network.intersections.get(car.intersection)
        if intersection is None:
            return None
        return intersection.in_out_paths.get(car.street)

    def move_car(self, car: CarParticle, elapsed_seconds: float):
        """Update a given car's speed and position for one frame."""
        time_left = elapsed_seconds
        transitions = 0
        while time_left > 0:
            if car.waiting > 0:
                if time_left <= car.waiting:
                    # spent the whole frame waiting
                    car.waiting -= time_left
                    return
                time_left -= car.waiting
                car.waiting = 0.0

            street = self.current_street(car)
            if street is None:
                self._logger.warning(
                    "Car lost its path %d in intersection %d; respawning it.",
                    car.street,
                    car.intersection,
                )
                self._emitter.restart_car(car)
                return

            if car.speed == 0:
                # just got done waiting
                set_direction_on_street(car, street)
            time_left = advance_on_street(
                car, street, time_left, self._constants.acceleration
            )
            if time_left < 0:
                return

            transitions += 1
            if transitions > self._constants.max_transitions_per_frame:
                self._logger.warning(
                    "Car on street %d exceeded %d transitions in one frame; holding it until the next frame.",
                    car.street,
                    self._constants.max_transitions_per_frame,
                )
                # held at the end of the street with no distance carried over
                car.segment_dist = 0.0
                return

            if car.in_intersection:
                self._leave_intersection(car)
            else:
                time_left = self._enter_intersection(car, time_left)

    def _leave_intersection(self, car: CarParticle):
        path = self._network.intersections[car.intersection].in_out_paths[car.street]
        car.street = path.into
        car.segment = 0
        car.segment_dist = 0.0
        car.intersection = NOT_IN_INTERSECTION
        set_direction_on_street(car, self._network.streets[car.street])

    def _enter_intersection(self, car: CarParticle, time_left: float) -> float:
        street = self._network.streets[car.street]
        intersection = self._network.intersection_at_end(car.street)
        if street.leaves_network or intersection is None or intersection.is_dead_end:
            # the car has gone off of the map
            self._emitter.restart_car(car)
            return NO_TIME_LEFT

        street_out = self.next_street(intersection, car.street)
        if street_out is None:
            self._logger.debug(
                "No outbound street drawn at intersection %d from street %d; respawning car.",
                intersection.intersection_id,
                car.street,
            )
            self._emitter.restart_car(car)
            return NO_TIME_LEFT

        path_id = intersection.find_path(car.street, street_out)
        car.segment = 0
        car.segment_dist = 0.0

        if path_id is None:
            # no geometry through the intersection, jump to the start of the street
            car.street = street_out
            set_direction_on_street(car, self._network.streets[street_out])
            return time_left

        car.intersection = intersection.intersection_id
        car.street = path_id
        if intersection.stop:
            car.speed = 0.0
            if time_left < self._constants.wait_time:
                car.waiting = self._constants.wait_time - time_left
                return NO_TIME_LEFT
            return time_left - self._constants.wait_time

        set_direction_on_street(car, intersection.in_out_paths[path_id])
        return time_left
