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
import math
from enum import Enum
from typing import List, Sequence

from carflow.core.car_emitter import CarEmitter
from carflow.core.car_particle import CarParticle
from carflow.core.coordinates import Dimensions
from carflow.core.road_network import RoadNetwork, Street
from carflow.core.simulation_constants import SimulationConstants


class Density(str, Enum):
    """The share of the network capacity that is populated with cars."""

    Low = "Low"
    Medium = "Medium"
    High = "High"

    @property
    def divisor(self) -> int:
        """Capacity is divided by this to get the number of cars."""
        return {Density.Low: 5, Density.Medium: 3, Density.High: 1}[self]


def street_capacity(
    street: Street, car_length: float, car_spacing: float, packing_ratio: float
) -> int:
    """The number of cars `street` can hold."""
    return math.floor(street.total_distance / (car_length * car_spacing * packing_ratio)) + 1


def network_capacity(
    streets: Sequence[Street],
    car_length: float,
    car_spacing: float,
    packing_ratio: float,
    max_cars: int,
) -> int:
    """Returns the number of cars that fit on `streets` with a hard cap of `max_cars`."""
    cars_that_can_fit = sum(
        street_capacity(s, car_length, car_spacing, packing_ratio) for s in streets
    )
    return min(cars_that_can_fit, max_cars)


def target_count(capacity: int, density: Density) -> int:
    """The number of cars to keep on the network for the given density."""
    return capacity // Density(density).divisor


class PopulationController:
    """Keeps the number of cars at a target by creating and removing them."""

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

    def capacity(self, car_size: Dimensions, max_cars: int) -> int:
        """How many cars of `car_size` the network holds, capped at `max_cars`."""
        return network_capacity(
            self._network.streets,
            car_size.length,
            self._constants.car_spacing,
            self._constants.packing_ratio,
            max_cars,
        )

    def spawn_car(self) -> CarParticle:
        """Create a car at a random offset along an entry street."""
        street = self._emitter.pick_start_street()
        s = self._network.streets[street]
        if s.segment_count == 0:
            return self._emitter.emit_car(street)
        segment = self._rng.randint(0, s.segment_count - 1)
        return self._emitter.emit_car(
            street, segment, self._rng.random() * s.distance[segment]
        )

    def reconcile(self, cars: List[CarParticle], target: int):
        """Add or remove cars (from the end) until there are `target` of them."""
        missing = target - len(cars)
        if missing > 0:
            cars.extend(self.spawn_car() for _ in range(missing))
            self._logger.debug("Added %d cars, now %d", missing, len(cars))
        elif missing < 0:
            del cars[target:]
            self._logger.debug("Removed %d cars, now %d", -missing, len(cars))

    def initialize_cars(self, cars: List[CarParticle], target: int, car_size: Dimensions):
        """Places cars at fixed spacing starting at the end of each street and working
        back, one car per street per round, until `target` cars exist or no street has room.
        """
        spacing = car_size.width * self._constants.car_spacing
        streets = self._network.streets
        rounds = 0  # number of cars back from the end of a street
        cars_added = 1
        while cars_added > 0 and len(cars) < target:
            cars_added = 0
            distance_back = rounds * spacing
            for i, street in enumerate(streets):
                if len(cars) >= target:
                    break
                segment = street.segment_count - 1
                d = distance_back
                while segment >= 0 and d > street.distance[segment]:
                    d -= street.distance[segment]
                    segment -= 1
                if segment >= 0:
                    cars.append(
                        self._emitter.emit_car(i, segment, street.distance[segment] - d)
                    )
                    cars_added += 1
            rounds += 1
        self._logger.debug(
            "Placed %d cars in %d rounds (target %d)", len(cars), rounds, target
        )
