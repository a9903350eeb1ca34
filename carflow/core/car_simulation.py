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
import random
from typing import List, Optional, Tuple, Union

from carflow.core import config
from carflow.core.car_emitter import CarEmitter
from carflow.core.car_particle import CarParticle
from carflow.core.coordinates import Dimensions, Point
from carflow.core.intersection_router import IntersectionRouter
from carflow.core.population import Density, PopulationController, target_count
from carflow.core.road_network import RoadNetwork
from carflow.core.simulation_constants import SimulationConstants
from carflow.core.utils.logging import timeit


class CarSimulation:
    """Simulates a population of car particles moving over a road network, one frame at a time.

    Args:
        max_cars: Hard cap on the number of cars.
        density: How much of the network capacity to fill with cars.
        size: Scale factor applied to the default car size.
        num_types: Number of visual variants a car can have.
        network: The streets and intersections to drive on.
        rng: Source of randomness for every random decision. Defaults to the `random` module.
        constants: Tuning values. Defaults to those found in the engine configuration.
    """

    def __init__(
        self,
        max_cars: int,
        density: Union[Density, str],
        size: float,
        num_types: int,
        network: RoadNetwork,
        rng=None,
        constants: Optional[SimulationConstants] = None,
    ):
        if max_cars <= 0:
            raise ValueError(f"max_cars must be positive, got {max_cars}")
        if num_types <= 0:
            raise ValueError(f"num_types must be positive, got {num_types}")
        self._logger = logging.getLogger(self.__class__.__name__)
        self._constants = (
            constants
            if constants is not None
            else SimulationConstants.from_config(config())
        )
        self._rng = rng if rng is not None else random
        self._max_cars = max_cars
        self._num_types = num_types
        self._paused = False
        self._car_particles: List[CarParticle] = []
        self._density = Density(density)
        self._car_size = Dimensions(
            self._constants.car_width, self._constants.car_length
        )
        self._target_count = 0
        self._target_stale = True
        self.set_size(size)
        self._use_network(network)

        # Place the cars at their initial locations
        self.initialize_cars()

    def _use_network(self, network: RoadNetwork):
        self._network = network
        self._emitter = CarEmitter(network, self._num_types, self._rng)
        self._router = IntersectionRouter(
            network, self._emitter, self._constants, self._rng
        )
        self._population = PopulationController(
            network, self._emitter, self._constants, self._rng
        )
        bbox = network.bounding_box
        self._corners: Tuple[Point, ...] = bbox.corners if bbox else tuple()
        self._target_stale = True

    @property
    def particles(self) -> List[CarParticle]:
        """The current cars, in creation order."""
        return self._car_particles

    @property
    def corners(self) -> Tuple[Point, ...]:
        """The four ground-plane corners of the network footprint (empty for an empty network)."""
        return self._corners

    @property
    def network(self) -> RoadNetwork:
        """The network the cars drive on."""
        return self._network

    @property
    def size(self) -> Dimensions:
        """The current car size."""
        return self._car_size

    @property
    def density(self) -> Density:
        """The current density setting."""
        return self._density

    @property
    def paused(self) -> bool:
        """Whether updates are frozen."""
        return self._paused

    @property
    def target_count(self) -> int:
        """The number of cars the next update will keep on the network."""
        if self._target_stale:
            capacity = self._population.capacity(self._car_size, self._max_cars)
            self._target_count = target_count(capacity, self._density)
            self._target_stale = False
            self._logger.debug(
                "Capacity %d at %s density, targeting %d cars",
                capacity,
                self._density.value,
                self._target_count,
            )
        return self._target_count

    def pause(self, pause: bool):
        """Sets pause, if true updates leave the cars untouched."""
        self._paused = pause

    def change_density(self, density: Union[Density, str]):
        """Changes the number of cars kept on the network from the next update on."""
        self._density = Density(density)
        self._target_stale = True

    def set_size(self, size: float):
        """Sets the size factor applied to the default car size."""
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        self._car_size = Dimensions(
            self._constants.car_width, self._constants.car_length
        ).scaled(size)
        self._target_stale = True

    def replace_network(self, network: RoadNetwork):
        """Swaps in a new network, placing a fresh set of cars on it."""
        self._car_particles.clear()
        self._use_network(network)
        self.initialize_cars()

    def reset(self, num_cars: int):
        """Destroys then recreates `num_cars` cars with the initial placement."""
        if num_cars < 0:
            raise ValueError(f"num_cars must be non-negative, got {num_cars}")
        self._car_particles.clear()
        self._target_count = num_cars
        self._target_stale = False
        self.initialize_cars()

    def initialize_cars(self):
        """Packs cars back from the end of each street until the target count is reached."""
        self._population.initialize_cars(
            self._car_particles, self.target_count, self._car_size
        )

    def update(self, elapsed_seconds: float) -> List[CarParticle]:
        """Update the positions and velocities of all the cars based on the amount of time
        that has passed since the last update.
        """
        if elapsed_seconds < 0:
            raise ValueError(f"elapsed_seconds must be non-negative, got {elapsed_seconds}")
        if self._paused or not self._network.streets:
            return self._car_particles

        with timeit("CarSimulation.update", self._logger.debug):
            self._population.reconcile(self._car_particles, self.target_count)
            for car in self._car_particles:
                self._router.move_car(car, elapsed_seconds)

        return self._car_particles
