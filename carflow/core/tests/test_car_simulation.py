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
import random

import numpy as np
import pytest

from carflow.core.car_simulation import CarSimulation
from carflow.core.coordinates import Point
from carflow.core.population import Density
from carflow.core.road_network import RoadNetwork
from carflow.core.simulation_constants import SimulationConstants
from carflow.core.tests.helpers.networks import fork_network, straight_network


def make_simulation(network, max_cars=9000, density=Density.Medium, size=1.0, seed=42):
    return CarSimulation(
        max_cars,
        density,
        size,
        num_types=3,
        network=network,
        rng=random.Random(seed),
        constants=SimulationConstants(),
    )


def snapshots(cars):
    return [c.snapshot() for c in cars]


def test_car_off_the_edge_respawns_at_start():
    sim = make_simulation(straight_network(), max_cars=1, density=Density.High)
    assert len(sim.particles) == 1
    car = sim.particles[0]
    car.segment = 0
    car.segment_dist = 95
    car.speed = 10

    cars = sim.update(1.0)

    assert cars == [car]
    assert car.position == (0, 0, 0)
    assert car.speed == 0
    assert car.segment_dist == 0


def test_initial_placement_fills_target():
    sim = make_simulation(fork_network())
    # three streets of 100m hold 2 cars each, a third of that at medium density
    assert sim.target_count == 2
    assert len(sim.particles) == 2
    assert [c.position for c in sim.particles] == [(100, 0, 0), (210, 0, 0)]


def test_change_density_applies_on_next_update():
    sim = make_simulation(fork_network())
    sim.change_density(Density.High)
    assert len(sim.particles) == 2
    sim.update(0.1)
    assert len(sim.particles) == 6
    sim.update(0.1)
    assert len(sim.particles) == 6

    sim.change_density("Low")
    sim.update(0.1)
    assert len(sim.particles) == sim.target_count == 1


def test_set_size_changes_target():
    sim = make_simulation(fork_network(), density=Density.High)
    assert sim.target_count == 6
    sim.set_size(2.0)
    assert sim.size.length == 10.0
    assert sim.size.width == 5.0
    sim.update(0.0)
    assert len(sim.particles) == sim.target_count == 3


def test_pause_freezes_state():
    sim = make_simulation(fork_network(), density=Density.High)
    sim.update(0.5)
    sim.pause(True)
    assert sim.paused
    before = snapshots(sim.particles)
    sim.update(0.5)
    sim.update(0.5)
    assert snapshots(sim.particles) == before

    sim.pause(False)
    sim.update(0.5)
    assert snapshots(sim.particles) != before


def test_paused_update_does_not_resize():
    sim = make_simulation(fork_network())
    sim.pause(True)
    sim.change_density(Density.High)
    assert len(sim.update(1.0)) == 2


def test_cars_stay_within_network():
    sim = make_simulation(fork_network(stop=True), density=Density.High)
    bbox = sim.network.bounding_box
    for _ in range(500):
        for car in sim.update(1 / 30):
            assert bbox.contains(car.position)
            assert car.speed >= 0
            assert car.waiting >= 0
    assert len(sim.particles) == 6


def test_straight_street_never_overruns():
    sim = make_simulation(straight_network(), density=Density.High)
    for _ in range(300):
        for car in sim.update(0.25):
            assert 0 <= car.x <= 100


def test_reset_rebuilds_with_initial_placement():
    sim = make_simulation(fork_network())
    sim.reset(3)
    assert len(sim.particles) == 3
    assert [c.street for c in sim.particles] == [0, 1, 2]
    sim.update(0.1)
    assert len(sim.particles) == 3

    sim.reset(0)
    assert sim.update(0.1) == []


def test_corners():
    sim = make_simulation(fork_network())
    assert sim.corners == (
        Point(0, 0, 0),
        Point(210, 0, 0),
        Point(210, 110, 0),
        Point(0, 110, 0),
    )


def test_empty_network():
    sim = make_simulation(RoadNetwork.empty())
    assert sim.corners == tuple()
    assert sim.update(1.0) == []
    sim.reset(5)
    assert sim.update(1.0) == []


def test_replace_network():
    sim = make_simulation(straight_network(), density=Density.High)
    old_cars = list(sim.particles)
    sim.replace_network(fork_network())
    assert sim.corners[2] == (210, 110, 0)
    assert len(sim.particles) == 6
    assert not set(map(id, old_cars)) & set(map(id, sim.particles))


def test_rotation_follows_direction():
    sim = make_simulation(fork_network(), density=Density.High)
    for car in sim.update(0.2):
        d = car.direction / np.linalg.norm(car.direction)
        assert np.allclose(car.rotation[0], (d[0], d[1], 0))
        assert np.allclose(car.rotation[1], (-d[1], d[0], 0))


def test_same_seed_same_frames():
    first = make_simulation(fork_network(), density=Density.High, seed=7)
    second = make_simulation(fork_network(), density=Density.High, seed=7)
    for _ in range(100):
        assert snapshots(first.update(0.1)) == snapshots(second.update(0.1))


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(max_cars=0),
        dict(size=0),
        dict(size=-1.0),
    ],
)
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        make_simulation(fork_network(), **kwargs)


def test_invalid_calls():
    sim = make_simulation(fork_network())
    with pytest.raises(ValueError):
        sim.update(-0.1)
    with pytest.raises(ValueError):
        sim.reset(-1)
    with pytest.raises(ValueError):
        sim.set_size(0)
    with pytest.raises(ValueError):
        sim.change_density("Extreme")


def test_defaults_come_from_engine_config(monkeypatch):
    from carflow.core import config

    monkeypatch.setenv("CARFLOW_SIMULATION_CAR_LENGTH", "10")
    config.cache_clear()
    try:
        sim = CarSimulation(9000, Density.High, 1.0, 1, fork_network())
        assert sim.size.length == 10
        assert sim.target_count == 3
    finally:
        config.cache_clear()
