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
import json
import math

import pytest

from carflow.core.coordinates import Point
from carflow.core.road_network import NETWORK_EDGE, Intersection, RoadNetwork, Street
from carflow.core.tests.helpers.networks import fork_network, fork_network_dict
from carflow.core.utils.custom_exceptions import RoadNetworkError


def test_street_from_points_derives_distances():
    street = Street.from_points([(0, 0, 0), (3, 4, 0), (3, 4, 12)], speed=10)
    assert street.distance == (5.0, 12.0)
    assert street.total_distance == 17.0
    assert street.segment_count == 2
    assert street.into == NETWORK_EDGE
    assert street.leaves_network
    assert street.points[1] == Point(3, 4, 0)


def test_street_distances_sum_to_total():
    network = RoadNetwork.from_dict(fork_network_dict())
    for street in network.streets:
        assert math.isclose(sum(street.distance), street.total_distance, abs_tol=1e-9)
    for intersection in network.intersections.values():
        for probabilities in intersection.in_out_probabilities.values():
            assert all(b >= a for a, b in zip(probabilities, probabilities[1:]))
            assert probabilities[-1] >= 1 - 1e-9


def test_single_point_street():
    street = Street.from_points([(1, 2)], speed=5)
    assert street.distance == tuple()
    assert street.total_distance == 0
    assert street.points == (Point(1, 2, 0),)
    RoadNetwork(streets=(street,), intersections={}).validate()


def test_find_path():
    intersection = fork_network().intersections[0]
    assert intersection.find_path(0, 1) == 0
    assert intersection.find_path(0, 2) == 1
    assert intersection.find_path(1, 2) is None
    assert intersection.in_out_paths[0].into == 1
    assert not intersection.is_dead_end


def test_network_is_read_only():
    network = fork_network()
    with pytest.raises(TypeError):
        network.intersections[1] = network.intersections[0]
    with pytest.raises(AttributeError):
        network.streets = tuple()


def test_bounding_box():
    bbox = fork_network().bounding_box
    assert bbox.min_pt == Point(0, 0)
    assert bbox.max_pt == Point(210, 110)
    assert bbox.contains(Point(100, 110))
    assert not bbox.contains(Point(-0.5, 50))
    assert bbox.corners == (
        Point(0, 0, 0),
        Point(210, 0, 0),
        Point(210, 110, 0),
        Point(0, 110, 0),
    )
    assert RoadNetwork.empty().bounding_box is None


def test_intersection_at_end():
    network = fork_network()
    assert network.intersection_at_end(0) is network.intersections[0]
    assert network.intersection_at_end(1) is None


def test_validate_accepts_well_formed_network():
    fork_network().validate()
    dead_end = Intersection(
        intersection_id=0,
        streets_out=tuple(),
        in_out_probabilities={},
        in_out_paths={},
    )
    RoadNetwork(
        streets=(Street.from_points([(0, 0), (1, 0)], 1, 0),),
        intersections={0: dead_end},
        start_street_indices=(0,),
        start_street_probabilities=(1.0,),
    ).validate()


@pytest.mark.parametrize(
    "probabilities, message",
    [
        ((0.7, 0.3), "decreasing"),
        ((0.3, 0.9), "does not reach 1.0"),
        ((1.0,), "length does not match"),
    ],
)
def test_validate_rejects_bad_probabilities(probabilities, message):
    with pytest.raises(RoadNetworkError, match=message):
        fork_network(probabilities=probabilities).validate()


def test_validate_rejects_unknown_streets():
    network = fork_network()
    broken = RoadNetwork(
        streets=network.streets,
        intersections=network.intersections,
        start_street_indices=(7,),
        start_street_probabilities=(1.0,),
    )
    with pytest.raises(RoadNetworkError, match="unknown street `7`"):
        broken.validate()


def test_validate_rejects_empty_and_inconsistent_streets():
    with pytest.raises(RoadNetworkError, match="no points"):
        RoadNetwork(
            streets=(Street(points=(), distance=(), total_distance=0, speed=1),),
            intersections={},
        ).validate()
    with pytest.raises(RoadNetworkError, match="do not match"):
        RoadNetwork(
            streets=(
                Street(
                    points=((0, 0, 0), (10, 0, 0)),
                    distance=(4.0,),
                    total_distance=4.0,
                    speed=1,
                ),
            ),
            intersections={},
        ).validate()


def test_from_dict():
    network = RoadNetwork.from_dict(fork_network_dict(stop=True))
    assert len(network.streets) == 3
    intersection = network.intersections[0]
    assert intersection.stop
    assert intersection.streets_out == (1, 2)
    assert intersection.in_out_probabilities[0] == (0.3, 1.0)
    assert intersection.find_path(0, 2) == 1
    assert intersection.in_out_paths[1].total_distance == 10
    assert network.start_street_indices == (0,)


def test_from_dict_weights_and_default_start_streets():
    data = fork_network_dict()
    del data["start_streets"]
    intersection = data["intersections"][0]
    del intersection["probabilities"]
    intersection["weights"] = {"0": [1, 3]}
    network = RoadNetwork.from_dict(data)
    assert network.intersections[0].in_out_probabilities[0] == (0.25, 1.0)
    assert network.start_street_indices == (0, 1, 2)
    assert network.start_street_probabilities[-1] == 1.0
    network.validate()


def test_from_json(tmp_path):
    path = tmp_path / "fork.json"
    path.write_text(json.dumps(fork_network_dict()))
    network = RoadNetwork.from_json(str(path))
    assert network.streets == fork_network().streets


def test_from_json_rejects_malformed(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"streets": [{"points": [[0, 0, 0]]}]}))
    with pytest.raises(RoadNetworkError):
        RoadNetwork.from_json(str(path))


def write_network(tmp_path, data):
    path = tmp_path / "network.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_from_json_rejects_non_mapping(tmp_path):
    with pytest.raises(RoadNetworkError, match="must be a mapping"):
        RoadNetwork.from_json(write_network(tmp_path, [1, 2]))
    with pytest.raises(RoadNetworkError):
        RoadNetwork.from_dict([1, 2])


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.update(start_streets={"indices": [0, 1], "weights": [-1, 2]}),
        lambda d: d["intersections"][0].update(weights={"0": [3, -1]}),
    ],
)
def test_from_json_rejects_negative_weights(tmp_path, mutate):
    data = fork_network_dict()
    mutate(data)
    with pytest.raises(RoadNetworkError, match="non-negative"):
        RoadNetwork.from_json(write_network(tmp_path, data))


def test_from_json_rejects_malformed_weights(tmp_path):
    data = fork_network_dict()
    data["intersections"][0]["weights"] = [1, 3]
    with pytest.raises(RoadNetworkError):
        RoadNetwork.from_json(write_network(tmp_path, data))


def test_street_into_is_read_as_an_integer(tmp_path):
    data = fork_network_dict()
    data["streets"][1]["into"] = "-1"
    network = RoadNetwork.from_json(write_network(tmp_path, data))
    assert network.streets[1].into == NETWORK_EDGE
    assert network.streets[1].leaves_network

    data["streets"][1]["into"] = "north"
    with pytest.raises(RoadNetworkError):
        RoadNetwork.from_json(write_network(tmp_path, data))


def test_validate_rejects_non_integer_into():
    network = fork_network()
    bad = Street(
        points=((0, 0, 0), (10, 0, 0)),
        distance=(10.0,),
        total_distance=10.0,
        speed=10.0,
        into="-1",
    )
    with pytest.raises(RoadNetworkError, match="expected an integer id"):
        RoadNetwork(
            streets=network.streets + (bad,),
            intersections=network.intersections,
            start_street_indices=(0,),
            start_street_probabilities=(1.0,),
        ).validate()
