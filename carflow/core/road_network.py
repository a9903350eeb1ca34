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
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
from cached_property import cached_property

from carflow.core.coordinates import BoundingBox, Point
from carflow.core.utils.custom_exceptions import RoadNetworkError
from carflow.core.utils.file import read_json
from carflow.core.utils.math import cumulative_probabilities

logger = logging.getLogger(__name__)

NETWORK_EDGE = -1
"""The `into` value of a street that leaves the network instead of ending at an intersection."""

_PROBABILITY_TOLERANCE = 1e-6


@dataclass(frozen=True)
class Street:
    """A polyline the cars travel along, from its first point to its last."""

    points: Tuple[Point, ...]
    distance: Tuple[float, ...]
    """Length of each segment; `distance[i]` spans `points[i]` to `points[i + 1]`."""
    total_distance: float
    speed: float
    """Speed limit."""
    into: int = NETWORK_EDGE
    """Id of the intersection at the end of the street (or the outbound street for intersection paths)."""

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(Point(*p) for p in self.points))
        object.__setattr__(self, "distance", tuple(float(d) for d in self.distance))

    @classmethod
    def from_points(
        cls, points: Sequence[Sequence[float]], speed: float, into: int = NETWORK_EDGE
    ) -> Street:
        """Builds a street deriving the segment lengths from its points."""
        points = tuple(Point(*p) for p in points)
        if len(points) > 1:
            deltas = np.diff(np.array(points, dtype=np.float64), axis=0)
            distance = tuple(float(d) for d in np.linalg.norm(deltas, axis=1))
        else:
            distance = tuple()
        return cls(
            points=points,
            distance=distance,
            total_distance=math.fsum(distance),
            speed=float(speed),
            into=into,
        )

    @cached_property
    def np_points(self) -> np.ndarray:
        """The street points as a read-only (n, 3) array."""
        pts = np.array(self.points, dtype=np.float64).reshape(-1, 3)
        pts.setflags(write=False)
        return pts

    @property
    def segment_count(self) -> int:
        """Number of segments making up the street."""
        return len(self.distance)

    @property
    def leaves_network(self) -> bool:
        """True if the street ends at the border of the network."""
        return self.into < 0


@dataclass(frozen=True)
class Intersection:
    """A node of the network joining inbound and outbound streets."""

    intersection_id: int
    streets_out: Tuple[int, ...]
    in_out_probabilities: Mapping[int, Tuple[float, ...]]
    """Inbound street id to cumulative probabilities aligned with `streets_out`."""
    in_out_paths: Mapping[int, Street]
    """Path id to the connector geometry crossing the intersection.
    The `into` of a path is the outbound street it leads into."""
    path_ids: Mapping[Tuple[int, int], int] = field(default_factory=dict)
    """(inbound street id, outbound street id) to path id."""
    stop: bool = False

    def __post_init__(self):
        object.__setattr__(self, "streets_out", tuple(self.streets_out))
        object.__setattr__(
            self,
            "in_out_probabilities",
            MappingProxyType(
                {k: tuple(v) for k, v in self.in_out_probabilities.items()}
            ),
        )
        object.__setattr__(
            self, "in_out_paths", MappingProxyType(dict(self.in_out_paths))
        )
        object.__setattr__(self, "path_ids", MappingProxyType(dict(self.path_ids)))

    def find_path(self, street_in: int, street_out: int) -> Optional[int]:
        """Find the id of the path connecting the inbound street to the outbound street."""
        return self.path_ids.get((street_in, street_out))

    @property
    def is_dead_end(self) -> bool:
        """True if no street leaves this intersection."""
        return len(self.streets_out) == 0


@dataclass(frozen=True)
class RoadNetwork:
    """The streets and intersections the cars drive on.

    Streets are referenced by their index in `streets`, intersections by their key in
    `intersections`. Nothing in the simulation mutates a network once built.
    """

    streets: Tuple[Street, ...]
    intersections: Mapping[int, Intersection]
    start_street_indices: Tuple[int, ...] = tuple()
    """Streets cars may enter the network on."""
    start_street_probabilities: Tuple[float, ...] = tuple()
    """Cumulative probabilities aligned with `start_street_indices`."""

    def __post_init__(self):
        object.__setattr__(self, "streets", tuple(self.streets))
        object.__setattr__(
            self, "intersections", MappingProxyType(dict(self.intersections))
        )
        object.__setattr__(
            self, "start_street_indices", tuple(self.start_street_indices)
        )
        object.__setattr__(
            self,
            "start_street_probabilities",
            tuple(float(p) for p in self.start_street_probabilities),
        )

    @classmethod
    def empty(cls) -> RoadNetwork:
        """A network with nothing in it."""
        return cls(streets=tuple(), intersections={})

    @cached_property
    def bounding_box(self) -> Optional[BoundingBox]:
        """The minimum bounding box that contains every street point, or `None` for an empty network."""
        return BoundingBox.from_points(p for s in self.streets for p in s.points)

    def intersection_at_end(self, street_id: int) -> Optional[Intersection]:
        """The intersection the given street runs into, if any."""
        return self.intersections.get(self.streets[street_id].into)

    def validate(self):
        """Checks the network against the contract the simulation relies on.

        Single-point streets and intersections without outbound streets are allowed; cars
        treat both as leaving the network.

        Raises:
            RoadNetworkError: If the network is malformed.
        """
        for i, street in enumerate(self.streets):
            _validate_street(street, f"Street `{i}`")

        num_streets = len(self.streets)

        def check_street_id(street_id, referenced_by):
            if not 0 <= street_id < num_streets:
                raise RoadNetworkError.unknown_street(street_id, referenced_by)

        for intersection_id, intersection in self.intersections.items():
            name = f"Intersection `{intersection_id}`"
            for street_out in intersection.streets_out:
                check_street_id(street_out, name)
            for street_in, probabilities in intersection.in_out_probabilities.items():
                check_street_id(street_in, name)
                if len(probabilities) != len(intersection.streets_out):
                    raise RoadNetworkError.bad_probabilities(
                        probabilities, name, "length does not match outbound streets"
                    )
                _validate_cumulative(probabilities, name)
            for path_id, path in intersection.in_out_paths.items():
                _validate_street(path, f"{name} path `{path_id}`")
                check_street_id(path.into, f"{name} path `{path_id}`")
            for (street_in, street_out), path_id in intersection.path_ids.items():
                check_street_id(street_in, name)
                check_street_id(street_out, name)
                if path_id not in intersection.in_out_paths:
                    raise RoadNetworkError(f"{name} references unknown path `{path_id}`.")

        if len(self.start_street_indices) != len(self.start_street_probabilities):
            raise RoadNetworkError.bad_probabilities(
                self.start_street_probabilities,
                "Start streets",
                "length does not match start street indices",
            )
        for street_id in self.start_street_indices:
            check_street_id(street_id, "Start streets")
        if self.start_street_probabilities:
            _validate_cumulative(self.start_street_probabilities, "Start streets")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RoadNetwork:
        """Builds a network from its plain serialized form.

        .. code-block:: python

            {
                "streets": [{"points": [[0, 0, 0], [100, 0, 0]], "speed": 13.9, "into": 0}],
                "intersections": [
                    {
                        "id": 0,
                        "stop": False,
                        "streets_out": [1, 2],
                        "probabilities": {"0": [0.3, 1.0]},
                        "paths": [
                            {"id": 0, "from": 0, "into": 1, "speed": 5.0, "points": [...]},
                        ],
                    }
                ],
                "start_streets": {"indices": [0], "weights": [1.0]},
            }

        Segment lengths are derived from the points. Without `start_streets` every street
        is an entry street with equal weight. `probabilities` may be replaced by relative
        `weights` which are accumulated per inbound street.

        Raises:
            RoadNetworkError: If `data` is not a mapping or holds negative weights.
        """
        if not isinstance(data, Mapping):
            raise RoadNetworkError(
                f"A road network must be a mapping, got `{type(data).__name__}`."
            )
        streets = tuple(
            Street.from_points(
                s["points"], s["speed"], int(s.get("into", NETWORK_EDGE))
            )
            for s in data.get("streets", [])
        )

        intersections: Dict[int, Intersection] = {}
        for i in data.get("intersections", []):
            intersection_id = int(i["id"])
            paths = {}
            path_ids = {}
            for p in i.get("paths", []):
                path_id = int(p["id"])
                paths[path_id] = Street.from_points(
                    p["points"], p["speed"], int(p["into"])
                )
                path_ids[(int(p["from"]), int(p["into"]))] = path_id
            if "weights" in i:
                probabilities = {
                    int(k): _weights_to_cumulative(v, f"Intersection `{intersection_id}`")
                    for k, v in i["weights"].items()
                }
            else:
                probabilities = {
                    int(k): tuple(v) for k, v in i.get("probabilities", {}).items()
                }
            intersections[intersection_id] = Intersection(
                intersection_id=intersection_id,
                streets_out=tuple(int(s) for s in i.get("streets_out", [])),
                in_out_probabilities=probabilities,
                in_out_paths=paths,
                path_ids=path_ids,
                stop=bool(i.get("stop", False)),
            )

        start = data.get("start_streets")
        if start is None:
            indices = tuple(range(len(streets)))
            probabilities = cumulative_probabilities([1.0] * len(streets))
        else:
            indices = tuple(int(s) for s in start["indices"])
            if "weights" in start:
                probabilities = _weights_to_cumulative(start["weights"], "Start streets")
            else:
                probabilities = tuple(start["probabilities"])

        network = cls(
            streets=streets,
            intersections=intersections,
            start_street_indices=indices,
            start_street_probabilities=probabilities,
        )
        logger.debug(
            "Loaded network with %d streets and %d intersections",
            len(streets),
            len(intersections),
        )
        return network

    @classmethod
    def from_json(cls, path: str) -> RoadNetwork:
        """Loads a network serialized by `from_dict`'s format from a json file.

        Raises:
            RoadNetworkError: If the file does not describe a valid network.
        """
        try:
            network = cls.from_dict(read_json(path))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise RoadNetworkError(f"Unable to load road network from `{path}`.") from exc
        network.validate()
        return network


def _validate_street(street: Street, name: str):
    if isinstance(street.into, bool) or not isinstance(street.into, (int, np.integer)):
        raise RoadNetworkError(
            f"{name} has `into` of type `{type(street.into).__name__}`, expected an integer id."
        )
    if len(street.points) == 0:
        raise RoadNetworkError(f"{name} has no points.")
    if len(street.distance) != max(len(street.points) - 1, 0):
        raise RoadNetworkError(
            f"{name} has {len(street.distance)} segment lengths for {len(street.points)} points."
        )
    if len(street.points) > 1:
        expected = np.linalg.norm(np.diff(street.np_points, axis=0), axis=1)
        if not np.allclose(street.distance, expected, rtol=1e-6, atol=1e-6):
            raise RoadNetworkError(f"{name} segment lengths do not match its points.")
    if not math.isclose(
        street.total_distance, math.fsum(street.distance), rel_tol=1e-9, abs_tol=1e-6
    ):
        raise RoadNetworkError(
            f"{name} total distance {street.total_distance} does not match its segments."
        )
    if street.speed < 0:
        raise RoadNetworkError(f"{name} has negative speed limit {street.speed}.")


def _validate_cumulative(probabilities: Sequence[float], name: str):
    if any(b < a for a, b in zip(probabilities, probabilities[1:])):
        raise RoadNetworkError.bad_probabilities(probabilities, name, "decreasing")
    if probabilities and probabilities[-1] < 1.0 - _PROBABILITY_TOLERANCE:
        raise RoadNetworkError.bad_probabilities(
            probabilities, name, "does not reach 1.0"
        )


def _weights_to_cumulative(weights: Sequence[float], name: str) -> Tuple[float, ...]:
    if any(w < 0 for w in weights):
        raise RoadNetworkError.bad_probabilities(
            weights, name, "weights must be non-negative"
        )
    return cumulative_probabilities(weights)
