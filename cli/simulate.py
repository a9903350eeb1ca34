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
import io
import time
from collections import defaultdict
from pathlib import Path
from typing import Sequence

import click
import tableprint as tp
from rich import print

from carflow.core.road_network import RoadNetwork
from carflow.core.utils.custom_exceptions import RoadNetworkError

_DENSITIES = click.Choice(["Low", "Medium", "High"], case_sensitive=False)


def _load_network(path) -> RoadNetwork:
    try:
        return RoadNetwork.from_json(path)
    except RoadNetworkError as e:
        raise click.ClickException(str(e)) from e


def summarize(cars: Sequence) -> str:
    """Tabulates the cars per visual variant."""
    by_type = defaultdict(list)
    for car in cars:
        by_type[car.type].append(car)

    rows = []
    for variant in sorted(by_type):
        group = by_type[variant]
        rows.append(
            [
                str(variant),
                str(len(group)),
                str(sum(1 for c in group if c.waiting > 0)),
                str(sum(1 for c in group if c.in_intersection)),
                f"{sum(c.speed for c in group) / len(group):.2f}",
            ]
        )
    # XXX: tableprint crashes when there's no data
    if not rows:
        rows = [[""] * 5]

    out = io.StringIO()
    tp.table(
        rows,
        ["Variant", "Cars", "Waiting", "In Intersection", "Mean Speed"],
        style="round",
        out=out,
    )
    return out.getvalue()


@click.command(name="simulate", help="Run the car simulation over a road network")
@click.argument(
    "network", type=click.Path(exists=True, dir_okay=False), metavar="<network>"
)
@click.option("--frames", default=300, type=int, help="Number of frames to step.")
@click.option(
    "--dt",
    default=1 / 30,
    type=float,
    help="Seconds per frame. Ignored with --realtime.",
)
@click.option("--density", default="Medium", type=_DENSITIES)
@click.option("--size", default=1.0, type=float, help="Car size factor.")
@click.option("--max-cars", default=9000, type=int, help="Hard cap on the car count.")
@click.option("--types", default=9, type=int, help="Number of visual car variants.")
@click.option("--seed", default=None, type=int, help="Seed for the random generators.")
@click.option(
    "--realtime",
    is_flag=True,
    default=False,
    help="Step with measured wall clock time instead of --dt.",
)
@click.option("--fps", default=30, type=int, help="Frame rate used with --realtime.")
def simulate(
    network, frames, dt, density, size, max_cars, types, seed, realtime, fps
):
    from carflow.core import seed as seed_generators
    from carflow.core.car_simulation import CarSimulation
    from carflow.core.utils.frame_clock import FrameClock

    if seed is not None:
        seed_generators(seed)

    road_network = _load_network(network)
    try:
        sim = CarSimulation(
            max_cars, density.title(), size, types, road_network
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    clock = FrameClock()
    clock.start()
    sim_time = 0.0
    cars = sim.particles
    for _ in range(frames):
        if realtime:
            time.sleep(1 / fps)
            elapsed = clock.tick()
        else:
            elapsed = dt
        cars = sim.update(elapsed)
        sim_time += elapsed

    click.echo(
        f"Simulated {frames} frames ({sim_time:.2f}s) with {len(cars)} cars."
    )
    click.echo(summarize(cars))


@click.command(name="inspect", help="Describe a road network and its car capacity")
@click.argument(
    "network", type=click.Path(exists=True, dir_okay=False), metavar="<network>"
)
@click.option("--size", default=1.0, type=float, help="Car size factor.")
@click.option("--max-cars", default=9000, type=int, help="Hard cap on the car count.")
def inspect_network(network, size, max_cars):
    from carflow.core import config
    from carflow.core.coordinates import Dimensions
    from carflow.core.population import Density, network_capacity, target_count
    from carflow.core.simulation_constants import SimulationConstants

    road_network = _load_network(network)
    constants = SimulationConstants.from_config(config())
    car_size = Dimensions(constants.car_width, constants.car_length).scaled(size)
    capacity = network_capacity(
        road_network.streets,
        car_size.length,
        constants.car_spacing,
        constants.packing_ratio,
        max_cars,
    )

    print(
        f"[bold]{Path(network).name}[/bold]: {len(road_network.streets)} streets, "
        f"{len(road_network.intersections)} intersections, "
        f"{len(road_network.start_street_indices)} entry streets"
    )
    for density in Density:
        print(f"  {density.value:<7} {target_count(capacity, density)} cars")
    bbox = road_network.bounding_box
    if bbox is not None:
        corners = ", ".join(f"({p.x:.1f}, {p.y:.1f})" for p in bbox.corners)
        print(f"  corners {corners}")
