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
import math
from bisect import bisect_right
from typing import Optional, Sequence, Tuple

import numpy as np


def safe_division(n: float, d: float, default=math.inf):
    """This method uses a short circuit form where `and` converts right side to true|false (as 1|0) in which cases are:
    True and # == #
    False and NaN == False
    """
    return d and n / d or default


def approach(value: float, target: float, max_delta: float) -> float:
    """Move `value` toward `target` by at most `max_delta` without overshooting."""
    assert max_delta >= 0.0, f"max_delta({max_delta}) must be non-negative"
    if value < target:
        return min(value + max_delta, target)
    if value > target:
        return max(value - max_delta, target)
    return value


def lerp_points(start: np.ndarray, end: np.ndarray, ratio: float) -> np.ndarray:
    """Linearly interpolate between two points."""
    return start + (end - start) * ratio


def normalize(vec: Sequence[float]) -> Optional[np.ndarray]:
    """Returns the unit vector of `vec`, or None if it has no length."""
    vec = np.asarray(vec, dtype=np.float64)
    norm = np.linalg.norm(vec)
    if norm == 0 or not math.isfinite(norm):
        return None
    return vec / norm


def rotation_from_direction(direction: Sequence[float]) -> Optional[np.ndarray]:
    """Builds the 3x3 row-major planar rotation whose first row is the unit
    direction and second row its perpendicular. The z row is left empty.

    Returns None if `direction` has no length.
    """
    d = normalize(direction[:2])
    if d is None:
        return None
    return np.array(
        [
            [d[0], d[1], 0.0],
            [-d[1], d[0], 0.0],
            [0.0, 0.0, 0.0],
        ]
    )


def cumulative_index(cumulative: Sequence[float], r: float) -> Optional[int]:
    """Returns the index of the first cumulative probability that exceeds `r`,
    or None if `r` is not below the last entry.
    """
    index = bisect_right(cumulative, r)
    if index >= len(cumulative):
        return None
    return index


def cumulative_probabilities(weights: Sequence[float]) -> Tuple[float, ...]:
    """Converts relative weights into a non-decreasing cumulative table ending at 1."""
    weights = np.asarray(weights, dtype=np.float64)
    if (weights < 0).any():
        raise ValueError(f"weights must be non-negative: {weights}")
    total = weights.sum()
    if len(weights) == 0 or total <= 0:
        return tuple()
    cumulative = np.cumsum(weights) / total
    cumulative[-1] = 1.0
    return tuple(float(p) for p in cumulative)
