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
import time


class FrameClock:
    """Measures the time between frames of a host render loop.

    Args:
        speed_multiplier: Scales the measured time so the simulation can run faster or slower than real time.
        time_source: Returns the current time in seconds.
    """

    def __init__(self, speed_multiplier: float = 1.0, time_source=time.monotonic):
        assert speed_multiplier >= 0, f"speed_multiplier={speed_multiplier}"
        self._speed_multiplier = speed_multiplier
        self._time_source = time_source
        self._last_time = None

    @property
    def speed_multiplier(self) -> float:
        """The factor the measured frame time is scaled by."""
        return self._speed_multiplier

    @speed_multiplier.setter
    def speed_multiplier(self, value: float):
        assert value >= 0, f"speed_multiplier={value}"
        self._speed_multiplier = value

    def start(self):
        """Starts timing the first frame."""
        self._last_time = self._time_source()

    def tick(self) -> float:
        """Ends the current frame and returns its scaled duration in seconds.
        The first tick of a clock that was never started returns 0.
        """
        now = self._time_source()
        if self._last_time is None:
            self._last_time = now
            return 0.0
        elapsed = max(now - self._last_time, 0.0)
        self._last_time = now
        return elapsed * self._speed_multiplier
