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
class RoadNetworkError(Exception):
    """An exception raised if a road network breaks the contract expected by the simulation."""

    @classmethod
    def unknown_street(cls, street_id: int, referenced_by: str) -> "RoadNetworkError":
        """Generate a `RoadNetworkError` for a reference to a street that does not exist."""
        return cls(f"{referenced_by} references unknown street `{street_id}`.")

    @classmethod
    def bad_probabilities(
        cls, probabilities, referenced_by: str, reason: str
    ) -> "RoadNetworkError":
        """Generate a `RoadNetworkError` for a malformed cumulative probability table."""
        return cls(
            f"{referenced_by} has invalid cumulative probabilities {list(probabilities)}: {reason}."
        )
