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

import click

from cli.simulate import inspect_network, simulate


@click.group()
@click.option(
    "-v", "--verbose", count=True, help="Log more; repeat for debug output."
)
def cfl(verbose):
    """
    The carflow command line interface.
    Use --help with each command for further information.
    """
    from carflow.core import config

    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    if config().get_setting("core", "debug", cast=bool):
        level = logging.DEBUG
    logging.basicConfig(level=level)


cfl.add_command(simulate)
cfl.add_command(inspect_network)

if __name__ == "__main__":
    cfl()
