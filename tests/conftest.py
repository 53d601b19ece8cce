import io
import random

import pytest
from rich.console import Console

from mdset.report import Reporter


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def reporter(console):
    return Reporter(console=console, verbose=True)


@pytest.fixture
def rng():
    return random.Random(42)
