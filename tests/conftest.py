import random

import pytest

from typing_pong import BoardConfig


@pytest.fixture
def board():
    return BoardConfig()


@pytest.fixture
def rng():
    return random.Random(1234)
