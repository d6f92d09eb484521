"""Shared fixtures for threshare tests."""

import random
import pytest
from threshare.field import rand_below
from threshare.params import MERSENNE_61, FieldParameters, TOY_FELDMAN_GROUP


@pytest.fixture
def rng():
    """Deterministic RNG for reproducible tests."""
    return random.Random(42)


@pytest.fixture
def sample_elements(rng):
    """10 random GF(M61) elements for property testing."""
    return [rand_below(MERSENNE_61, rng) for _ in range(10)]


@pytest.fixture
def toy_group():
    """p=23, q=11, g=2."""
    return TOY_FELDMAN_GROUP


@pytest.fixture
def safe_prime_group():
    """p = 2q + 1 = 2039, q = 1019; g = 4 is a square, so it has order q."""
    return FieldParameters.feldman_group(2039, 1019, 4)


class BrokenRandom:
    """Random source whose entropy has run dry."""

    def randrange(self, bound):
        raise OSError("entropy source unavailable")


@pytest.fixture
def broken_rng():
    return BrokenRandom()
