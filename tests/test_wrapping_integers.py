import random

import pytest

from tcpstack.wrapping_integers import Wrap32

UINT32_MAX = 2**32 - 1


def test_compare_low_adjacent_seqnos():
    assert (Wrap32(3) != Wrap32(1)) is True
    assert (Wrap32(3) == Wrap32(1)) is False


def test_compare_random_values():
    rng = random.Random(144)
    for _ in range(4096):
        n = rng.randrange(2**32)
        diff = rng.randrange(256)
        m = (n + diff) & UINT32_MAX
        assert (Wrap32(n) == Wrap32(m)) == (n == m)
        assert (Wrap32(n) != Wrap32(m)) == (n != m)


@pytest.mark.parametrize(
    "n, zero, expected",
    [
        (3 * (1 << 32), 0, 0),
        (3 * (1 << 32) + 17, 15, 32),
        (7 * (1 << 32) - 2, 15, 13),
    ],
)
def test_wrap(n, zero, expected):
    assert Wrap32.wrap(n, Wrap32(zero)) == Wrap32(expected)


def test_add_wraps_around():
    assert Wrap32(UINT32_MAX) + 2 == Wrap32(1)


def test_constructor_masks_to_32_bits():
    assert Wrap32(2**32 + 5) == Wrap32(5)


@pytest.mark.parametrize(
    "n, low, high",
    [
        (0, 0, 100000),
        (1, 0, 100000),
        (UINT32_MAX - 1, UINT32_MAX - 100000, UINT32_MAX + 100000),
        (UINT32_MAX, UINT32_MAX - 100000, UINT32_MAX + 100000),
        (UINT32_MAX + 1, UINT32_MAX - 100000, UINT32_MAX + 100000),
        (UINT32_MAX + 2, UINT32_MAX - 100000, UINT32_MAX + 100000),
        (2 * UINT32_MAX - 1, 2 * UINT32_MAX - 100000, 2 * UINT32_MAX + 100000),
        (2 * UINT32_MAX, 2 * UINT32_MAX - 100000, 2 * UINT32_MAX + 100000),
        (2 * UINT32_MAX + 1, 2 * UINT32_MAX - 100000, 2 * UINT32_MAX + 100000),
        (2 * UINT32_MAX + 2, 2 * UINT32_MAX - 100000, 2 * UINT32_MAX + 100000),
    ],
)
def test_unwrap_across_checkpoints(n, low, high):
    zero = Wrap32(19)
    checkpoints = list(range(low, high, 37)) + [high - 1]
    for checkpoint in checkpoints:
        assert Wrap32.wrap(n, zero).unwrap(zero, checkpoint) == n


@pytest.mark.parametrize("base", [UINT32_MAX, 2 * UINT32_MAX])
def test_unwrap_around_fixed_checkpoint(base):
    zero = Wrap32(19)
    for i in list(range(-100000, 100000, 41)) + [99999]:
        assert Wrap32.wrap(base + i, zero).unwrap(zero, base) == base + i


def test_roundtrip_random():
    rng = random.Random(7)
    for _ in range(2000):
        zero = Wrap32(rng.randrange(2**32))
        n = rng.randrange(2**50)
        delta = rng.randrange(-(2**31) + 1, 2**31)
        checkpoint = max(0, n + delta)
        assert Wrap32.wrap(n, zero).unwrap(zero, checkpoint) == n