"""Tests for the seeded generator, shuffle and hashing helpers."""

import pytest

from dailyfive.utils.determinism import (
    Mulberry32,
    fnv1a32,
    fnv1a_hex,
    option_seed,
    pool_seed,
    seeded_shuffle,
)


class TestMulberry32:
    def test_same_seed_same_stream(self):
        a = Mulberry32(12345)
        b = Mulberry32(12345)
        assert [a.random() for _ in range(20)] == [b.random() for _ in range(20)]

    def test_values_in_unit_interval(self):
        rng = Mulberry32(0)
        values = [rng.random() for _ in range(500)]
        assert all(0.0 <= v < 1.0 for v in values)

    def test_different_seeds_diverge(self):
        a = [Mulberry32(1).random() for _ in range(1)]
        b = [Mulberry32(2).random() for _ in range(1)]
        assert a != b

    def test_seed_is_masked_to_32_bits(self):
        assert Mulberry32(2**32 + 7).random() == Mulberry32(7).random()


class TestSeededShuffle:
    @pytest.mark.parametrize("seed", [0, 1, 7, 20250824, 2**32 - 1])
    def test_is_permutation(self, seed):
        items = ["a", "b", "c", "d"]
        out = seeded_shuffle(items, seed)
        assert sorted(out) == sorted(items)
        assert len(out) == len(items)

    def test_reproducible(self):
        items = list(range(10))
        assert seeded_shuffle(items, 99) == seeded_shuffle(items, 99)

    def test_does_not_mutate_input(self):
        items = ["w", "x", "y", "z"]
        seeded_shuffle(items, 3)
        assert items == ["w", "x", "y", "z"]

    @pytest.mark.parametrize("items", [[], ["only"]])
    def test_short_lists_unchanged(self, items):
        out = seeded_shuffle(items, 42)
        assert out == items
        assert out is not items

    def test_seeds_produce_varied_orders(self):
        items = ["a", "b", "c", "d"]
        orders = {tuple(seeded_shuffle(items, s)) for s in range(50)}
        assert len(orders) > 1


class TestFnv1a:
    def test_known_vectors(self):
        assert fnv1a32("") == 0x811C9DC5
        assert fnv1a32("a") == 0xE40C292C

    def test_hex_is_zero_padded(self):
        assert fnv1a_hex("") == "811c9dc5"
        assert len(fnv1a_hex("anything at all")) == 8

    def test_non_ascii_is_stable(self):
        assert fnv1a_hex("Pokémon") == fnv1a_hex("Pokémon")
        assert fnv1a_hex("Pokémon") != fnv1a_hex("Pokemon")


class TestSeeds:
    def test_option_seed_without_nonce(self):
        assert option_seed("20250824", 0) == 20250824
        assert option_seed("20250824", 3) == 20250824 + 21

    def test_option_seed_nonce_changes_seed(self):
        assert option_seed("20250824", 0, "abc") != option_seed("20250824", 0)
        assert option_seed("20250824", 0, "abc") == (20250824 ^ fnv1a32("abc"))

    def test_option_seed_fits_32_bits(self):
        assert 0 <= option_seed("99991231", 4, "zzz") <= 0xFFFFFFFF

    def test_pool_seed_depends_on_salt(self):
        assert pool_seed("20250824", "abc", 0x1111) != pool_seed("20250824", "abc", 0x2222)
