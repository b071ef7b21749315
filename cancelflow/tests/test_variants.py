"""Tests for downsell variant assignment."""
import random
import uuid

import pytest

from cancelflow.utils.variants import (
    assign_variant,
    deterministic_variant,
    random_variant,
)

from conftest import USER_A, USER_B


class TestDeterministicVariant:
    def test_known_users(self) -> None:
        assert deterministic_variant(USER_A) == "A"
        assert deterministic_variant(USER_B) == "B"

    def test_stable_across_calls(self) -> None:
        rng = random.Random(7)
        for _ in range(50):
            u = str(uuid.UUID(int=rng.getrandbits(128), version=4))
            first = assign_variant(u)
            assert all(assign_variant(u) == first for _ in range(5))

    def test_roughly_even_split(self) -> None:
        rng = random.Random(42)
        n = 4000
        a = sum(
            deterministic_variant(str(uuid.UUID(int=rng.getrandbits(128), version=4))) == "A"
            for _ in range(n)
        )
        assert 0.45 < a / n < 0.55


class TestPolicies:
    def test_random_policy_only_yields_a_or_b(self) -> None:
        seen = {assign_variant(USER_A, "random") for _ in range(200)}
        assert seen == {"A", "B"}

    def test_random_variant_values(self) -> None:
        assert random_variant() in ("A", "B")

    def test_unknown_policy(self) -> None:
        with pytest.raises(ValueError):
            assign_variant(USER_A, "round-robin")
