import pytest

from delve.core.rng import RNG, derive_seed


def test_rng_determinism_same_seed() -> None:
    rng_a = RNG(12345)
    rng_b = RNG(12345)

    ints_a = [rng_a.randint(1, 100) for _ in range(5)]
    ints_b = [rng_b.randint(1, 100) for _ in range(5)]
    choices_a = [rng_a.choice(["north", "south", "east"]) for _ in range(5)]
    choices_b = [rng_b.choice(["north", "south", "east"]) for _ in range(5)]

    assert ints_a == ints_b
    assert choices_a == choices_b


def test_rng_export_and_restore_resumes_sequence() -> None:
    rng = RNG(99)
    rng.randint(1, 10)
    snapshot = rng.export_state()
    expected = [rng.randint(1, 1000) for _ in range(5)]

    resumed = RNG(1)
    resumed.restore_state(snapshot)

    assert [resumed.randint(1, 1000) for _ in range(5)] == expected


def test_rng_restore_rejects_malformed_payload() -> None:
    with pytest.raises(ValueError):
        RNG(1).restore_state({"state": [1, 2, 3]})


def test_rng_chance_edges() -> None:
    rng = RNG(5)
    assert not any(rng.chance(0.0) for _ in range(50))
    assert all(rng.chance(1.0) for _ in range(50))


def test_rng_choice_rejects_empty_sequence() -> None:
    with pytest.raises(ValueError):
        RNG(5).choice([])


def test_derive_seed_is_stable_and_level_sensitive() -> None:
    assert derive_seed(20240613, 7) == derive_seed(20240613, 7)
    seeds = {derive_seed(20240613, level) for level in range(1, 101)}
    assert len(seeds) == 100
    assert all(0 <= seed <= 0x7FFFFFFF for seed in seeds)
