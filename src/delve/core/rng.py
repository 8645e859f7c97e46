"""Deterministic RNG wrapper built on top of random.Random."""
from __future__ import annotations

from random import Random
from typing import Any, Dict, MutableSequence, Sequence, TypeVar

T_co = TypeVar("T_co")

RNGStatePayload = Dict[str, Any]


class RNG:
    """Wrapper around random.Random that provides deterministic helpers."""

    def __init__(self, seed: int) -> None:
        self._random = Random(seed)

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._random.randint(a, b)

    def random(self) -> float:
        """Return the next random floating point number in the range [0.0, 1.0)."""
        return self._random.random()

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self._random.random() < probability

    def choice(self, seq: Sequence[T_co]) -> T_co:
        """Return a random element from the non-empty sequence."""
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return self._random.choice(seq)

    def shuffle(self, seq: MutableSequence[T_co]) -> None:
        """Shuffle the sequence in-place."""
        self._random.shuffle(seq)

    def export_state(self) -> RNGStatePayload:
        """Return a JSON-safe snapshot of the generator state."""
        version, internal, gauss = self._random.getstate()
        return {"version": version, "state": list(internal), "gauss": gauss}

    def restore_state(self, payload: RNGStatePayload) -> None:
        """Restore a snapshot produced by export_state."""
        try:
            version = payload["version"]
            internal = tuple(payload["state"])
            gauss = payload.get("gauss")
            self._random.setstate((version, internal, gauss))
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed RNG state: {exc}") from exc


def derive_seed(base_seed: int, *parts: int) -> int:
    """Mix integers into a stable 31-bit seed (independent of PYTHONHASHSEED)."""
    value = base_seed & 0x7FFFFFFF
    for part in parts:
        value = (value * 1_000_003 + part * 7919 + 0x9E3779B1) & 0x7FFFFFFF
    return value
