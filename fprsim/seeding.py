"""Per-trial random streams carved out of one master seed."""

from __future__ import annotations

import hashlib

import numpy as np


def seed_for_trial(master_seed: int, *index: int) -> int:
    """64-bit seed for the trial at `index` (one or more positions) of a run.

    The seed is a SHA-256 digest of the master seed and the index path, so it is
    independent of Python's salted `hash`, of process boundaries and of the
    order in which trials execute. ``(m, 2, 3)`` and ``(m, 2)`` address
    different streams.
    """
    path = ".".join(str(int(i)) for i in index)
    payload = f"fprsim-trial|{int(master_seed)}|{path}".encode("utf-8")
    return int.from_bytes(hashlib.sha256(payload).digest()[:8], "big")


def rng_from_seed(seed: int) -> np.random.Generator:
    return np.random.default_rng(int(seed))
