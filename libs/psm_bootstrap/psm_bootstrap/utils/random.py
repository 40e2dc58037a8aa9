"""Random stream helpers.

Every stochastic stage takes a ``numpy.random.Generator``. Independent
sub-streams for replicates are spawned from a ``SeedSequence`` so a replicate's
draws depend only on its position, never on which worker ran it.
"""

from __future__ import annotations

from typing import Union

import numpy as np

RandomState = Union[int, np.random.Generator, np.random.SeedSequence, None]


def as_generator(random_state: RandomState = None) -> np.random.Generator:
    """Return a Generator, passing an existing one through unchanged."""
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def as_seed_sequence(random_state: RandomState = None) -> np.random.SeedSequence:
    """Return a SeedSequence for spawning child streams.

    A Generator is converted by drawing entropy from it, which advances the
    generator by a fixed number of draws.
    """
    if isinstance(random_state, np.random.SeedSequence):
        return random_state
    if isinstance(random_state, np.random.Generator):
        entropy = random_state.integers(0, 2**63 - 1, size=4, dtype=np.int64)
        return np.random.SeedSequence([int(e) for e in entropy])
    return np.random.SeedSequence(random_state)


def spawn_seeds(
    random_state: RandomState, count: int
) -> list[np.random.SeedSequence]:
    """Spawn ``count`` independent child seeds."""
    return as_seed_sequence(random_state).spawn(count)
