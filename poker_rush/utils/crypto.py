"""Random sources for shuffles, loot rolls and session ids."""

import random
import secrets


def create_rng(seed: int | None = None) -> random.Random:
    """Return the RNG used for every shuffle and loot roll of a session.

    Unseeded sessions get SystemRandom so shuffles carry no observable
    bias; a seed gives a reproducible random.Random for tests and replays.
    """
    if seed is not None:
        return random.Random(seed)
    return secrets.SystemRandom()


def generate_session_id(nbytes: int = 8) -> str:
    """Opaque hex id for a new game session."""
    return secrets.token_hex(nbytes)
