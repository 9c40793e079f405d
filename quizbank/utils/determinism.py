from __future__ import annotations

import os
import random
from typing import Optional

import numpy as np


def set_determinism(seed: Optional[int] = None, python_hash_seed: int = 0) -> Optional[random.Random]:
    """Seed Python ``random`` and NumPy so quiz shuffles are reproducible.

    Returns a dedicated ``random.Random`` for the session engine, or None
    when ``seed`` is None (leave the global RNG unseeded).
    """
    if seed is None:
        return None
    os.environ["PYTHONHASHSEED"] = str(python_hash_seed)
    random.seed(seed)
    np.random.seed(seed)
    return random.Random(seed)
