from __future__ import annotations

import json
import os
import random
import tempfile
from pathlib import Path
from typing import Any, Optional


def read_json(path: str | Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: str | Path, payload: Any) -> None:
    write_text_atomic(path, json.dumps(payload, ensure_ascii=False, indent=2))


def write_text_atomic(path: str | Path, text: str) -> None:
    """Write ``text`` to a sibling temp file, then rename it over ``path``."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{p.name}.", dir=str(p.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, p)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def shuffle_list(xs: list, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> list:
    """Return a uniformly shuffled copy of ``xs`` (Fisher-Yates via random.shuffle)."""
    ys = list(xs)
    if rng is not None:
        rng.shuffle(ys)
    elif seed is not None:
        random.Random(seed).shuffle(ys)
    else:
        random.shuffle(ys)
    return ys
