from __future__ import annotations

from typing import Iterable, List, Optional


def clean_tags(values: Optional[Iterable[str]]) -> List[str]:
    """Strip whitespace, drop empties and repeats; first spelling wins."""
    seen = set()
    out: List[str] = []
    for raw in values or []:
        tag = (raw or "").strip()
        if not tag or tag in seen:
            continue
        seen.add(tag)
        out.append(tag)
    return out
