from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str
    max_age: int | None = None
    http_only: bool = True
    path: str = "/"
