from __future__ import annotations

__all__: list[str] = ["VERSION"]

VERSION: str = "0.1.0"
