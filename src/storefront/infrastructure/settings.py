"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"
_DEFAULT_API_URL = "http://localhost:3000/api/v1"


@dataclass(frozen=True)
class Settings:
    api_url: str = _DEFAULT_API_URL
    api_key: str | None = None
    api_token: str | None = None
    timeout: float = 30.0
    data_dir: Path = _DEFAULT_DATA_DIR

    @staticmethod
    def from_env() -> Settings:
        return Settings(
            api_url=os.getenv("STOREFRONT_API_URL", _DEFAULT_API_URL),
            api_key=os.getenv("STOREFRONT_API_KEY") or None,
            api_token=os.getenv("STOREFRONT_API_TOKEN") or None,
            timeout=float(os.getenv("STOREFRONT_TIMEOUT", "30")),
            data_dir=Path(os.getenv("STOREFRONT_DATA_DIR", str(_DEFAULT_DATA_DIR))),
        )
