from __future__ import annotations

import os
from pathlib import Path


def load_env_file(base_dir: Path, filename: str = ".env") -> None:
    """Load simple KEY=VALUE pairs from a local .env file.

    Existing environment variables are preserved.
    """
    env_path = base_dir / filename
    if not env_path.exists():
        return

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            os.environ.setdefault(key, value)
