from pathlib import Path
from typing import Tuple


def load_source(path: str) -> Tuple[str, str]:
    """Read a schema file, returning ``(text, file_name)``."""
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    with source_path.open("r", encoding="utf-8") as handle:
        text = handle.read()

    return text, source_path.name
