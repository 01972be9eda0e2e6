"""File operation utilities."""
import json
import os
import tempfile
from pathlib import Path
from typing import Any


def write_json_atomic(path: Path, data: Any) -> None:
    """Write data as indented JSON, replacing the previous file in one step.

    The document goes to a temporary file next to the target first, so a
    failed write never truncates the existing file. Raises OSError.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as tmp:
            tmp_name = tmp.name
            json.dump(data, tmp, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except OSError:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
