"""JSON file storage layer for result documents.

Writes serialized result documents under an output directory using the
canonical filename. Uses atomic writes to prevent partial files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class ResultStore:
    """Persist and read result documents as JSON files.

    Writes are atomic (write to .tmp, then rename) to prevent partial files.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def ensure_dirs(self) -> None:
        """Create the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        return self.output_dir / filename

    def save(self, content: bytes, filename: str) -> Path:
        """Write serialized document bytes under filename.

        Args:
            content: Serialized result document.
            filename: Canonical result filename.

        Returns:
            Path of the written file.
        """
        self.ensure_dirs()
        target = self.path_for(filename)
        tmp_file = self.output_dir / f"{filename}.tmp"
        tmp_file.write_bytes(content)
        tmp_file.replace(target)
        return target

    def load(self, filename: str) -> dict[str, Any]:
        """Load a stored result document as plain data.

        Raises:
            FileNotFoundError: If no file with that name exists.
        """
        return json.loads(self.path_for(filename).read_text(encoding="utf-8"))

