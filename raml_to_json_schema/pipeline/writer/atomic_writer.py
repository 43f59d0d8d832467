"""
Atomic file writer for generated schema documents.

Ensures that file writes are atomic so an interrupted conversion never
leaves a truncated schema behind.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

from ..config import OutputConfig, OutputMode
from ..errors import SchemaWriteError


def serialize_schema(document: Any) -> str:
    """Serialize a schema document the way it is written to disk."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


class AtomicWriter:
    """Handles atomic JSON writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, output_config: OutputConfig | None = None):
        """Initialize the atomic writer.

        Args:
            output_config: Output mode and whether writes go through a temp file
        """
        self.output_config = output_config or OutputConfig()

    def write_json(self, path: Path, document: Any, validate: bool = True) -> int:
        """Write a JSON document.

        Args:
            path: Target file path
            document: JSON-serializable document
            validate: Whether to check the serialized text round-trips

        Returns:
            Number of bytes written

        Raises:
            SchemaWriteError: If validation fails or the file exists in
                ERROR_IF_EXISTS mode
            OSError: If file operations fail
        """
        if self.output_config.mode == OutputMode.ERROR_IF_EXISTS and path.exists():
            raise SchemaWriteError(f"Output file already exists: {path}. Use force mode to overwrite.")

        content = serialize_schema(document)
        if validate:
            self._validate_content(content, document)

        if not self.output_config.atomic_write:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            return len(content.encode("utf-8"))

        self.write(path, content)
        return len(content.encode("utf-8"))

    def write(self, path: Path, content: str) -> None:
        """Write text content to file atomically.

        Args:
            path: Target file path
            content: Content to write
        """
        # Ensure parent directory exists
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )

        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            temp_path.replace(path)

        except Exception:
            # Clean up temp file on any error
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass  # Best effort cleanup
            raise

    def _validate_content(self, content: str, document: Any) -> None:
        """Check that the serialized text parses back to the same document.

        Raises:
            SchemaWriteError: If validation fails
        """
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise SchemaWriteError(f"Generated schema is not valid JSON: {e}") from e

        if parsed != document:
            raise SchemaWriteError("Generated schema does not round-trip through JSON")

        if isinstance(document, dict) and "$schema" not in document:
            raise SchemaWriteError("Generated schema is missing its $schema dialect")
