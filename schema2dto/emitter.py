"""
Writing of rendered units to the file system.

Each unit is written atomically: the text goes to a temporary file in the
target directory, which then replaces the final path.
"""

import os
import tempfile
from pathlib import Path
from typing import List, Set, Union

from .core.generator import GenerationResult, RenderedUnit
from .logging_config import get_logger

logger = get_logger(__name__)


class EmitterError(Exception):
    """Exception raised when a unit cannot be written."""

    pass


class FileEmitter:
    """Writes rendered units below an output directory."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        self._written: Set[Path] = set()

    @property
    def written(self) -> List[Path]:
        return sorted(self._written)

    def target(self, unit: RenderedUnit) -> Path:
        path = (self.output_dir / unit.path).resolve()
        root = self.output_dir.resolve()
        if root != path and root not in path.parents:
            raise EmitterError(f"Unit path escapes the output directory: {unit.path}")
        return path

    def write(self, unit: RenderedUnit) -> Path:
        """
        Write one unit.

        Raises:
            EmitterError: The path was already written in this run, or the
                write failed
        """
        path = self.target(unit)
        if path in self._written:
            raise EmitterError(f"Output path written twice: {unit.path}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                    f.write(unit.text)
                os.replace(temp_name, path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise EmitterError(f"Failed to write {path}: {e}") from e

        self._written.add(path)
        logger.debug("Wrote %s", path)
        return path


def emit_all(result: GenerationResult, emitter: FileEmitter) -> List[Path]:
    """Write every unit of a generation result, in result order."""
    paths = [emitter.write(unit) for unit in result.units]
    logger.info("Wrote %d files to %s", len(paths), emitter.output_dir)
    return paths
