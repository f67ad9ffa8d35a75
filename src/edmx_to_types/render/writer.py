"""Write rendered source files to disk."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class OutputExistsError(FileExistsError):
    """Raised when generated files would overwrite existing ones."""

    def __init__(self, paths: list[Path]) -> None:
        """Initialize with the conflicting paths.

        Args:
        ----
            paths: Files that already exist.

        """
        self.paths = paths
        listing = ", ".join(str(p) for p in paths[:3])
        if len(paths) > 3:
            listing += f" and {len(paths) - 3} more"
        super().__init__(f"Output already exists: {listing}")


class SourceWriter:
    """Write a mapping of relative paths to source text under a directory.

    Usage:
        writer = SourceWriter(force=True)
        written = writer.write(files, Path("generated"))
    """

    def __init__(self, force: bool = False) -> None:
        """Initialize the writer.

        Args:
        ----
            force: Overwrite files that already exist.

        """
        self.force = force

    def targets(self, files: dict[str, str], output_dir: Path) -> list[Path]:
        """Absolute target paths, in the order files were rendered."""
        return [output_dir / relative for relative in files]

    def write(self, files: dict[str, str], output_dir: Path) -> list[Path]:
        """Write all files.

        Nothing is written if any target exists and ``force`` is off.

        Args:
        ----
            files: Relative path to source text.
            output_dir: Directory the relative paths are resolved against.

        Returns:
        -------
            The written paths.

        Raises:
        ------
            OutputExistsError: If a target exists and ``force`` is off.

        """
        targets = self.targets(files, output_dir)
        if not self.force:
            existing = [path for path in targets if path.exists()]
            if existing:
                raise OutputExistsError(existing)

        for path, text in zip(targets, files.values()):
            # Ensure parent directory exists
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            logger.debug("Wrote %s (%d bytes)", path, len(text))
        return targets
