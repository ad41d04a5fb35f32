"""
Atomic file writer for generated artifacts.

Content goes to a temporary file in the destination directory, is
optionally validated there, and is then promoted over the destination.
A reader never sees a partially written artifact and the temporary file
never outlives the call.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from blockforge.engines.syntax import PhpSyntaxValidator
from blockforge.errors import OverwriteError, PersistError, WriteError
from blockforge.logging_config import get_logger

logger = get_logger(__name__)

FILE_MODE = 0o644


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)


class AtomicFileWriter:
    """
    Writes one artifact file at a time.

    Usage:
        writer = AtomicFileWriter(PhpSyntaxValidator.from_settings())
        writer.write(block_dir, "render.php", source, 'block "Hero"', validate=True)
    """

    def __init__(self, validator: Optional[PhpSyntaxValidator] = None):
        self.validator = validator

    def write(
        self,
        directory: Union[str, Path],
        filename: str,
        content: str,
        label: str,
        validate: bool = False,
    ) -> Path:
        """
        Write `content` to `directory/filename`.

        Raises:
            WriteError: the temporary file could not be created or written
            TemplateSyntaxError: validation was requested and failed
            OverwriteError: an existing destination could not be removed
            PersistError: the content could not be promoted
        """
        directory = Path(directory)
        destination = directory / filename
        stem = Path(filename).stem or "artifact"

        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{stem}_", suffix=".tmp")
        except OSError as e:
            raise WriteError(
                f"Unable to create a temporary file for {label} {filename}: {e}",
                label=label,
                details={"directory": str(directory)},
            ) from e
        tmp_path = Path(tmp_name)

        try:
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                    fd = None
                    handle.write(content)
                os.chmod(tmp_path, FILE_MODE)
            except OSError as e:
                if fd is not None:
                    os.close(fd)
                raise WriteError(
                    f"Unable to write {filename} for {label}: {e}",
                    label=label,
                    details={"path": str(destination)},
                ) from e

            if validate and self.validator is not None:
                self.validator.validate(tmp_path, content, label)

            self._promote(tmp_path, destination, label)
        finally:
            if tmp_path.exists():
                _remove_quietly(tmp_path)

        logger.debug("Wrote %s", destination, extra={"artifact": filename})
        return destination

    def _promote(self, tmp_path: Path, destination: Path, label: str) -> None:
        try:
            os.replace(tmp_path, destination)
            return
        except OSError as e:
            logger.info("Atomic replace of %s failed (%s); falling back to copy", destination, e)

        if destination.exists() or destination.is_symlink():
            try:
                destination.unlink()
            except OSError as e:
                raise OverwriteError(
                    f"Unable to overwrite {destination.name} for {label}: {e}",
                    label=label,
                    details={"path": str(destination)},
                ) from e

        try:
            shutil.copyfile(tmp_path, destination)
            os.chmod(destination, FILE_MODE)
        except OSError as e:
            if destination.is_file():
                _remove_quietly(destination)
            raise PersistError(
                f"Unable to persist {destination.name} for {label}: {e}",
                label=label,
                details={"path": str(destination)},
            ) from e
        _remove_quietly(tmp_path)
