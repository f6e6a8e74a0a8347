from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

__all__: list[str] = [
    "FileUtils",
    "FileUtilsError",
    "FileWriteError",
    "InvalidFileTypeError",
]


class FileUtils:
    """Utility class for file operations with safety checks.

    Provides methods to resolve user paths and to read and write JSON documents atomically.
    """

    @staticmethod
    def resolve_path(path: str | Path, *, strict: bool = False) -> Path:
        """Convert a user-input path to an absolute path safely.

        Expands environment variables (e.g., $HOME, %APPDATA%), expands ~ to the home directory,
        and resolves relative paths based on the current working directory.

        Args:
            path (str | Path): The input path (e.g., "~/data/$APP_ENV/cache.db").
            strict (bool): Whether to raise an exception if the path does not exist. Defaults to False.

        Returns:
            Path: The converted absolute `Path` object.
        """
        path_str = str(path)
        expanded: str = os.path.expandvars(path_str)
        user_expanded: Path = Path(expanded).expanduser()

        resolved_path: Path
        if user_expanded.is_absolute():
            resolved_path = user_expanded.resolve(strict=strict)
        else:
            resolved_path = (Path.cwd() / user_expanded).resolve(strict=strict)
        return resolved_path

    @staticmethod
    def resolve_data_path(data_dir: str | Path, filename: str | Path) -> Path:
        """Resolve a file name against a data directory unless it is already absolute."""
        file_path = Path(filename)
        if file_path.is_absolute():
            return file_path
        return FileUtils.resolve_path(Path(data_dir) / file_path)

    @staticmethod
    def atomic_write_text(file_path: Path, content: str) -> None:
        """Write text to a file so that readers see either the old or the new content.

        The content is written to a temporary file in the same directory and moved into place
        with os.replace.

        Args:
            file_path (Path): Destination file.
            content (str): Text to write (UTF-8).

        Raises:
            InvalidFileTypeError: If the destination is a directory.
            FileWriteError: If the file cannot be written.
        """
        if file_path.is_dir():
            msg = f"Invalid file type (directory): {file_path}"
            raise InvalidFileTypeError(msg)

        tmp_name: str | None = None
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=file_path.parent, prefix=f".{file_path.name}.", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, file_path)
        except OSError as err:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            msg = f"Failed to write file: {file_path}"
            raise FileWriteError(msg) from err

    @staticmethod
    def write_json(file_path: Path, data: Any) -> None:
        """Serialize data as indented UTF-8 JSON and write it atomically."""
        FileUtils.atomic_write_text(file_path, json.dumps(data, ensure_ascii=False, indent=2))

    @staticmethod
    def read_json(file_path: Path) -> Any:
        """Read a JSON document.

        Returns:
            Any: Parsed document, or None if the file does not exist.

        Raises:
            InvalidFileTypeError: If the path is a directory.
            ValueError: If the file does not contain valid JSON.
        """
        if not file_path.exists():
            return None
        if file_path.is_dir():
            msg = f"Invalid file type (directory): {file_path}"
            raise InvalidFileTypeError(msg)
        with file_path.open(encoding="utf-8") as f:
            return json.load(f)


class FileUtilsError(Exception):
    """Custom exception for FileUtils-related errors."""


class InvalidFileTypeError(FileUtilsError):
    """Custom exception for invalid file type errors."""


class FileWriteError(FileUtilsError):
    """Custom exception for file write errors."""
