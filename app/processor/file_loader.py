from pathlib import Path

from app.processor.exceptions import InvalidInputError


class FileLoader:
    """Reads log files from disk for submission."""

    def __init__(self, max_size_bytes: int) -> None:
        self._max_size_bytes = max_size_bytes

    def load(self, path: Path) -> bytes:
        """Read file bytes, refusing oversized files without reading them.

        Raises:
            FileNotFoundError: if the file does not exist.
            InvalidInputError: if the file is larger than the upload limit.
        """
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        size = path.stat().st_size
        if size > self._max_size_bytes:
            raise InvalidInputError(
                f"File {path} is {size} bytes; limit is {self._max_size_bytes}"
            )
        return path.read_bytes()
