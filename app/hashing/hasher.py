import hashlib
from typing import ClassVar

from app.processor.exceptions import InvalidInputError


class ContentHasher:
    """SHA-256 fingerprint of raw submitted bytes.

    The digest is the exact-duplicate key and the identity used by
    cache links, so it is computed over the bytes as received, before
    any decoding or redaction.
    """

    ALGORITHM: ClassVar[str] = "sha256"
    DIGEST_LENGTH: ClassVar[int] = 64

    def hash(self, content: bytes) -> str:
        """Return the lowercase hex digest of *content*.

        Raises:
            InvalidInputError: if *content* is empty.
        """
        if not content:
            raise InvalidInputError("Cannot hash empty content")
        return hashlib.new(self.ALGORITHM, content).hexdigest()
