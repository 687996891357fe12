"""Stable identifiers for localizable content.

Content ids are truncated SHA-1 digests of the content and its hint.  Short
ids are pleasant in export files but may collide, so every id handed out is
remembered in a :class:`HashRegistry` together with the full digest it came
from.  A registry is owned by the caller of one run, e.g. one export, so
collisions are detected across all files of that run without leaking state
into unrelated runs.
"""

from __future__ import annotations

import hashlib
from typing import Dict, Optional

from .errors import ConfigurationError, HashCollisionError

MIN_HASH_LENGTH = 1
MAX_HASH_LENGTH = 32


class HashRegistry:
    """Ids observed during one run, mapped to the digests they stand for."""

    def __init__(self) -> None:
        self.hashes: Dict[str, str] = {}
        self.ids: Dict[str, str] = {}

    def clear(self) -> None:
        self.hashes.clear()
        self.ids.clear()


class ContentHash:
    """Compute collision-checked content ids.

    :param hash_length: Number of hex digits in an id, in ``[1, 32]``.
    :param registry: Registry shared by all content of one run.  A fresh
        registry is created when omitted.
    """

    def __init__(self, hash_length: int = 9, registry: Optional[HashRegistry] = None) -> None:
        if not MIN_HASH_LENGTH <= hash_length <= MAX_HASH_LENGTH:
            raise ConfigurationError(
                f"The hash length must be a number in the range [{MIN_HASH_LENGTH}, {MAX_HASH_LENGTH}],"
                f" but was {hash_length}."
            )
        self.hash_length = hash_length
        self.registry = registry if registry is not None else HashRegistry()

    def compute(self, content: str, hint: Optional[str] = None) -> str:
        """Get the id for ``content`` and ``hint``.

        :param content: The content to identify.
        :param hint: Optional hint salting the id.
        :returns: The first ``hash_length`` hex digits of the digest.
        :raises HashCollisionError: If the short id was already handed out for
            a different digest.
        """
        digest = hashlib.sha1(f"{content}:{hint or ''}".encode("utf-8")).hexdigest()
        short = digest[:self.hash_length]
        known = self.registry.hashes.setdefault(short, digest)
        if known != digest:
            raise HashCollisionError(
                f"A content hash collision was detected for id '{short}'."
                " You may need to increase the hash length."
            )
        return short

    def claim_id(self, content_id: str, digest: str) -> None:
        """Associate ``content_id`` with the content it identifies.

        :param content_id: Explicit or computed id of a content instance.
        :param digest: Hash of the content carrying the id.
        :raises HashCollisionError: If the id is already used for other content.
        """
        known = self.registry.ids.setdefault(content_id, digest)
        if known != digest:
            raise HashCollisionError(
                f"An id collision was detected for id '{content_id}'."
                " The id is associated with multiple different content instances."
            )
