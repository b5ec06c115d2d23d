"""
Artifact Store
==============
Turns large text artifacts into stable, content-addressed references.

Reference token:
    sha256(tag + NUL + payload), truncated to 16 hex chars.
    - Deterministic: the same payload of the same kind always maps to the
      same reference, so re-uploads share storage.
    - Disjoint per kind: the tag is part of the hashed input, so a kernel
      config and a reproducer with identical bytes get different tokens.

The blob backend is an external collaborator. Anything it raises is reported
as TransientStorageError so callers can fail the current attempt and retry.
"""
import hashlib
import logging
import threading
from typing import Optional, Protocol, Union

from dashboard.core.constants import ARTIFACT_TAGS
from dashboard.core.errors import InvalidInputError, NotFoundError, TransientStorageError
from dashboard.models.artifact import ArtifactRef

logger = logging.getLogger(__name__)

_TOKEN_LENGTH = 16


class BlobStore(Protocol):
    def put(self, key: str, data: bytes) -> None: ...
    def get(self, key: str) -> Optional[bytes]: ...


class InMemoryBlobStore:
    """Process-local blob backend."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._blobs: dict[str, bytes] = {}

    def put(self, key: str, data: bytes) -> None:
        with self._lock:
            self._blobs.setdefault(key, data)

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._blobs.get(key)

    def __len__(self) -> int:
        return len(self._blobs)


def compute_artifact_token(tag: str, data: bytes) -> str:
    """
    Compute the reference token of an artifact.

    Parameters
    ----------
    tag : str
        Artifact kind (one of ARTIFACT_TAGS).
    data : bytes
        Artifact content.

    Returns
    -------
    str
        16-character hex token.
    """
    digest = hashlib.sha256()
    digest.update(tag.encode("utf-8"))
    digest.update(b"\x00")
    digest.update(data)
    return digest.hexdigest()[:_TOKEN_LENGTH]


def _blob_key(tag: str, token: str) -> str:
    return f"{tag}/{token}"


class ArtifactResolver:
    """
    Stores artifacts in a BlobStore and hands back ArtifactRefs.

    Usage:
        resolver = ArtifactResolver(InMemoryBlobStore())
        ref = resolver.store("KernelConfig", "CONFIG_KASAN=y")
        ref.url          # "/text?tag=KernelConfig&x=..."
        resolver.load(ref.tag, ref.token)
    """

    def __init__(self, blobs: BlobStore) -> None:
        self.blobs = blobs

    def store(self, tag: str, payload: Union[str, bytes]) -> ArtifactRef:
        if tag not in ARTIFACT_TAGS:
            raise InvalidInputError(
                f"Unknown artifact tag '{tag}'. Allowed values: {sorted(ARTIFACT_TAGS)}"
            )
        data = payload.encode("utf-8") if isinstance(payload, str) else payload
        token = compute_artifact_token(tag, data)
        try:
            self.blobs.put(_blob_key(tag, token), data)
        except Exception as exc:
            logger.error("[ARTIFACT] Failed to store %s artifact: %s", tag, exc)
            raise TransientStorageError(f"failed to store {tag} artifact: {exc}") from exc
        logger.debug("[ARTIFACT] Stored %s/%s (%d bytes)", tag, token, len(data))
        return ArtifactRef(tag=tag, token=token)

    def store_optional(self, tag: str, payload: Optional[Union[str, bytes]]) -> Optional[ArtifactRef]:
        """Store `payload` unless it is absent or empty."""
        if not payload:
            return None
        return self.store(tag, payload)

    def load(self, tag: str, token: str) -> bytes:
        try:
            data = self.blobs.get(_blob_key(tag, token))
        except Exception as exc:
            raise TransientStorageError(f"failed to load {tag} artifact: {exc}") from exc
        if data is None:
            raise NotFoundError("artifact", _blob_key(tag, token))
        return data
