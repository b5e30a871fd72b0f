"""
Course package decoding.

This module provides the base decoder class that turns raw package bytes
into a navigable ``Manifest`` tree, and a factory that picks the decoder for
an uploaded file name.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import mimetypes

from ..errors import DecodeError, MalformedPackage
from .manifest import (
    ContentRecord,
    Manifest,
    ManifestItem,
    ManifestOrganization,
    ManifestResource,
    flatten_manifest,
    slugify,
)


class PackageDecoder(ABC):
    """Abstract base class for package decoders."""

    @classmethod
    @abstractmethod
    def supported_extensions(cls) -> List[str]:
        """Return the file extensions this decoder can handle."""
        pass

    @abstractmethod
    def decode(self, data: bytes) -> Manifest:
        """Decode package bytes into a manifest tree, raising ``DecodeError``."""
        pass

    @abstractmethod
    def is_valid(self, data: bytes) -> bool:
        """Check if the bytes look like a package this decoder reads."""
        pass


def get_decoder(filename: str) -> Optional[PackageDecoder]:
    """
    Factory function to get the appropriate decoder for an uploaded package.

    Args:
        filename: Name of the uploaded file

    Returns:
        A PackageDecoder instance, or None if no decoder handles the extension.
    """
    # Lazy import to avoid circular imports
    from .imscc_adapter import ImsccDecoder

    lowered = (filename or "").lower()
    for decoder_cls in [ImsccDecoder]:
        if any(lowered.endswith(ext) for ext in decoder_cls.supported_extensions()):
            return decoder_cls()

    mime_type, _ = mimetypes.guess_type(lowered)
    if mime_type == "application/zip":
        return ImsccDecoder()
    return None


__all__ = [
    "PackageDecoder",
    "get_decoder",
    "DecodeError",
    "MalformedPackage",
    "ContentRecord",
    "Manifest",
    "ManifestItem",
    "ManifestOrganization",
    "ManifestResource",
    "flatten_manifest",
    "slugify",
]
