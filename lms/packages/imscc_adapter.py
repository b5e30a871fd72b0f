"""
IMS Common Cartridge decoder.

Reads ``imsmanifest.xml`` from a cartridge zip and converts its
organization/item/resource elements into a ``Manifest`` tree.
"""

import io
import logging
import zipfile
from typing import List, Optional, Tuple
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from . import PackageDecoder
from ..errors import DecodeError
from .manifest import Manifest, ManifestItem, ManifestOrganization, ManifestResource

logger = logging.getLogger(__name__)

MANIFEST_NAME = "imsmanifest.xml"
ZIP_MAGIC = b"PK\x03\x04"


def _local_name(element: Element) -> str:
    """Tag name without its ``{namespace}`` prefix."""
    return element.tag.rsplit("}", 1)[-1] if isinstance(element.tag, str) else ""


def _children(element: Element, name: str) -> List[Element]:
    return [child for child in element if _local_name(child) == name]


def _child(element: Element, name: str) -> Optional[Element]:
    for child in element:
        if _local_name(child) == name:
            return child
    return None


def _text(element: Optional[Element]) -> Optional[str]:
    if element is None or element.text is None:
        return None
    value = element.text.strip()
    return value or None


def _attr(element: Element, name: str) -> Optional[str]:
    # Attributes may be namespaced too; match on local name
    for key, value in element.attrib.items():
        if key.rsplit("}", 1)[-1] == name:
            value = value.strip()
            return value or None
    return None


class ImsccDecoder(PackageDecoder):
    """Decoder for ``.imscc`` cartridges (zip archives with an IMS manifest)."""

    @classmethod
    def supported_extensions(cls) -> List[str]:
        return [".imscc", ".zip"]

    def is_valid(self, data: bytes) -> bool:
        """Check if the bytes are a zip archive carrying a manifest."""
        if not data or data[:4] != ZIP_MAGIC:
            return False
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as package:
                return MANIFEST_NAME in package.namelist()
        except zipfile.BadZipFile:
            return False

    def decode(self, data: bytes) -> Manifest:
        """Decode cartridge bytes into a manifest tree."""
        xml_bytes = self._read_manifest(data)
        try:
            root = DefusedET.fromstring(xml_bytes)
        except (ParseError, DefusedXmlException) as e:
            raise DecodeError(f"{MANIFEST_NAME} is not valid XML: {e}") from e
        return self.parse_manifest(root)

    def _read_manifest(self, data: bytes) -> bytes:
        if not data:
            raise DecodeError("Package is empty")
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as package:
                if MANIFEST_NAME not in package.namelist():
                    raise DecodeError(f"{MANIFEST_NAME} not found in package")
                return package.read(MANIFEST_NAME)
        except zipfile.BadZipFile as e:
            raise DecodeError(f"Package is not a valid zip archive: {e}") from e

    def parse_manifest(self, root: Element) -> Manifest:
        """Build the tree from a parsed ``<manifest>`` element.

        A missing ``<organization>`` or ``<resources>`` is reported as a None
        section; the flattener decides whether that is fatal.
        """
        organization = None
        organizations = _child(root, "organizations")
        if organizations is not None:
            org_element = _child(organizations, "organization")
            if org_element is not None:
                organization = ManifestOrganization(
                    title=_text(_child(org_element, "title")),
                    items=self._parse_items(org_element),
                )

        resources = None
        resources_element = _child(root, "resources")
        if resources_element is not None:
            resources = tuple(
                ManifestResource(identifier=_attr(r, "identifier"), href=_attr(r, "href"))
                for r in _children(resources_element, "resource")
                if _attr(r, "identifier")
            )

        logger.debug(
            f"Decoded manifest: organization={'yes' if organization else 'no'}, "
            f"resources={len(resources) if resources is not None else 'missing'}"
        )
        return Manifest(organization=organization, resources=resources)

    def _parse_items(self, parent: Element) -> Tuple[ManifestItem, ...]:
        return tuple(
            ManifestItem(
                title=_text(_child(item, "title")),
                identifierref=_attr(item, "identifierref"),
                children=self._parse_items(item),
            )
            for item in _children(parent, "item")
        )
