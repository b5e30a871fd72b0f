"""
Manifest tree types and the flattener that turns them into course content.

The decoder produces a ``Manifest``; ``flatten_manifest`` walks its item tree
in pre-order and returns one ``ContentRecord`` per item, in traversal order.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..errors import MalformedPackage

UNTITLED = "(untitled)"
MISSING_LOCATOR = "n/a"

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class ManifestItem:
    """An item node; ``identifierref`` is None for container/header items."""
    title: Optional[str]
    identifierref: Optional[str] = None
    children: Tuple["ManifestItem", ...] = ()


@dataclass(frozen=True)
class ManifestOrganization:
    title: Optional[str]
    items: Tuple[ManifestItem, ...] = ()


@dataclass(frozen=True)
class ManifestResource:
    identifier: str
    href: Optional[str] = None


@dataclass(frozen=True)
class Manifest:
    """Decoded package. A None section means the package did not carry it."""
    organization: Optional[ManifestOrganization]
    resources: Optional[Tuple[ManifestResource, ...]]

    @property
    def course_title(self) -> Optional[str]:
        if self.organization is None:
            return None
        return self.organization.title


@dataclass(frozen=True)
class ContentRecord:
    """One importable assignment produced from a manifest item."""
    title: str
    locator: Optional[str]
    slug: str
    prompt: str = field(repr=False)


def slugify(title: str) -> str:
    """
    Build a URL slug from a title.

    Example:
        >>> slugify("  Module 1: Reflection! ")
        'module-1-reflection'
    """
    slug = _NON_SLUG_CHARS.sub("-", (title or "").lower()).strip("-")
    return slug or "untitled"


def build_prompt(title: str, locator: Optional[str]) -> str:
    return f"Complete the task: {title}\n\n(Imported href: {locator or MISSING_LOCATOR})"


def resource_table(resources: Tuple[ManifestResource, ...]) -> Dict[str, Optional[str]]:
    """Map resource identifiers to their href; later duplicates win."""
    return {r.identifier: r.href for r in resources if r.identifier}


def flatten_manifest(manifest: Manifest) -> List[ContentRecord]:
    """
    Flatten a manifest's item tree into ordered content records.

    Items are visited depth-first, parent before children and siblings in
    document order. Every item yields exactly one record, whether or not it
    references a resource.

    Args:
        manifest: Decoded package tree.

    Returns:
        Records in traversal order. Slugs are unique within the result:
        repeated slugs get ``-2``, ``-3`` ... suffixes.

    Raises:
        MalformedPackage: If the organization or resources section is missing.
    """
    if manifest.organization is None:
        raise MalformedPackage("organization")
    if manifest.resources is None:
        raise MalformedPackage("resources")

    hrefs = resource_table(manifest.resources)
    records: List[ContentRecord] = []
    used_slugs: set = set()

    # Children are pushed reversed so the first child is popped next
    stack = list(reversed(manifest.organization.items))
    while stack:
        item = stack.pop()
        title = item.title or UNTITLED
        locator = hrefs.get(item.identifierref) if item.identifierref is not None else None

        slug = base = slugify(title)
        suffix = 1
        while slug in used_slugs:
            suffix += 1
            slug = f"{base}-{suffix}"
        used_slugs.add(slug)

        records.append(ContentRecord(
            title=title,
            locator=locator,
            slug=slug,
            prompt=build_prompt(title, locator),
        ))
        stack.extend(reversed(item.children))

    return records
