"""
Layer Version Descriptors

Immutable records describing one version of a Lambda layer in one region.
A version number of 0 means the layer was never published in that region.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple


@dataclass(frozen=True)
class Content:
    """Layer content: a remote location when read, the zip bytes when published"""
    location: str = ""
    zip_file: Optional[bytes] = None


@dataclass(frozen=True)
class LayerVersion:
    """Metadata of a layer version scoped to a region"""
    number: int = 0
    region: str = ""
    description: str = ""
    license: str = ""
    architectures: Tuple[str, ...] = ()
    runtimes: Tuple[str, ...] = ()
    content: Content = field(default_factory=Content)

    @classmethod
    def unpublished(cls, region: str) -> "LayerVersion":
        """Sentinel for a region without any published version"""
        return cls(region=region)

    @property
    def published(self) -> bool:
        return self.number > 0

    def for_region(self, region: str, payload: bytes) -> "LayerVersion":
        """
        Build the descriptor to publish into another region.

        Metadata and compatibility tags are kept, the region is reassigned
        and the content location is replaced by the payload bytes.
        """
        return replace(self, region=region, content=Content(zip_file=payload))
