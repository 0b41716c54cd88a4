"""
Layer Verifier

Checks whether every region hosts the same latest layer version.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import groupby
from typing import List, Sequence, Tuple

from ..common.errors import NoPublishedVersionsError, RegionsNotBumpedError
from ..gateway.lambda_layers import LayerGateway
from ..layer import LayerVersion
from .region_query import RegionQuery, validate_regions

logger = logging.getLogger(__name__)


class BumpState(Enum):
    """Classification of a latest-version snapshot"""
    NOT_PUBLISHED = "not_published"
    NOT_BUMPED = "not_bumped"
    BUMPED = "bumped"


def compact_versions(versions: Sequence[LayerVersion]) -> List[LayerVersion]:
    """
    Collapse consecutive versions sharing the same number.

    Only neighbours are compared; this is not a global deduplication.
    """
    return [next(group) for _, group in groupby(versions, key=lambda v: v.number)]


def classify(compacted: Sequence[LayerVersion]) -> BumpState:
    if len(compacted) > 1:
        return BumpState.NOT_BUMPED
    if len(compacted) == 1 and compacted[0].published:
        return BumpState.BUMPED
    return BumpState.NOT_PUBLISHED


@dataclass(frozen=True)
class VerificationResult:
    """Snapshot of latest versions and its classification"""
    state: BumpState
    versions: Tuple[LayerVersion, ...]
    compacted: Tuple[LayerVersion, ...]

    @property
    def bumped(self) -> bool:
        return self.state is BumpState.BUMPED

    def raise_for_state(self) -> None:
        if self.state is BumpState.NOT_PUBLISHED:
            raise NoPublishedVersionsError()
        if self.state is BumpState.NOT_BUMPED:
            raise RegionsNotBumpedError()


class Verifier:
    """Read-only drift check of a layer across regions"""

    def __init__(self, gateway: LayerGateway, layer: str):
        self.layer = layer
        self.query = RegionQuery(gateway, layer)

    async def verify(self, regions: Sequence[str]) -> VerificationResult:
        validate_regions(regions)

        versions = await self.query.latest_versions(regions)
        compacted = compact_versions(versions)
        state = classify(compacted)

        logger.info(f"Layer {self.layer} across {len(regions)} regions: {state.value}")
        return VerificationResult(state=state, versions=tuple(versions), compacted=tuple(compacted))
