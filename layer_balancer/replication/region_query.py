"""
Region Query

Fetches the latest layer version of every region concurrently and reduces
the snapshot to the greatest version across regions.
"""

import logging
from typing import List, Sequence

from ..common.errors import RegionQueryError, UsageError
from ..gateway.lambda_layers import LayerGateway
from ..layer import LayerVersion
from .fanout import run_all

logger = logging.getLogger(__name__)

MIN_REGIONS = 2


def validate_regions(regions: Sequence[str]) -> None:
    """A single region cannot drift, so at least two are required"""
    if len(regions) < MIN_REGIONS:
        raise UsageError('required flag "regions" must contain at least two regions')


def greatest_of(versions: Sequence[LayerVersion]) -> LayerVersion:
    """
    Return the version with the highest number.

    Comparison is strictly greater-than, so on ties the first version in
    input order wins.
    """
    if not versions:
        raise ValueError("at least one version is required")

    greatest = versions[0]
    for version in versions[1:]:
        if version.number > greatest.number:
            greatest = version
    return greatest


class RegionQuery:
    """Latest-version queries of a layer across regions"""

    def __init__(self, gateway: LayerGateway, layer: str):
        self.gateway = gateway
        self.layer = layer

    async def latest_version(self, region: str) -> LayerVersion:
        """Latest version in one region, or the unpublished sentinel"""
        return await self.gateway.latest_version(self.layer, region)

    async def latest_versions(self, regions: Sequence[str]) -> List[LayerVersion]:
        """
        Latest version of every region, fetched concurrently.

        Args:
            regions: Ordered region identifiers

        Returns:
            Versions where result[i] belongs to regions[i]

        Raises:
            RegionQueryError: If any region fails; remaining queries are cancelled
        """
        try:
            versions = await run_all(self.latest_version(region) for region in regions)
        except Exception as e:
            raise RegionQueryError(f"one of regions failed to retrieve the version: {e}") from e

        snapshot = ", ".join(f"{v.region}={v.number}" for v in versions)
        logger.debug(f"Latest versions of {self.layer}: {snapshot}")
        return versions

    async def greatest_version(self, regions: Sequence[str]) -> LayerVersion:
        """Greatest latest version across regions; number 0 means never published"""
        versions = await self.latest_versions(regions)
        return greatest_of(versions)
