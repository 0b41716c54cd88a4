"""
Layer Reconciler

Brings every region up to the greatest layer version by republishing each
missing version, in order, from the region that holds the greatest one.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from prometheus_client import CollectorRegistry

from ..common.errors import NoPublishedVersionsError, VersionMismatchError
from ..common.logger import RegionLoggerAdapter
from ..gateway.lambda_layers import LayerGateway
from ..gateway.transfer import PayloadDownloader
from ..layer import LayerVersion
from ..monitoring.metrics import ReplicationMetrics
from .fanout import run_all
from .region_query import RegionQuery, validate_regions

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]


@dataclass(frozen=True)
class RegionBump:
    """Outcome of bumping one region"""
    region: str
    from_version: int
    to_version: int
    published: Tuple[int, ...] = ()

    @property
    def up_to_date(self) -> bool:
        return not self.published


@dataclass(frozen=True)
class BumpReport:
    """Outcome of bumping a layer across regions"""
    greatest: LayerVersion
    regions: Tuple[RegionBump, ...]

    @property
    def bumped_regions(self) -> List[str]:
        return [r.region for r in self.regions if not r.up_to_date]


class Reconciler:
    """
    Cross-region layer version reconciler

    Runs one task per region. Within a region versions are republished
    strictly one at a time in increasing order. The first failing region
    cancels the others; publishes that already happened are kept.
    """

    def __init__(
        self,
        gateway: LayerGateway,
        downloader: PayloadDownloader,
        layer: str,
        registry: Optional[CollectorRegistry] = None,
        strict_numbering: bool = False,
        progress: Optional[ProgressCallback] = None
    ):
        self.gateway = gateway
        self.downloader = downloader
        self.layer = layer
        self.query = RegionQuery(gateway, layer)
        self.strict_numbering = strict_numbering
        self.progress = progress
        self.metrics = ReplicationMetrics(registry) if registry is not None else None

    def _report(self, region: str, message: str) -> None:
        if self.progress:
            self.progress(region, message)

    async def bump(
        self,
        regions: Sequence[str],
        on_greatest: Optional[Callable[[LayerVersion], None]] = None
    ) -> BumpReport:
        """
        Resolve the greatest version and bring every region up to it.

        Args:
            regions: Ordered region identifiers
            on_greatest: Called with the greatest version once it is resolved

        Raises:
            UsageError: If fewer than two regions are given
            NoPublishedVersionsError: If no region has published the layer
        """
        validate_regions(regions)

        greatest = await self.query.greatest_version(regions)
        logger.info(f"Greatest version of {self.layer} is {greatest.number} in {greatest.region}")
        if on_greatest:
            on_greatest(greatest)

        if not greatest.published:
            raise NoPublishedVersionsError()

        results = await self.reconcile(regions, greatest)
        return BumpReport(greatest=greatest, regions=tuple(results))

    async def reconcile(self, regions: Sequence[str], greatest: LayerVersion) -> List[RegionBump]:
        """Bump all regions concurrently; results follow the region order"""
        return await run_all(self.bump_region(region, greatest) for region in regions)

    async def bump_region(self, region: str, greatest: LayerVersion) -> RegionBump:
        """
        Republish every version missing in a region.

        Args:
            region: Region to bring up to date
            greatest: Greatest version, its region is the replication source

        Returns:
            Versions published into the region
        """
        log = RegionLoggerAdapter(logger, {'layer': self.layer, 'region': region})
        started = time.monotonic()

        try:
            latest = await self.query.latest_version(region)
            published = []

            for number in range(latest.number + 1, greatest.number + 1):
                published.append(await self._replicate(region, number, greatest.region, log))

        except Exception:
            if self.metrics:
                self.metrics.region_failures.labels(layer=self.layer, region=region).inc()
            raise

        if self.metrics:
            self.metrics.bump_duration.labels(layer=self.layer, region=region).observe(
                time.monotonic() - started
            )

        if published:
            log.info(f"Bumped from version {latest.number} to {greatest.number}")
        else:
            log.info(f"Already at version {latest.number}")
        self._report(region, "bump complete")

        return RegionBump(
            region=region,
            from_version=latest.number,
            to_version=max(latest.number, greatest.number),
            published=tuple(published),
        )

    async def _replicate(self, region: str, number: int, source_region: str, log) -> int:
        current = await self.gateway.get_version(self.layer, number, source_region)

        self._report(region, f"downloading version {current.number}")
        payload = await self.downloader.download(current.content.location)
        log.debug(f"Downloaded version {current.number} ({len(payload)} bytes) from {source_region}")

        self._report(region, f"publishing version {current.number}")
        assigned = await self.gateway.publish_version(self.layer, current.for_region(region, payload))

        if assigned != current.number:
            message = f"published version {current.number} from {source_region} as version {assigned}"
            if self.strict_numbering:
                raise VersionMismatchError(f"{region}: {message}")
            log.warning(message, extra={'version': assigned})

        if self.metrics:
            self.metrics.versions_published.labels(
                layer=self.layer, source_region=source_region, target_region=region
            ).inc()

        return assigned
