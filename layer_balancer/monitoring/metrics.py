"""
Replication Metrics

Prometheus metrics recorded while bumping a layer across regions.
"""

import logging

from prometheus_client import CollectorRegistry, Counter, Histogram, write_to_textfile

logger = logging.getLogger(__name__)


class ReplicationMetrics:
    """Counters and timings for one reconciliation run"""

    def __init__(self, registry: CollectorRegistry):
        self.registry = registry
        self.versions_published = Counter(
            'layer_versions_published_total',
            'Layer versions republished into lagging regions',
            ['layer', 'source_region', 'target_region'],
            registry=registry
        )
        self.region_failures = Counter(
            'layer_region_bump_failures_total',
            'Region bump tasks that failed',
            ['layer', 'region'],
            registry=registry
        )
        self.bump_duration = Histogram(
            'layer_region_bump_duration_seconds',
            'Duration of a region bump task',
            ['layer', 'region'],
            registry=registry
        )


def export_textfile(registry: CollectorRegistry, path: str) -> None:
    """Write the registry for the node exporter textfile collector"""
    try:
        write_to_textfile(path, registry)
    except OSError as e:
        logger.error(f"Failed to write metrics to {path}: {e}")
        return
    logger.info(f"Wrote metrics to {path}")
