"""
Pytest Configuration and Fixtures

Provides an in-memory Lambda layer gateway and payload downloader so the
reconciliation engine can be exercised without AWS or network access.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from layer_balancer.common.errors import LayerVersionNotFoundError
from layer_balancer.gateway.lambda_layers import LayerGateway
from layer_balancer.layer import Content, LayerVersion

LAYER = "my-layer"


def location_for(region: str, number: int) -> str:
    return f"https://layers.example.com/{region}/{LAYER}/{number}.zip"


def make_version(region: str, number: int) -> LayerVersion:
    return LayerVersion(
        number=number,
        region=region,
        description=f"release {number}",
        license="MIT",
        architectures=("x86_64",),
        runtimes=("python3.12",),
        content=Content(location=location_for(region, number)),
    )


class InMemoryGateway(LayerGateway):
    """
    Layer gateway keeping one version history per region.

    Every call is recorded in ``calls`` as a tuple, e.g. ``('get', 8, 'us-east-1')``.
    """

    def __init__(self, latest: Dict[str, int], delays: Optional[Dict[str, float]] = None):
        self.histories: Dict[str, List[LayerVersion]] = {
            region: [make_version(region, n) for n in range(1, number + 1)]
            for region, number in latest.items()
        }
        self.delays = delays or {}
        self.failures: Dict[tuple, Exception] = {}
        self.number_offsets: Dict[str, int] = {}
        self.calls: List[tuple] = []
        self.published: List[LayerVersion] = []

    def fail(self, operation: str, region: str, error: Exception) -> None:
        self.failures[(operation, region)] = error

    async def _enter(self, operation: str, region: str) -> None:
        delay = self.delays.get(region)
        if delay:
            await asyncio.sleep(delay)
        error = self.failures.get((operation, region))
        if error is not None:
            raise error

    def calls_for(self, operation: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == operation]

    async def get_version(self, layer: str, number: int, region: str) -> LayerVersion:
        self.calls.append(('get', number, region))
        await self._enter('get', region)
        for version in self.histories.get(region, []):
            if version.number == number:
                return version
        raise LayerVersionNotFoundError(f"unable to retrieve layer version: {layer}:{number}")

    async def latest_version(self, layer: str, region: str) -> LayerVersion:
        self.calls.append(('list', region))
        await self._enter('list', region)
        history = self.histories.get(region)
        if not history:
            return LayerVersion.unpublished(region)
        version = history[-1]
        return LayerVersion(
            number=version.number,
            region=version.region,
            description=version.description,
            license=version.license,
            architectures=version.architectures,
            runtimes=version.runtimes,
        )

    async def publish_version(self, layer: str, version: LayerVersion) -> int:
        self.calls.append(('publish', version.region, version.number))
        await self._enter('publish', version.region)
        history = self.histories.setdefault(version.region, [])
        assigned = len(history) + 1 + self.number_offsets.get(version.region, 0)
        stored = LayerVersion(
            number=assigned,
            region=version.region,
            description=version.description,
            license=version.license,
            architectures=version.architectures,
            runtimes=version.runtimes,
            content=Content(location=location_for(version.region, assigned)),
        )
        history.append(stored)
        self.published.append(version)
        return assigned


class FakeDownloader:
    """Returns deterministic payloads and records every location fetched"""

    def __init__(self):
        self.locations: List[str] = []
        self.entered = False
        self.closed = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def download(self, location: str) -> bytes:
        self.locations.append(location)
        await asyncio.sleep(0)
        return f"zip:{location}".encode()


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def scenario_gateway():
    """us-east-1 at version 10, us-west-2 lagging at 7"""
    return InMemoryGateway({"us-east-1": 10, "us-west-2": 7})
