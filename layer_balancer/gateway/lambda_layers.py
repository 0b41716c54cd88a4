"""
Lambda Layer Gateway

Reads and publishes AWS Lambda layer versions in a given region.
"""

import logging
from typing import Any, Dict, Optional

import aioboto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ProfileNotFound,
    ReadTimeoutError,
)
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..common.errors import ConfigurationError, GatewayError, LayerVersionNotFoundError
from ..layer import Content, LayerVersion

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


class LayerGateway:
    """Base gateway for layer version operations"""

    async def get_version(self, layer: str, number: int, region: str) -> LayerVersion:
        raise NotImplementedError

    async def latest_version(self, layer: str, region: str) -> LayerVersion:
        raise NotImplementedError

    async def publish_version(self, layer: str, version: LayerVersion) -> int:
        raise NotImplementedError


def create_session(profile: Optional[str] = None) -> aioboto3.Session:
    """Create an AWS session from the default credential chain or a named profile"""
    try:
        return aioboto3.Session(profile_name=profile)
    except ProfileNotFound as e:
        raise ConfigurationError(f"failed to load aws config: {e}") from e


class LambdaLayerGateway(LayerGateway):
    """Lambda layer gateway backed by aioboto3"""

    def __init__(
        self,
        session: Optional[aioboto3.Session] = None,
        retry_attempts: int = 1,
        retry_min_wait: float = 1,
        retry_max_wait: float = 10
    ):
        self.session = session or aioboto3.Session()
        self.retry_attempts = retry_attempts
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait

    async def _call(self, operation: str, region: str, failure: str, **params) -> Dict[str, Any]:
        """Invoke a Lambda API operation in a region, wrapping botocore errors"""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=1, min=self.retry_min_wait, max=self.retry_max_wait),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    async with self.session.client('lambda', region_name=region) as client:
                        return await getattr(client, operation)(**params)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ResourceNotFoundException':
                raise LayerVersionNotFoundError(f"{failure}: {e}") from e
            raise GatewayError(f"{failure}: {e}") from e
        except BotoCoreError as e:
            raise GatewayError(f"{failure}: {e}") from e

    async def get_version(self, layer: str, number: int, region: str) -> LayerVersion:
        """Retrieve a version of the layer in a region"""
        out = await self._call(
            'get_layer_version', region, "unable to retrieve layer version",
            LayerName=layer, VersionNumber=number
        )

        return LayerVersion(
            number=out['Version'],
            region=region,
            description=out.get('Description', ''),
            license=out.get('LicenseInfo', ''),
            architectures=tuple(out.get('CompatibleArchitectures', [])),
            runtimes=tuple(out.get('CompatibleRuntimes', [])),
            content=Content(location=out.get('Content', {}).get('Location', '')),
        )

    async def latest_version(self, layer: str, region: str) -> LayerVersion:
        """Retrieve the latest version of the layer in a region"""
        out = await self._call(
            'list_layer_versions', region, "unable to list layer versions",
            LayerName=layer, MaxItems=1
        )

        versions = out.get('LayerVersions', [])
        if not versions:
            return LayerVersion.unpublished(region)

        latest = versions[0]
        return LayerVersion(
            number=latest['Version'],
            region=region,
            description=latest.get('Description', ''),
            license=latest.get('LicenseInfo', ''),
            architectures=tuple(latest.get('CompatibleArchitectures', [])),
            runtimes=tuple(latest.get('CompatibleRuntimes', [])),
        )

    async def publish_version(self, layer: str, version: LayerVersion) -> int:
        """Publish a new version of the layer into the version's region"""
        if version is None:
            raise ValueError("version must not be None")
        if version.content.zip_file is None:
            raise ValueError("version content must carry the layer zip file")

        params: Dict[str, Any] = {
            'LayerName': layer,
            'Content': {'ZipFile': version.content.zip_file},
        }
        if version.description:
            params['Description'] = version.description
        if version.license:
            params['LicenseInfo'] = version.license
        if version.architectures:
            params['CompatibleArchitectures'] = list(version.architectures)
        if version.runtimes:
            params['CompatibleRuntimes'] = list(version.runtimes)

        out = await self._call(
            'publish_layer_version', version.region, "failed to publish layer version", **params
        )

        logger.info(f"Published {layer} version {out['Version']} in {version.region}")
        return out['Version']
