"""Error types raised by the layer balancer."""


class LayerBalancerError(Exception):
    """Base class for every error the CLI reports to the user."""
    pass


class UsageError(LayerBalancerError):
    """Invalid command input, raised before any network activity."""
    pass


class ConfigurationError(LayerBalancerError):
    """Invalid configuration or unusable AWS credentials."""
    pass


class GatewayError(LayerBalancerError):
    """A Lambda API call failed."""
    pass


class LayerVersionNotFoundError(GatewayError):
    """The requested layer version does not exist in the region."""
    pass


class VersionMismatchError(GatewayError):
    """The version number assigned on publish differs from the source."""
    pass


class TransferError(LayerBalancerError):
    """Downloading a layer payload failed."""
    pass


class RegionQueryError(LayerBalancerError):
    """One of the regions failed while querying latest versions."""
    pass


class NoPublishedVersionsError(LayerBalancerError):
    """No region has a published version of the layer."""

    def __init__(self, message: str = "there are no published versions"):
        super().__init__(message)


class RegionsNotBumpedError(LayerBalancerError):
    """Regions do not share the same latest version."""

    def __init__(self, message: str = "some regions are not bumped"):
        super().__init__(message)
