"""
Remote collaborators of the reconciliation engine: the Lambda layer API
and the payload download client.
"""

from .lambda_layers import LambdaLayerGateway, LayerGateway, create_session
from .transfer import PayloadDownloader

__all__ = ['LambdaLayerGateway', 'LayerGateway', 'create_session', 'PayloadDownloader']
