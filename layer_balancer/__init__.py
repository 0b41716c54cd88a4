"""
Layer Balancer

Balances AWS Lambda layer versions across regions, so each region hosts
the same latest version of a layer.
"""

from .layer import Content, LayerVersion
from .replication import BumpReport, BumpState, Reconciler, RegionBump, VerificationResult, Verifier

__version__ = "0.1.0"

__all__ = [
    'Content',
    'LayerVersion',
    'BumpReport',
    'BumpState',
    'Reconciler',
    'RegionBump',
    'VerificationResult',
    'Verifier',
]
