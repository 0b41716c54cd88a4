"""
Cross-region layer version reconciliation: region queries, the bump
driver and the verification check.
"""

from .fanout import run_all
from .reconciler import BumpReport, Reconciler, RegionBump
from .region_query import RegionQuery, greatest_of, validate_regions
from .verifier import BumpState, VerificationResult, Verifier, classify, compact_versions

__all__ = [
    'run_all',
    'BumpReport',
    'Reconciler',
    'RegionBump',
    'RegionQuery',
    'greatest_of',
    'validate_regions',
    'BumpState',
    'VerificationResult',
    'Verifier',
    'classify',
    'compact_versions',
]
