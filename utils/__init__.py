"""Utilities for the x402 payment core."""

from .utils import (
    setup_logging,
    save_results,
    parse_big_int,
    PerformanceMonitor,
    OperationTiming,
    create_performance_report,
    get_system_info
)
from .merkle_tree import MerkleTree, MerkleTreeError

__all__ = [
    'setup_logging',
    'save_results',
    'parse_big_int',
    'PerformanceMonitor',
    'OperationTiming',
    'create_performance_report',
    'get_system_info',
    'MerkleTree',
    'MerkleTreeError',
]
