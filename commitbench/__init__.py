"""
Core package for the root/block commitment benchmark.
"""

from .driver import BenchmarkDriver
from .settlement import InMemorySettlementLayer, Web3SettlementLayer

__all__ = ["BenchmarkDriver", "InMemorySettlementLayer", "Web3SettlementLayer"]
