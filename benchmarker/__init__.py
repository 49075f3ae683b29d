"""
Cross-runtime benchmark harness.

This package compiles and runs the same benchmark programs on several language
runtimes and engines, extracts each run's self-reported timing, and reduces the
repeated measurements into best/mean/confidence-interval summaries with text,
CSV and chart artefacts.
"""

from .main import main

__all__ = ["main"]
