"""Telemetry and observability helpers.

This package emits deterministic run events for build stages and filter chains.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
