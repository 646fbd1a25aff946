"""Telemetry and observability helpers."""

from .logger import ServiceLogger

__all__ = ["ServiceLogger"]
