"""Talent/offer compatibility scoring and alert dispatch."""

__version__ = "0.1.0"
