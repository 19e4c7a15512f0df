"""Aggregate documentation from many repositories into one collection."""

from .pipeline import AggregationPipeline, AggregationResult

__all__ = ["AggregationPipeline", "AggregationResult"]

__version__ = "0.1.0"
