"""Paperboy: the most visited stories of a site over a time window."""
from .core.models import StoryPackage, TimeWindow, UniqueStory
from .core.config import CollectorConfig
from .core.errors import (
    BucketFetchError,
    ConfigurationError,
    EnrichmentFetchError,
    PaperboyError,
)
from .collect.pipeline import Collector

__version__ = "1.0.0"

__all__ = [
    "Collector",
    "CollectorConfig",
    "TimeWindow",
    "UniqueStory",
    "StoryPackage",
    "PaperboyError",
    "ConfigurationError",
    "BucketFetchError",
    "EnrichmentFetchError",
]
