"""
Configuration management for expression_clustering.

Loads defaults from environment variables (typically from a .env file in the
project root). Uses python-dotenv to load .env automatically.

The engines never read the environment themselves; this module only builds
the explicit configuration objects they take.

Usage:
    from expression_clustering.config import config

    bicluster_cfg = config.bicluster_config(min_width=4)
    cache_size = config.hierarchical.cache_size

Importing this module never fails on a bad variable; settings are parsed
when first accessed.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .algorithms.bicluster import BiclusterConfig
from .algorithms.hierarchical import HierarchicalClusterer
from .algorithms.linkage import LINKAGES, Metric, get_linkage
from .errors import InvalidInputError

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidInputError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise InvalidInputError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class BiclusterSettings:
    """Environment defaults for the bicluster extraction engine."""
    max_score: float = 1200.0
    min_height: int = 5
    min_width: int = 10
    batch_threshold: int = 100
    seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "BiclusterSettings":
        """Read BICLUSTER_* variables, falling back to the class defaults."""
        return cls(
            max_score=_env_float("BICLUSTER_MAX_SCORE", cls.max_score),
            min_height=_env_int("BICLUSTER_MIN_HEIGHT", cls.min_height),
            min_width=_env_int("BICLUSTER_MIN_WIDTH", cls.min_width),
            batch_threshold=_env_int("BICLUSTER_BATCH_THRESHOLD", cls.batch_threshold),
            seed=_env_int("BICLUSTER_SEED", None),
        )


@dataclass
class HierarchicalSettings:
    """Environment defaults for the hierarchical clustering engine."""
    cache_size: int = 10
    linkage: str = "average"

    def __post_init__(self):
        """Validate cache size and linkage name."""
        if self.cache_size < 1:
            raise InvalidInputError(
                f"HCLUST_CACHE_SIZE must be >= 1, got {self.cache_size}"
            )
        if self.linkage not in LINKAGES:
            raise InvalidInputError(
                f"HCLUST_LINKAGE must be one of {sorted(LINKAGES)}, got {self.linkage!r}"
            )

    @classmethod
    def from_env(cls) -> "HierarchicalSettings":
        """Read HCLUST_* variables, falling back to the class defaults."""
        return cls(
            cache_size=_env_int("HCLUST_CACHE_SIZE", cls.cache_size),
            linkage=os.getenv("HCLUST_LINKAGE", cls.linkage).strip().lower() or cls.linkage,
        )


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    3. In a container/deployment environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.log_level = os.getenv("EXPRESSION_CLUSTERING_LOG_LEVEL", "WARNING").upper()

        # Engine settings are read and validated on first use
        self._bicluster: Optional[BiclusterSettings] = None
        self._hierarchical: Optional[HierarchicalSettings] = None

    @property
    def bicluster(self) -> BiclusterSettings:
        """
        BICLUSTER_* settings.

        Raises:
            InvalidInputError: If a variable is malformed
        """
        if self._bicluster is None:
            self._bicluster = BiclusterSettings.from_env()
        return self._bicluster

    @property
    def hierarchical(self) -> HierarchicalSettings:
        """
        HCLUST_* settings.

        Raises:
            InvalidInputError: If a variable is malformed or names an unknown
                linkage
        """
        if self._hierarchical is None:
            self._hierarchical = HierarchicalSettings.from_env()
        return self._hierarchical

    def bicluster_config(self, **overrides: Any) -> BiclusterConfig:
        """
        Build a validated BiclusterConfig from the environment defaults.

        Args:
            **overrides: Any BiclusterConfig field, taking precedence over
                the environment.

        Returns:
            BiclusterConfig

        Raises:
            InvalidInputError: If the resulting configuration is malformed
        """
        values = {
            "max_score": self.bicluster.max_score,
            "min_height": self.bicluster.min_height,
            "min_width": self.bicluster.min_width,
            "batch_threshold": self.bicluster.batch_threshold,
            "seed": self.bicluster.seed,
        }
        values.update(overrides)
        return BiclusterConfig(**values)

    def hierarchical_clusterer(self, metric: Metric) -> HierarchicalClusterer:
        """
        Build a HierarchicalClusterer using the configured linkage and cache.

        Args:
            metric: Primitive distance between two leaf values

        Returns:
            HierarchicalClusterer ready to ``cluster`` leaves
        """
        linkage = get_linkage(self.hierarchical.linkage, metric)
        return HierarchicalClusterer(linkage, cache_size=self.hierarchical.cache_size)


# Global config instance
config = Config()
