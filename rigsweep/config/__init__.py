"""Configuration loading for rigsweep.

Settings live in <town>/mayor/rigsweep.yml; every key is optional.
"""

from rigsweep.config.loader import load_config, load_rigs_registry, load_rigsweep_config
from rigsweep.config.schema import RigsRegistry, RigsweepConfig

__all__ = ["RigsRegistry", "RigsweepConfig", "load_config", "load_rigs_registry", "load_rigsweep_config"]
