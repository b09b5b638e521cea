"""
Runtime layer for devnetgen.

Everything between the raw NetworkSpec and the builders:
- DefaultCatalogue: per-discriminant defaults loaded from YAML
- deep_merge: the layering primitive
- ConfigResolver: user spec + catalogue -> resolved entity
- ScriptProvider: script references -> opaque script text
"""

from .catalogue import DefaultCatalogue
from .merge import deep_merge
from .resolver import ConfigResolver, chain_hostname
from .scripts import ScriptProvider

__all__ = [
    "ConfigResolver",
    "DefaultCatalogue",
    "ScriptProvider",
    "chain_hostname",
    "deep_merge",
]
