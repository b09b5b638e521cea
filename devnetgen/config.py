"""
Generator Settings.

Process-level configuration for devnetgen, read from the environment.

Design Principle:
    The pipeline itself never looks at the working directory or the
    environment. Everything it needs (project root, catalogue location,
    version stamp) is carried by GeneratorSettings and passed down
    explicitly. get_settings() is only the convenience default for callers
    that do not build settings themselves.

Environment:
    DEVNETGEN_PROJECT_ROOT   Directory holding configs/ and scripts/ (default ".")
    DEVNETGEN_DEFAULTS_FILE  Explicit catalogue path (default <root>/configs/defaults.yaml)
    DEVNETGEN_LOG_LEVEL      Logging level name (default "INFO")

Usage:
    settings = get_settings()
    configure_logging(settings)

    custom = GeneratorSettings(project_root=Path("/srv/devnet"))
    print(custom.resolved_defaults_file)
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

from devnetgen import __version__

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class GeneratorSettings(BaseModel):
    """Settings shared by one or more pipeline runs."""

    project_root: Path = Field(
        default=Path("."),
        description="Directory containing configs/ and scripts/",
    )
    defaults_file: Path | None = Field(
        default=None,
        description="Explicit path to the default catalogue YAML",
    )
    log_level: str = Field(default="INFO", description="Logging level name")
    generator_version: str = Field(
        default=__version__,
        description="Version stamped on pod template labels",
    )

    @property
    def resolved_defaults_file(self) -> Path:
        """Catalogue path, falling back to <project_root>/configs/defaults.yaml."""
        if self.defaults_file is not None:
            return self.defaults_file
        return self.project_root / "configs" / "defaults.yaml"

    @property
    def keys_file(self) -> Path:
        return self.project_root / "configs" / "keys.json"

    @property
    def shared_scripts_dir(self) -> Path:
        return self.project_root / "scripts" / "default"


@lru_cache()
def get_settings() -> GeneratorSettings:
    """
    Get generator settings from environment.

    Uses lru_cache for singleton pattern.
    """
    defaults_file = os.getenv("DEVNETGEN_DEFAULTS_FILE")
    return GeneratorSettings(
        project_root=Path(os.getenv("DEVNETGEN_PROJECT_ROOT", ".")),
        defaults_file=Path(defaults_file) if defaults_file else None,
        log_level=os.getenv("DEVNETGEN_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: GeneratorSettings | None = None) -> None:
    """Configure root logging for command-line style entry points."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
