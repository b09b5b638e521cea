"""
Script content provider.

Turns a script reference ({name, file, data}) into the text embedded in a
ConfigMap. Script bodies are opaque: nothing here parses or validates them.

Relative file paths resolve against the project root given to the
constructor, never against the process working directory.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from devnetgen.errors import ScriptNotFoundError
from devnetgen.schemas.network import Script

logger = logging.getLogger(__name__)


class ScriptProvider:
    """
    Loads script content for chain ConfigMaps.

    Usage:
        scripts = ScriptProvider(project_root=Path("."))
        scripts.get_script_content(Script(data="echo hi"))            # "echo hi"
        scripts.get_script_content({"file": "scripts/default/x.sh"})  # file text
    """

    def __init__(self, project_root: str | Path):
        self._project_root = Path(project_root)

    @property
    def project_root(self) -> Path:
        return self._project_root

    def resolve_path(self, file: str) -> Path:
        path = Path(file)
        if path.is_absolute():
            return path
        return self._project_root / path

    def get_script_content(self, script: Script | Mapping[str, Any]) -> str:
        """
        Get the content for a script reference.

        Inline data wins over a file reference.

        Raises:
            ScriptNotFoundError: If the file is missing, or the reference has
                neither data nor file.
        """
        if isinstance(script, Mapping):
            script = Script.model_validate(script)

        if script.data:
            return script.data

        if script.file:
            path = self.resolve_path(script.file)
            if not path.is_file():
                raise ScriptNotFoundError(f"Script not found: {path}", script.name)
            try:
                return path.read_text()
            except OSError as e:
                raise ScriptNotFoundError(f"Could not read {path}: {e}", script.name) from e

        raise ScriptNotFoundError("Script must have either file or data property", script.name)

    def shared_scripts(self, directory: str | Path) -> dict[str, str]:
        """
        Read every *.sh file of a directory, sorted by file name.

        Returns an empty dict when the directory is missing.
        """
        directory = self.resolve_path(str(directory))
        if not directory.is_dir():
            logger.debug(f"[scripts] Shared scripts directory not found: {directory}")
            return {}
        return {path.name: path.read_text() for path in sorted(directory.glob("*.sh"))}
