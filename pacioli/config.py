# pacioli/config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from .config_labels import DOCUMENT_TYPES, TAX_TYPES, AUTO_NUMBER


class Settings(BaseModel):
    project_dir: Path
    config_path: Path
    metadata_path: Path
    templates_dir: Path
    output_dir: Path
    render_timeout: float = 60.0
    lock_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, project_dir: Optional[str] = None) -> "Settings":
        """Build settings from PACIOLI_* environment variables.

        Relative paths are resolved against the project directory, which
        defaults to the current working directory.
        """
        base = Path(project_dir or os.getenv("PACIOLI_PROJECT_DIR") or Path.cwd())

        def _path(env_name: str, default: str) -> Path:
            p = Path(os.getenv(env_name) or default)
            return p if p.is_absolute() else base / p

        return cls(
            project_dir=base,
            config_path=_path("PACIOLI_CONFIG", "config/freelancer.json"),
            metadata_path=_path("PACIOLI_METADATA", ".metadata.json"),
            templates_dir=_path("PACIOLI_TEMPLATES_DIR", "templates"),
            output_dir=_path("PACIOLI_OUTPUT_DIR", "output"),
            render_timeout=float(os.getenv("PACIOLI_RENDER_TIMEOUT") or 60),
            lock_timeout=float(os.getenv("PACIOLI_LOCK_TIMEOUT") or 10),
            log_level=(os.getenv("PACIOLI_LOG_LEVEL") or "INFO").upper(),
        )


__all__ = [
    "Settings",
    "DOCUMENT_TYPES",
    "TAX_TYPES",
    "AUTO_NUMBER",
]
