# pacioli/scaffold.py
"""Create a new project tree: templates, examples, config and counter state."""
from __future__ import annotations

import logging
import shutil
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Union

from .binder import BUNDLED_TEMPLATES_DIR
from .counter import FileCounterStore
from .exceptions import PacioliError

logger = logging.getLogger(__name__)

PROJECT_FILES_DIR = Path(__file__).parent / "project_files"

GITIGNORE = """# Generated PDFs
output/*.pdf
!output/.gitkeep

# Local configuration (contains bank details)
config/freelancer.json

# Auto-numbering state
.metadata.json
.metadata.json.lock
"""


def is_safe_to_initialize(target: Path, force: bool) -> bool:
    if not target.exists() or force:
        return True
    significant = [p for p in target.iterdir() if not p.name.startswith(".")]
    return len(significant) == 0


def _copy_tree(src: Path, dest: Path, force: bool, created: List[Path]) -> None:
    for path in sorted(src.rglob("*")):
        if not path.is_file():
            continue
        target = dest / path.relative_to(src)
        if target.exists() and not force:
            logger.warning("Skipping %s (already exists)", target)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, target)
        created.append(target)


def _write_file(path: Path, content: str, force: bool, created: List[Path]) -> None:
    if path.exists() and not force:
        logger.warning("Skipping %s (already exists)", path)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    created.append(path)


def init_project(
    target_dir: Union[str, Path],
    force: bool = False,
    today: Optional[Callable[[], date]] = None,
) -> List[Path]:
    """Scaffold a project in ``target_dir`` and return the files created.

    Refuses a directory with visible content unless ``force`` is set.
    """
    target = Path(target_dir)
    if not is_safe_to_initialize(target, force):
        raise PacioliError(
            f"Directory is not empty: {target} (use --force to overwrite existing files)"
        )
    target.mkdir(parents=True, exist_ok=True)

    created: List[Path] = []
    _copy_tree(BUNDLED_TEMPLATES_DIR, target / "templates", force, created)
    _copy_tree(PROJECT_FILES_DIR, target, force, created)
    _write_file(target / "output" / ".gitkeep", "", force, created)
    _write_file(target / ".gitignore", GITIGNORE, force, created)

    store = FileCounterStore(target / ".metadata.json")
    if store.initialize((today or date.today)(), force=force):
        created.append(store.path)
    else:
        logger.warning("Skipping %s (already exists)", store.path)

    logger.info("Initialized project in %s (%d files)", target, len(created))
    return created
