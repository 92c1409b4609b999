from __future__ import annotations
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple
from .exceptions import DependencyMissing
from .game import DARK_AND_LIGHT, GameDefinition
from .logging_setup import get_logger

log = get_logger("dnl.launcher.fs")

@dataclass(frozen=True)
class Layout:
    storage_root: Path
    binaries_dir: Path
    executable: Path
    config_file: Path
    companion_files: Tuple[str, ...]

def build_layout(storage_root: Path, game: GameDefinition = DARK_AND_LIGHT) -> Layout:
    root = Path(storage_root)
    return Layout(
        storage_root=root,
        binaries_dir=root / game.binaries_dir,
        executable=root / game.start_path,
        config_file=root / game.config_path,
        companion_files=tuple(game.companion_files),
    )

def ensure_dependencies(layout: Layout) -> List[Path]:
    """
    Stage companion binaries next to the executable.

    Missing files are copied from the storage root. Returns the files that
    were copied; raises DependencyMissing when a file can't be staged.
    """
    copied: List[Path] = []
    for name in layout.companion_files:
        target = layout.binaries_dir / name
        if target.is_file():
            continue
        source = layout.storage_root / name
        if not source.is_file():
            raise DependencyMissing(f"{name} is missing from {layout.binaries_dir} and {layout.storage_root}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as e:
            raise DependencyMissing(f"Failed to copy {source} -> {target}: {e}") from e
        log.info("Copied %s -> %s", source, target)
        copied.append(target)
    return copied
