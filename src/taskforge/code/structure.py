"""Project structure snapshot used as prompt context."""

import logging
from dataclasses import dataclass, field
from pathlib import Path


logger = logging.getLogger(__name__)

RELEVANT_EXTENSIONS = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".py",
    ".md",
    ".json",
    ".yml",
    ".yaml",
    ".toml",
    ".css",
    ".scss",
)

# Directories never worth showing to the model
SKIP_DIRS = {
    "node_modules",
    "__pycache__",
    "venv",
    ".venv",
    "dist",
    "build",
    ".next",
}

# Hidden entries are skipped except for these
VISIBLE_HIDDEN = {".github"}


@dataclass
class ProjectStructure:
    """Capped listing of relevant project files."""

    root: str
    files: list[str] = field(default_factory=list)
    truncated: bool = False

    def format_listing(self) -> str:
        if not self.files:
            return "- (no relevant files found)"
        lines = [f"- {path}" for path in self.files]
        if self.truncated:
            lines.append("- ... (listing truncated)")
        return "\n".join(lines)


def is_relevant_file(name: str, extensions: tuple[str, ...] = RELEVANT_EXTENSIONS) -> bool:
    """Check whether a file name has one of the relevant extensions."""
    return name.endswith(extensions)


def scan_project(
    root: Path | str,
    max_depth: int = 3,
    limit: int = 100,
    extensions: tuple[str, ...] = RELEVANT_EXTENSIONS,
) -> ProjectStructure:
    """Walk the project tree and collect relevant file paths.

    Directories are read down to ``max_depth`` levels below ``root``
    (the root itself is level 0). Entries are visited in sorted order so the
    listing is deterministic, and collection stops at ``limit`` paths.

    Args:
        root: Project root
        max_depth: Number of directory levels to read
        limit: Maximum number of paths returned
        extensions: File suffixes considered relevant

    Returns:
        ProjectStructure with paths relative to root, using forward slashes
    """
    root_path = Path(root).resolve()
    files: list[str] = []
    truncated = False

    def walk(directory: Path, depth: int) -> None:
        nonlocal truncated
        if depth >= max_depth or truncated:
            return

        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning(f"Error reading directory {directory}: {e}")
            return

        for entry in entries:
            name = entry.name
            if name.startswith(".") and name not in VISIBLE_HIDDEN:
                continue
            if name in SKIP_DIRS:
                continue

            if entry.is_dir():
                walk(entry, depth + 1)
            elif entry.is_file() and is_relevant_file(name, extensions):
                if len(files) >= limit:
                    truncated = True
                    return
                files.append(entry.relative_to(root_path).as_posix())

            if truncated:
                return

    walk(root_path, 0)
    return ProjectStructure(root=str(root_path), files=files, truncated=truncated)
