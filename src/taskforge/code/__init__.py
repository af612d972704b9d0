"""Project inspection utilities for prompt context."""

from taskforge.code.structure import ProjectStructure, scan_project, is_relevant_file

__all__ = ["ProjectStructure", "scan_project", "is_relevant_file"]
