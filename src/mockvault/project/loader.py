"""
MockVault Project Loader

Loads project definitions from YAML or JSON files.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .model import Project


class ProjectLoader:
    """
    Standardized loader for project definition files.

    Handles the formats MockVault accepts:
    - Format 1: {"projects": [...]}  (wrapped format)
    - Format 2: [...]                (direct list format)

    Files ending in .yaml/.yml are parsed with PyYAML, everything else
    as JSON.

    Example:
        loader = ProjectLoader("projects.yaml")
        projects = loader.load()

        for project in projects:
            print(project.name)
    """

    def __init__(self, file_path: str):
        """
        Initialize project loader.

        Args:
            file_path: Path to project definitions file
        """
        self.file_path = Path(file_path)

    def load(self) -> List[Project]:
        """
        Load projects from the definitions file.

        Returns:
            List of projects

        Raises:
            FileNotFoundError: If the definitions file doesn't exist
            ValueError: If the format is invalid or unrecognized
        """
        if not self.file_path.exists():
            raise FileNotFoundError(f"Project file not found: {self.file_path}")

        with open(self.file_path, 'r', encoding='utf-8') as f:
            if self.file_path.suffix.lower() in ('.yaml', '.yml'):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        return [Project.from_dict(entry) for entry in self._unwrap(data)]

    def _unwrap(self, data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, dict):
            if 'projects' in data:
                return data['projects'] or []
            raise ValueError(
                f"Unexpected format in {self.file_path}. "
                f"Expected dict with 'projects' key or a list of projects. "
                f"Found keys: {list(data.keys())}"
            )
        elif isinstance(data, list):
            return data
        raise ValueError(
            f"Unexpected format in {self.file_path}. "
            f"Expected dict or list, got {type(data).__name__}"
        )

    @staticmethod
    def load_from_file(file_path: str) -> List[Project]:
        """Convenience method to load projects in one call."""
        return ProjectLoader(file_path).load()
