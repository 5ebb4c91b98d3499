"""
File utility functions.
"""

import os
import json
import yaml
from typing import Dict, Any, List
import pandas as pd


class FileUtils:
    """Utility functions for file operations."""

    @staticmethod
    def ensure_dir(path: str) -> None:
        """
        Ensure directory exists.

        Args:
            path: Directory path (no-op for the current directory)
        """
        if path:
            os.makedirs(path, exist_ok=True)

    @staticmethod
    def ensure_parent(path: str) -> None:
        """Ensure the directory holding ``path`` exists."""
        FileUtils.ensure_dir(os.path.dirname(str(path)))

    @staticmethod
    def save_json(data: Dict[str, Any], path: str) -> None:
        """
        Save data to JSON file.

        Args:
            data: Data to save
            path: Path to save file
        """
        FileUtils.ensure_parent(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @staticmethod
    def load_yaml(path: str) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    @staticmethod
    def save_text(text: str, path: str) -> None:
        FileUtils.ensure_parent(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)

    @staticmethod
    def save_csv(data: List[Dict[str, Any]], path: str, columns: List[str] = None) -> None:
        """
        Save rows to a CSV file.

        Args:
            data: Rows to save
            path: Path to save file
            columns: Column order (also used as header when there are no rows)
        """
        FileUtils.ensure_parent(path)
        df = pd.DataFrame(data, columns=columns)
        df.to_csv(path, index=False)
