"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Filesystem helpers shared by the engines: directory checks, catalog discovery and asset copying.
"""
import os
import shutil
from pathlib import Path
from typing import List, Union

from mameutility.core.config import ProcessingConfig

PathLike = Union[str, Path]


class FileService:
    """
    Thin wrappers around os/shutil so engines can be tested with a patched service.
    Errors are raised as OSError; callers translate them into domain errors.
    """

    @staticmethod
    def ensure_directory(path: PathLike) -> Path:
        """Creates the directory (and parents) if missing. Returns it as a Path."""
        folder = Path(path)
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @staticmethod
    def list_catalog_files(directory: PathLike, pattern: str = ProcessingConfig.CATALOG_GLOB) -> List[str]:
        """Non-recursive listing of regular files matching `pattern`, sorted by name."""
        return sorted(str(p) for p in Path(directory).glob(pattern) if p.is_file())

    @staticmethod
    def asset_path(folder: PathLike, record_name: str, extension: str) -> str:
        return os.path.join(str(folder), f"{record_name}.{extension}")

    @staticmethod
    def copy_file(source: PathLike, destination: PathLike) -> None:
        """Copies one file, overwriting the destination."""
        shutil.copyfile(str(source), str(destination))
