"""Local build output helpers for checkoutdeployer."""

import logging
import os
from typing import List

from checkoutdeployer.errors import DeployerError
from checkoutdeployer.errors_catalog import actionable_error


class FileSystemService:
    """Enumerates and reads files from the local build output."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def list_files(self, path: str) -> List[str]:
        """Returns the uploadable file names directly inside ``path``.

        Only names containing a dot are kept; extensionless entries are
        treated as folders and skipped. Dotted names that are real
        directories are skipped as well.
        """
        if not os.path.isdir(path):
            raise DeployerError(actionable_error("dist_not_found", path=path))

        try:
            entries = sorted(os.listdir(path))
        except OSError as exc:
            raise DeployerError(f"Could not list build output '{path}': {exc}") from exc

        files = []
        for name in entries:
            if "." not in name:
                self.logger.debug("Skipping entry without extension: %s", name)
                continue
            if os.path.isdir(os.path.join(path, name)):
                self.logger.debug("Skipping directory: %s", name)
                continue
            files.append(name)
        return files

    def read_text(self, directory: str, name: str) -> str:
        file_path = os.path.join(directory, name)
        try:
            with open(file_path, "r", encoding="utf-8", newline="") as file_obj:
                return file_obj.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise DeployerError(f"Could not read {file_path}: {exc}") from exc
