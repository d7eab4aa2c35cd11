"""Shared domain models for checkoutdeployer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .constants import CHECKOUT_SETTINGS_PATH, DAV_PATH, STATIC_DIR_NAME, STORE_HOST_TEMPLATE


class PipelineState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    PROVISIONING_TARGET = "provisioning_target"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Credentials:
    """Storefront WebDAV credentials for one environment."""

    store_hash: str
    username: str
    password: str

    @property
    def store_url(self) -> str:
        return STORE_HOST_TEMPLATE.format(store_hash=self.store_hash)

    @property
    def dav_url(self) -> str:
        return f"{self.store_url}{DAV_PATH}"

    @property
    def checkout_settings_url(self) -> str:
        return f"{self.store_url}{CHECKOUT_SETTINGS_PATH}"


@dataclass
class DeploymentContext:
    """Values discovered while a single deployment runs.

    Each stage fills in its own fields before the next stage reads them.
    """

    environment: str
    dist_dir: str
    dist_static_dir: str
    timestamp: Optional[str] = None
    dest_folder: Optional[str] = None
    dist_files: List[str] = field(default_factory=list)
    dist_static_files: List[str] = field(default_factory=list)
    uploaded_files: List[str] = field(default_factory=list)

    @property
    def dest_static_folder(self) -> str:
        return f"{self.dest_folder}/{STATIC_DIR_NAME}"

    @property
    def file_count(self) -> int:
        return len(self.dist_files) + len(self.dist_static_files)
