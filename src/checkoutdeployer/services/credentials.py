"""Per-environment WebDAV credentials file handling."""

import json
import os
import tempfile
from typing import Any, Dict

from checkoutdeployer.constants import CREDENTIAL_KEYS, CREDENTIALS_FILE_TEMPLATE
from checkoutdeployer.errors import DeployerError
from checkoutdeployer.errors_catalog import actionable_error
from checkoutdeployer.models import Credentials


class CredentialsLoader:
    """Loads `env.<environment>.json`, writing a blank template when it is absent."""

    def __init__(self, project_dir: str, logger):
        self.project_dir = project_dir
        self.logger = logger

    def path_for(self, environment: str) -> str:
        return os.path.join(
            self.project_dir,
            CREDENTIALS_FILE_TEMPLATE.format(environment=environment),
        )

    def load(self, environment: str) -> Credentials:
        path = self.path_for(environment)
        file_name = os.path.basename(path)

        if not os.path.exists(path):
            self.write_template(path)
            raise DeployerError(actionable_error("credentials_missing", path=file_name))

        try:
            with open(path, "r", encoding="utf-8") as file_obj:
                data = json.load(file_obj)
        except (OSError, json.JSONDecodeError) as exc:
            raise DeployerError(f"Could not read credentials file '{file_name}': {exc}") from exc

        if not isinstance(data, dict):
            raise DeployerError(f"Credentials file '{file_name}' must contain a JSON object.")

        missing = [key for key in CREDENTIAL_KEYS if not self._has_value(data, key)]
        if missing:
            raise DeployerError(
                actionable_error("credentials_incomplete", path=file_name, keys=", ".join(missing))
            )

        self.logger.debug("Loaded WebDAV credentials from %s", path)
        return Credentials(
            store_hash=data["WEBDAV_STOREHASH"],
            username=data["WEBDAV_USERNAME"],
            password=data["WEBDAV_PASSWORD"],
        )

    def write_template(self, path: str):
        template = {key: "" for key in CREDENTIAL_KEYS}
        directory = os.path.dirname(path) or "."

        fd, temp_path = tempfile.mkstemp(prefix="env-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(template, file_obj, indent=2)
                file_obj.write("\n")
            os.replace(temp_path, path)
        except OSError as exc:
            raise DeployerError(f"Could not write credentials template '{path}': {exc}") from exc
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

        self.logger.info("Created credentials template at %s", path)

    @staticmethod
    def _has_value(data: Dict[str, Any], key: str) -> bool:
        value = data.get(key)
        return isinstance(value, str) and bool(value.strip())
