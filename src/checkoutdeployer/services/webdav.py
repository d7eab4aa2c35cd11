"""Minimal WebDAV client used to publish the checkout build."""

from urllib.parse import quote

import requests
from requests.auth import HTTPDigestAuth

from checkoutdeployer.errors import DeployerError
from checkoutdeployer.models import Credentials


class WebDAVClient:
    """Issues the MKCOL and PUT requests needed for a deployment.

    Authentication uses HTTP digest, as required by the storefront DAV host.
    ``requests_module`` is injectable so tests can run without a network.
    """

    def __init__(self, credentials: Credentials, logger, requests_module=requests):
        self.base_url = credentials.dav_url
        self.auth = HTTPDigestAuth(credentials.username, credentials.password)
        self.logger = logger
        self.requests = requests_module

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{quote(path)}"

    def mkdir(self, path: str):
        self._request("MKCOL", path)

    def write_file(self, path: str, contents: str):
        self._request(
            "PUT",
            path,
            data=contents.encode("utf-8"),
            headers={"Content-Type": "application/octet-stream"},
        )

    def _request(self, method: str, path: str, **kwargs):
        url = self.url_for(path)
        self.logger.debug("%s %s", method, url)

        try:
            response = self.requests.request(method, url, auth=self.auth, **kwargs)
        except self.requests.RequestException as exc:
            raise DeployerError(f"WebDAV {method} {path} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            reason = getattr(response, "reason", "") or ""
            raise DeployerError(
                f"WebDAV {method} {path} failed with HTTP {response.status_code} {reason}".strip()
            )
        return response
