import json
import shlex
import sys
import threading
from datetime import datetime, timedelta, timezone

import pytest

import checkoutdeployer.core as core_module
from checkoutdeployer.core import CheckoutDeployer, generate_deployment_id
from checkoutdeployer.models import PipelineState

CREDENTIALS = {
    "WEBDAV_STOREHASH": "abc123",
    "WEBDAV_USERNAME": "dev",
    "WEBDAV_PASSWORD": "secret",
}


def python_command(code: str) -> str:
    return " ".join(shlex.quote(part) for part in [sys.executable, "-c", code])


BUILD_OK = python_command("from pathlib import Path; Path('build.marker').write_text('built')")
BUILD_FAILS = python_command("import sys; sys.stderr.write('webpack exploded'); sys.exit(2)")


class FakeResponse:
    def __init__(self, status_code: int = 201):
        self.status_code = status_code
        self.reason = ""


class FakeRequestsModule:
    class RequestException(Exception):
        pass

    def __init__(self, status_for=None):
        self.status_for = status_for or (lambda method, url: 201)
        self.lock = threading.Lock()
        self.calls = []

    def request(self, method, url, **kwargs):
        with self.lock:
            self.calls.append((method, url, kwargs))
        return FakeResponse(self.status_for(method, url))


@pytest.fixture
def dav(monkeypatch):
    monkeypatch.setattr(core_module, "generate_deployment_id", lambda: "2026-10-1614_03_22")
    return FakeRequestsModule()


@pytest.fixture
def project(tmp_path):
    (tmp_path / "env.sandbox.json").write_text(json.dumps(CREDENTIALS), encoding="utf-8")
    dist = tmp_path / "dist"
    static = dist / "static"
    static.mkdir(parents=True)
    for name in ("index.html", "auto-loader-2.0.0.js", "manifest.json"):
        (dist / name).write_text(name, encoding="utf-8")
    (dist / "media").mkdir()
    for name in ("main.css", "vendor.js"):
        (static / name).write_text(name, encoding="utf-8")
    (static / "fonts").mkdir()
    return tmp_path


def test_generate_deployment_id_strips_colons_and_fraction():
    now = datetime(2026, 10, 16, 14, 3, 22, 987654, tzinfo=timezone.utc)

    assert generate_deployment_id(now) == "2026-10-1614_03_22"


def test_generate_deployment_id_is_ordered_like_time():
    earlier = datetime(2026, 9, 30, 23, 59, 59, tzinfo=timezone.utc)
    ids = [generate_deployment_id(earlier + timedelta(seconds=step)) for step in (0, 1, 61, 86400)]

    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_generate_deployment_id_normalizes_to_utc():
    local = datetime(2026, 10, 16, 16, 3, 22, tzinfo=timezone(timedelta(hours=2)))

    assert generate_deployment_id(local) == "2026-10-1614_03_22"


def test_run_deploys_build_output(project, dav):
    deployer = CheckoutDeployer(
        environment="sandbox",
        project_dir=str(project),
        build_command=BUILD_OK,
        requests_module=dav,
    )

    assert deployer.run() == 0

    assert deployer.state is PipelineState.DONE
    assert (project / "build.marker").read_text() == "built"

    base = "https://store-abc123.mybigcommerce.com/dav/content/checkout/2026-10-1614_03_22"
    assert [(method, url) for method, url, _ in dav.calls[:2]] == [
        ("MKCOL", base),
        ("MKCOL", f"{base}/static"),
    ]
    puts = sorted(url for method, url, _ in dav.calls if method == "PUT")
    assert puts == sorted(
        [
            f"{base}/auto-loader-2.0.0.js",
            f"{base}/index.html",
            f"{base}/manifest.json",
            f"{base}/static/main.css",
            f"{base}/static/vendor.js",
        ]
    )
    assert deployer.context.file_count == 5
    assert sorted(deployer.context.uploaded_files) == sorted(
        ["auto-loader-2.0.0.js", "index.html", "manifest.json", "main.css", "vendor.js"]
    )
    assert deployer.script_reference() == "webdav:checkout/2026-10-1614_03_22/auto-loader-2.0.0.js"


def test_loader_script_override_and_default(project, dav):
    deployer = CheckoutDeployer(
        environment="sandbox",
        project_dir=str(project),
        build_command=BUILD_OK,
        loader_script="custom-loader.js",
        requests_module=dav,
    )
    deployer.context.timestamp = "2026-10-1614_03_22"
    assert deployer.script_reference() == "webdav:checkout/2026-10-1614_03_22/custom-loader.js"

    deployer.loader_script = None
    deployer.context.dist_files = ["index.html"]
    assert deployer.resolve_loader_script() == "auto-loader-1.96.1.js"


def test_build_failure_creates_nothing_remotely(project, dav):
    deployer = CheckoutDeployer(
        environment="sandbox",
        project_dir=str(project),
        build_command=BUILD_FAILS,
        requests_module=dav,
    )

    assert deployer.run() == 1

    assert deployer.state is PipelineState.FAILED
    assert dav.calls == []


def test_build_failure_message_keeps_tool_output(project, dav):
    deployer = CheckoutDeployer(
        environment="sandbox",
        project_dir=str(project),
        build_command=BUILD_FAILS,
        requests_module=dav,
    )
    deployer.load_credentials()

    with pytest.raises(core_module.DeployerError, match="webpack exploded"):
        deployer.build()


def test_missing_credentials_writes_template_without_building(tmp_path, dav):
    deployer = CheckoutDeployer(
        environment="production",
        project_dir=str(tmp_path),
        build_command=BUILD_OK,
        requests_module=dav,
    )

    assert deployer.run() == 1

    template = json.loads((tmp_path / "env.production.json").read_text(encoding="utf-8"))
    assert template == {"WEBDAV_STOREHASH": "", "WEBDAV_USERNAME": "", "WEBDAV_PASSWORD": ""}
    assert not (tmp_path / "build.marker").exists()
    assert deployer.state is PipelineState.FAILED
    assert dav.calls == []


def test_missing_static_folder_fails_before_upload(project, dav):
    for child in (project / "dist" / "static").iterdir():
        if child.is_dir():
            child.rmdir()
        else:
            child.unlink()
    (project / "dist" / "static").rmdir()

    deployer = CheckoutDeployer(
        environment="sandbox",
        project_dir=str(project),
        build_command=BUILD_OK,
        requests_module=dav,
    )

    assert deployer.run() == 1
    assert [method for method, _, _ in dav.calls] == ["MKCOL", "MKCOL"]


def test_remote_mkdir_failure_stops_pipeline(project):
    dav = FakeRequestsModule(status_for=lambda method, url: 401)
    deployer = CheckoutDeployer(
        environment="sandbox",
        project_dir=str(project),
        build_command=BUILD_OK,
        requests_module=dav,
    )

    assert deployer.run() == 1
    assert [method for method, _, _ in dav.calls] == ["MKCOL"]
    assert deployer.state is PipelineState.FAILED


def test_upload_failure_marks_pipeline_failed(project):
    dav = FakeRequestsModule(
        status_for=lambda method, url: 500 if url.endswith("/index.html") else 201
    )
    deployer = CheckoutDeployer(
        environment="sandbox",
        project_dir=str(project),
        build_command=BUILD_OK,
        requests_module=dav,
    )

    assert deployer.run() == 1
    assert deployer.state is PipelineState.FAILED
    assert deployer.context.uploaded_files == []
