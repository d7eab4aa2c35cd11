import fnmatch
import logging
import os
import shlex
import shutil
import subprocess
from datetime import datetime, timezone
from typing import Callable, List, Optional

import requests
from rich.console import Console

from .constants import (
    CONTENT_ROOT,
    DEFAULT_BUILD_COMMAND,
    DEFAULT_DIST_DIR,
    DEFAULT_LOADER_SCRIPT,
    DEFAULT_MAX_WORKERS,
    LOADER_SCRIPT_PATTERN,
    SCRIPT_REFERENCE_PREFIX,
    STATIC_DIR_NAME,
)
from .errors import DeployerError
from .errors_catalog import actionable_error
from .models import Credentials, DeploymentContext, PipelineState
from .services.command_runner import CommandRunner
from .services.credentials import CredentialsLoader
from .services.filesystem import FileSystemService
from .services.transfer import UploadService
from .services.webdav import WebDAVClient

console = Console()
logger = logging.getLogger("checkoutdeployer")


def generate_deployment_id(now: Optional[datetime] = None) -> str:
    """Returns a sortable folder name such as ``2026-10-1614_03_22``."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat()
    return stamp.replace(":", "_").replace("T", "")


class CheckoutDeployer:
    def __init__(
        self,
        environment: str,
        project_dir: Optional[str] = None,
        dist_dir: str = DEFAULT_DIST_DIR,
        build_command: str = DEFAULT_BUILD_COMMAND,
        max_workers: int = DEFAULT_MAX_WORKERS,
        loader_script: Optional[str] = None,
        requests_module=requests,
    ):
        self.environment = environment
        self.project_dir = os.path.abspath(project_dir or os.getcwd())
        self.build_command = build_command
        self.max_workers = max_workers
        self.loader_script = loader_script
        self.requests = requests_module

        dist_path = os.path.join(self.project_dir, dist_dir)
        self.context = DeploymentContext(
            environment=environment,
            dist_dir=dist_path,
            dist_static_dir=os.path.join(dist_path, STATIC_DIR_NAME),
        )
        self.state = PipelineState.IDLE
        self.credentials: Optional[Credentials] = None

        self.command_runner = CommandRunner(logger=logger, subprocess_module=subprocess)
        self.credentials_loader = CredentialsLoader(project_dir=self.project_dir, logger=logger)
        self.filesystem_service = FileSystemService(logger=logger)
        self.webdav_client: Optional[WebDAVClient] = None
        self.upload_service: Optional[UploadService] = None

    def _run_step(self, title: str, state: PipelineState, callback: Callable[[], None]):
        self.state = state
        logger.debug("Pipeline state: %s", state.value)
        console.print(f"[blue]{title}...[/blue]")
        try:
            callback()
        except Exception:
            console.print(f"  [red]x[/red] {title} failed")
            raise
        console.print(f"  [green]√[/green] {title}")

    def load_credentials(self):
        self.credentials = self.credentials_loader.load(self.environment)
        self.webdav_client = WebDAVClient(
            credentials=self.credentials,
            logger=logger,
            requests_module=self.requests,
        )
        self.upload_service = UploadService(
            webdav_client=self.webdav_client,
            filesystem_service=self.filesystem_service,
            logger=logger,
            console=console,
            max_workers=self.max_workers,
        )

    def _build_cmd(self) -> List[str]:
        cmd = shlex.split(self.build_command)
        if not cmd:
            raise DeployerError("Build command is empty.")
        cmd[0] = shutil.which(cmd[0]) or cmd[0]
        return cmd

    def build(self):
        logger.info("Building checkout with `%s`", self.build_command)
        try:
            self.command_runner.run(self._build_cmd(), cwd=self.project_dir)
        except DeployerError as exc:
            raise DeployerError(
                actionable_error("build_failed", reason=str(exc), command=self.build_command)
            ) from exc

    def provision_target(self):
        ctx = self.context
        ctx.timestamp = generate_deployment_id()
        ctx.dest_folder = f"{CONTENT_ROOT}/{ctx.timestamp}"

        logger.info("Creating deployment folder %s", ctx.dest_folder)
        self.webdav_client.mkdir(ctx.dest_folder)
        self.webdav_client.mkdir(ctx.dest_static_folder)

        ctx.dist_files = self.filesystem_service.list_files(ctx.dist_dir)
        ctx.dist_static_files = self.filesystem_service.list_files(ctx.dist_static_dir)
        logger.info("Found %s files to upload", ctx.file_count)

    def deploy(self):
        ctx = self.context
        console.print(f"  Uploading {ctx.file_count} files...")
        ctx.uploaded_files.extend(
            self.upload_service.upload_files(ctx.dist_dir, ctx.dest_folder, ctx.dist_files)
        )
        ctx.uploaded_files.extend(
            self.upload_service.upload_files(
                ctx.dist_static_dir,
                ctx.dest_static_folder,
                ctx.dist_static_files,
            )
        )

    def resolve_loader_script(self) -> str:
        if self.loader_script:
            return self.loader_script
        matches = fnmatch.filter(self.context.dist_files, LOADER_SCRIPT_PATTERN)
        if matches:
            return matches[0]
        return DEFAULT_LOADER_SCRIPT

    def script_reference(self) -> str:
        return f"{SCRIPT_REFERENCE_PREFIX}/{self.context.timestamp}/{self.resolve_loader_script()}"

    def print_banner(self):
        console.rule("[bright_blue]Automated Custom Checkout Deployment[/bright_blue]")
        console.print("Builds and deploys custom checkout to a versioned folder on WebDAV.")
        console.print(f"Environment: [bold]{self.environment}[/bold]")
        console.print()

    def print_finished(self):
        console.print("  [green]√[/green] Finished")
        console.print()
        console.rule("[bright_magenta]Manual Step Required[/bright_magenta]")
        console.print(
            "A final step is required to change the storefront checkout "
            "to the newly deployed checkout."
        )
        console.print()
        console.print(f"1. Go to [blue]{self.credentials.checkout_settings_url}[/blue]")
        console.print('2. Under "Custom Checkout Settings", replace "Script URL" with the following:')
        console.print(f"   [green]{self.script_reference()}[/green]")
        console.print("3. Click Save")
        console.print()
        console.print("Thanks for deploying!")

    def run(self) -> int:
        try:
            self.print_banner()
            logger.info("Starting deployment to '%s'", self.environment)

            self.load_credentials()
            self._run_step("Build Checkout", PipelineState.BUILDING, self.build)
            self._run_step(
                "Pre-Deploy Setup",
                PipelineState.PROVISIONING_TARGET,
                self.provision_target,
            )
            self._run_step("Deploy Checkout", PipelineState.UPLOADING, self.deploy)

            self.state = PipelineState.DONE
            logger.info(
                "Deployed %s files to %s",
                len(self.context.uploaded_files),
                self.context.dest_folder,
            )
            self.print_finished()
            return 0

        except KeyboardInterrupt:
            self.state = PipelineState.FAILED
            console.print("[bold red]Deployment cancelled by user.[/bold red]")
            logger.info("Deployment cancelled by user")
            return 1
        except DeployerError as exc:
            self.state = PipelineState.FAILED
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            return 1
        except Exception as exc:
            self.state = PipelineState.FAILED
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            return 1
