"""Concurrent batch upload of build output files."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Tuple

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from checkoutdeployer.constants import DEFAULT_MAX_WORKERS
from checkoutdeployer.errors import DeployerError
from checkoutdeployer.errors_catalog import actionable_error


class UploadService:
    """Uploads one directory's files to one remote folder.

    Every file of a batch is submitted at once. The batch only returns after
    all uploads have settled; the first failure observed is raised afterwards.
    Running uploads are never cancelled.
    """

    def __init__(
        self,
        webdav_client,
        filesystem_service,
        logger,
        console,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.webdav = webdav_client
        self.filesystem = filesystem_service
        self.logger = logger
        self.console = console
        self.max_workers = max_workers

    def upload_file(self, src: str, dest: str, name: str) -> str:
        contents = self.filesystem.read_text(src, name)
        self.webdav.write_file(f"{dest}/{name}", contents)
        return name

    def upload_files(self, src: str, dest: str, files: Sequence[str]) -> List[str]:
        if not files:
            self.logger.info("Nothing to upload from %s", src)
            return []

        self.logger.info("Uploading %s files from %s to %s", len(files), src, dest)
        uploaded: List[str] = []
        failure: Optional[Tuple[str, BaseException]] = None

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
        ) as progress:
            task = progress.add_task(f"[cyan]Uploading to {dest}", total=len(files))

            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {
                    executor.submit(self.upload_file, src, dest, name): name for name in files
                }
                for future in as_completed(futures):
                    name = futures[future]
                    progress.update(task, advance=1)
                    try:
                        uploaded.append(future.result())
                    except Exception as exc:
                        self.logger.error("Upload of %s failed: %s", name, exc)
                        if failure is None:
                            failure = (name, exc)

        if failure is not None:
            name, exc = failure
            raise DeployerError(
                actionable_error("upload_failed", name=name, dest=dest, reason=str(exc))
            ) from exc

        self.logger.debug("Uploaded to %s: %s", dest, ", ".join(sorted(uploaded)))
        return uploaded
