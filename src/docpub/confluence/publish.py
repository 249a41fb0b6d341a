"""Publish ADF documents and diagram images to a Confluence space"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from docpub.confluence.client import STORAGE_REPRESENTATION, ConfluenceClient
from docpub.core.models import AdfDocument, AdfMark, AdfNode, PublishResult, text_node
from docpub.core.parse import discover_files
from docpub.errors import PublishError


log = logging.getLogger(__name__)

DEFAULT_TITLE = "Documentation"
PLACEHOLDER_BODY = "<p>Temporary page for diagram attachments</p>"
GENERATED_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_page_title(title: str) -> str:
    """Trim title and uppercase only its first character; blank titles become 'Documentation'."""
    if not title or not title.strip():
        return DEFAULT_TITLE
    formatted = title.strip()
    return formatted[0].upper() + formatted[1:]


def replace_image_references(document: AdfDocument, attachments: dict[str, str]) -> AdfDocument:
    """Return document unchanged.

    Uploaded attachment ids are not spliced into the body: pages published
    by this tool never show the uploaded diagrams inline.
    """
    return document


def load_document(path: Path) -> AdfDocument:
    """Read and validate an ADF JSON file."""
    try:
        return AdfDocument.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        raise PublishError(f"Cannot read ADF document {path.name}: {e}") from e


class Publisher:
    """Creates or updates one page per ADF file, titled after the branch and file name."""

    def __init__(
        self,
        client: ConfluenceClient,
        space: str,
        branch: str,
        repository_url: str,
        commit_hash: str,
        clock: Callable[[], datetime] = datetime.now,
        ):
        self.client = client
        self.space = space
        self.branch = branch
        self.repository_url = repository_url
        self.commit_hash = commit_hash
        self.clock = clock

    def page_title(self, filename: str) -> str:
        stem = Path(filename).stem.replace("_", " ")
        return format_page_title(f"{self.branch} - {stem}")

    def metadata_header(self, document: AdfDocument) -> AdfDocument:
        """Return a copy of document with a repository/commit/date paragraph and a rule prepended."""
        generated = self.clock().strftime(GENERATED_FORMAT)
        header = AdfNode(type="paragraph", content=[
            text_node(f"Repository: {self.repository_url}",
                      AdfMark(type="link", attrs={"href": self.repository_url})),
            AdfNode(type="hardBreak"),
            text_node(f"Commit: {self.commit_hash}", AdfMark(type="code")),
            AdfNode(type="hardBreak"),
            text_node(f"Generated: {generated}", AdfMark(type="em")),
        ])
        copy = document.model_copy(deep=True)
        copy.content[0:0] = [header, AdfNode(type="rule")]
        return copy

    def upload_images(self, diagrams_dir: Path) -> dict[str, str]:
        """Upload every PNG in diagrams_dir to a fresh placeholder page; return filename -> attachment id."""
        attachments: dict[str, str] = {}
        if not diagrams_dir.is_dir():
            log.info("No diagrams directory found at: %s", diagrams_dir)
            return attachments
        images = discover_files(diagrams_dir, {".png"})
        if not images:
            log.info("No PNG diagram files found to upload")
            return attachments

        holder_title = f"Diagrams_{int(time.time() * 1000)}"
        holder_id = self.client.create_page(self.space, holder_title, PLACEHOLDER_BODY, STORAGE_REPRESENTATION)
        if holder_id is None:
            log.error("Failed to create placeholder page for %d attachment(s)", len(images))
            return attachments

        for image in images:
            attachment_id = self.client.upload_attachment(holder_id, image)
            if attachment_id is not None:
                attachments[image.name] = attachment_id
                log.info("Uploaded diagram: %s -> %s", image.name, attachment_id)
        return attachments

    def publish_document(self, path: Path, attachments: dict[str, str]) -> tuple[str, str]:
        """Create or update the page for one ADF file. Returns (status, title).

        An existing page whose current version cannot be read is reported as
        'failed' and left untouched.
        """
        title = self.page_title(path.name)
        try:
            document = load_document(path)
        except PublishError as e:
            log.error("%s", e)
            return "failed", title

        document = replace_image_references(self.metadata_header(document), attachments)
        body = document.model_dump(exclude_none=True)

        page_id = self.client.find_page_id(self.space, title)
        if page_id is None:
            created = self.client.create_page(self.space, title, body)
            return ("created" if created else "failed"), title

        version = self.client.get_page_version(page_id)
        if version is None:
            log.error("Cannot determine current version of page '%s' (%s); skipping update", title, page_id)
            return "failed", title
        updated = self.client.update_page(page_id, self.space, title, body, version + 1)
        return ("updated" if updated else "failed"), title

    def run(self, adf_dir: Path, diagrams_dir: Path) -> PublishResult:
        """Upload diagrams, then publish every ADF file in adf_dir in name order."""
        result = PublishResult.empty()
        result.attachments = self.upload_images(diagrams_dir)

        if not adf_dir.is_dir():
            log.info("No ADF directory found at: %s", adf_dir)
            return result
        files = discover_files(adf_dir, {".json"})
        if not files:
            log.info("No ADF files found to upload")
            return result

        for path in files:
            log.info("Uploading ADF document: %s", path.name)
            status, title = self.publish_document(path, result.attachments)
            result.record(status, title)
        return result


def run_publish(
    client: ConfluenceClient,
    space: str,
    branch: str,
    repository_url: str,
    commit_hash: str,
    adf_dir: Path,
    diagrams_dir: Path,
    ) -> PublishResult:
    """Publish with a fresh Publisher and close the client when done."""
    with client:
        publisher = Publisher(client, space, branch, repository_url, commit_hash)
        return publisher.run(adf_dir, diagrams_dir)
