import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from googleapiclient.errors import HttpError

from auth import GoogleServices, build_services
from models import GoogleDocsContent

UNTITLED_DOCUMENT = "Untitled Document"
EXPORT_MIME_TYPE = "text/plain"

DOCUMENT_ID_PATTERN = re.compile(r"^https?://docs\.google\.com/document/d/([a-zA-Z0-9_-]+)")

# Statuses on the Docs API that send us down the Drive export path
FALLBACK_STATUSES = (401, 403)


class DocsErrorCode(str, enum.Enum):
    INVALID_URL = "INVALID_URL"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"


class DocsError(Exception):
    def __init__(self, code: DocsErrorCode, message: str, http_status: int):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status


@dataclass
class StepResult:
    """Outcome of a single HTTP step in the fetch chain."""
    ok: bool
    status: int
    payload: Any = None


def extract_document_id(url: str) -> str:
    """
    Extracts the document ID from a Google Docs URL.
    Supports .../document/d/{id}, with or without /edit, /view or a query string.
    """
    match = DOCUMENT_ID_PATTERN.match((url or "").strip())
    if match:
        return match.group(1)
    raise DocsError(DocsErrorCode.INVALID_URL, "Invalid Google Docs URL format", 400)


def _child(node: Any, key: str) -> Any:
    return node.get(key) if isinstance(node, dict) else None


def extract_text_from_document(document: Dict[str, Any]) -> str:
    """Concatenates every textRun in document order and trims the result."""
    parts = []
    body = _child(document, "body")
    for element in _child(body, "content") or []:
        paragraph = _child(element, "paragraph")
        for text_element in _child(paragraph, "elements") or []:
            content = _child(_child(text_element, "textRun"), "content")
            if isinstance(content, str) and content:
                parts.append(content)
    return "".join(parts).strip()


def run_step(request: Callable[[], Any]) -> StepResult:
    """Executes one API call, turning an HttpError into a failed StepResult."""
    try:
        return StepResult(True, 200, request())
    except HttpError as e:
        return StepResult(False, e.resp.status, e.reason)


class DocsFetcher:
    """Fetches plain text for a Google Doc: Docs API first, Drive export on 401/403."""

    def __init__(self, services: GoogleServices):
        self.docs = services.docs
        self.drive = services.drive

    # --- Steps ---

    def get_document(self, document_id: str) -> StepResult:
        return run_step(self.docs.documents().get(documentId=document_id).execute)

    def get_metadata(self, document_id: str) -> StepResult:
        return run_step(self.drive.files().get(fileId=document_id, fields="name").execute)

    def export_text(self, document_id: str) -> StepResult:
        result = run_step(
            self.drive.files().export(fileId=document_id, mimeType=EXPORT_MIME_TYPE).execute
        )
        if result.ok and isinstance(result.payload, bytes):
            result.payload = result.payload.decode("utf-8", errors="replace")
        return result

    # --- Chain ---

    def fetch_content(self, url: str) -> GoogleDocsContent:
        document_id = extract_document_id(url)
        logging.info(f"Fetching Google Doc {document_id} via Docs API")

        primary = self.get_document(document_id)
        if primary.ok:
            document = primary.payload or {}
            return GoogleDocsContent(
                title=document.get("title") or UNTITLED_DOCUMENT,
                content=extract_text_from_document(document),
            )
        if primary.status == 404:
            raise DocsError(DocsErrorCode.DOCUMENT_NOT_FOUND, "Document not found", 400)
        if primary.status in FALLBACK_STATUSES:
            logging.info(f"Docs API returned {primary.status}, falling back to Drive export")
            return self.fetch_via_drive_export(document_id)
        raise DocsError(
            DocsErrorCode.ACCESS_DENIED,
            f"Failed to fetch document: {primary.payload or primary.status}",
            primary.status,
        )

    def fetch_via_drive_export(self, document_id: str) -> GoogleDocsContent:
        metadata = self.get_metadata(document_id)
        if not metadata.ok:
            if metadata.status == 404:
                raise DocsError(DocsErrorCode.DOCUMENT_NOT_FOUND, "Document not found", 400)
            raise DocsError(
                DocsErrorCode.ACCESS_DENIED,
                "No permission to access document. Share it with your account or "
                "as 'Anyone with the link' with at least Viewer access.",
                metadata.status,
            )
        title = (metadata.payload or {}).get("name") or UNTITLED_DOCUMENT

        exported = self.export_text(document_id)
        if not exported.ok:
            raise DocsError(
                DocsErrorCode.ACCESS_DENIED,
                f"Could not export document content (status {exported.status})",
                403,
            )
        return GoogleDocsContent(title=title, content=(exported.payload or "").strip())


def fetch_google_docs_content(
    url: str, access_token: str, services: Optional[GoogleServices] = None
) -> GoogleDocsContent:
    """Fetches a Google Doc with the caller's OAuth token."""
    if services is None:
        services = build_services(access_token)
    return DocsFetcher(services).fetch_content(url)
