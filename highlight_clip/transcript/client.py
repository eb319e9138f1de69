from __future__ import annotations

import base64
import binascii
import json
import logging
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib import parse, request
from urllib.error import HTTPError, URLError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://backend.daglo.ai"
DEFAULT_PAGE_LIMIT = 60
DEFAULT_TIMEOUT_SECONDS = 30


class TranscriptFetchError(RuntimeError):
    """Upstream transcript service answered with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(slots=True)
class TranscriptSource:
    file_meta_id: str
    keywords: list[str] = field(default_factory=list)


class TranscriptClient:
    """Minimal bearer-token client for the transcript documents of one file."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        access_token: str | None = None,
        *,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        page_limit: int = DEFAULT_PAGE_LIMIT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout_seconds = timeout_seconds
        self.page_limit = page_limit

    def auth_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def build_url(self, path: str, query: dict[str, Any] | None = None) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        url = f"{self.base_url}{normalized}"
        if query:
            params = {key: value for key, value in query.items() if value is not None}
            url = f"{url}?{parse.urlencode(params, doseq=True)}"
        return url

    def get_json(self, path: str, query: dict[str, Any] | None = None, *, label: str) -> Any:
        url = self.build_url(path, query)
        req = request.Request(url, method="GET", headers=self.auth_headers())
        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:
                body = response.read().decode("utf-8")
        except HTTPError as exc:
            raise TranscriptFetchError(f"Failed to fetch {label}: {exc.reason}", status=exc.code) from exc
        except URLError as exc:
            raise TranscriptFetchError(f"Failed to fetch {label}: {exc.reason}") from exc
        return parse_response_body(body)

    def fetch_board(self, board_id: str) -> dict[str, Any]:
        payload = self.get_json(f"/boards/{board_id}", label="board")
        return payload if isinstance(payload, dict) else {}

    def fetch_keywords(self, file_meta_id: str) -> list[str]:
        """Keywords extracted upstream; an unavailable endpoint yields no keywords."""

        try:
            payload = self.get_json(f"/file-meta/{file_meta_id}/keywords", label="keywords")
        except TranscriptFetchError as exc:
            logger.warning("Keyword lookup failed for %s: %s", file_meta_id, exc)
            return []
        if not isinstance(payload, dict):
            return []
        return [str(keyword) for keyword in payload.get("keywords") or []]

    def fetch_script_pages(self, file_meta_id: str) -> list[dict[str, Any]]:
        """Fetch every script page one after another and decode its document."""

        documents: list[dict[str, Any]] = []
        first = self._fetch_script_page(file_meta_id, page=0)
        total_pages = _total_pages(first)
        _append_decoded(documents, first)

        for page in range(1, total_pages):
            _append_decoded(documents, self._fetch_script_page(file_meta_id, page=page))

        logger.info("Fetched %d script page(s) for %s", total_pages, file_meta_id)
        return documents

    def resolve_source(self, *, file_meta_id: str | None = None, board_id: str | None = None) -> TranscriptSource:
        """Resolve which file's transcript to use; an explicit file id wins over a board."""

        if file_meta_id:
            return TranscriptSource(file_meta_id=file_meta_id)
        if not board_id:
            raise ValueError("Provide a board id or file meta id to fetch the transcript.")

        board = self.fetch_board(board_id)
        file_metas = board.get("fileMeta")
        resolved = board.get("fileMetaId") or (
            file_metas[0].get("id") if isinstance(file_metas, list) and file_metas and isinstance(file_metas[0], dict) else None
        )
        if not resolved:
            raise ValueError(f"Could not determine file meta id from board {board_id}.")
        return TranscriptSource(
            file_meta_id=str(resolved),
            keywords=[str(keyword) for keyword in board.get("keywords") or []],
        )

    def _fetch_script_page(self, file_meta_id: str, *, page: int) -> Any:
        return self.get_json(
            f"/file-meta/{file_meta_id}/script",
            {"limit": self.page_limit, "page": page},
            label=f"script page {page}",
        )


def parse_response_body(body: str) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        return body


def inflate_content(value: str) -> str:
    """Inflate base64-encoded zlib content; anything else is returned unchanged."""

    if not value:
        return value
    try:
        return zlib.decompress(base64.b64decode(value)).decode("utf-8")
    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError):
        return value


def decode_script_item(value: Any) -> dict[str, Any] | None:
    if not value or not isinstance(value, str):
        return None
    try:
        decoded = json.loads(inflate_content(value))
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, dict) else None


def load_transcript_file(path: str | Path) -> list[Any]:
    """Load a locally saved transcript: one document, a list of pages, or a wrapped string."""

    source = Path(path).expanduser().resolve()
    if not source.exists():
        raise FileNotFoundError(f"Transcript file not found: {source}")

    raw = source.read_text(encoding="utf-8")
    payload = parse_response_body(raw)
    if isinstance(payload, dict) and isinstance(payload.get("item"), str):
        decoded = decode_script_item(payload["item"])
        return [decoded] if decoded is not None else []
    if isinstance(payload, list):
        return payload
    if payload is None:
        return []
    return [payload]


def _append_decoded(documents: list[dict[str, Any]], payload: Any) -> None:
    item = payload.get("item") if isinstance(payload, dict) else None
    decoded = decode_script_item(item)
    if decoded is not None:
        documents.append(decoded)


def _total_pages(payload: Any) -> int:
    meta = payload.get("meta") if isinstance(payload, dict) else None
    total = meta.get("totalPages") if isinstance(meta, dict) else None
    return int(total) if isinstance(total, int) and total > 0 else 1
