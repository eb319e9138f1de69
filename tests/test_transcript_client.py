from __future__ import annotations

import base64
import io
import json
import zlib
from pathlib import Path
from typing import Any
from urllib import parse
from urllib.error import HTTPError

import pytest

from highlight_clip.transcript import client as client_module
from highlight_clip.transcript.client import (
    TranscriptClient,
    TranscriptFetchError,
    decode_script_item,
    inflate_content,
    load_transcript_file,
)


def _compress(document: dict[str, Any]) -> str:
    return base64.b64encode(zlib.compress(json.dumps(document).encode("utf-8"))).decode("ascii")


def _page(text: str, start: float) -> dict[str, Any]:
    return {
        "editorState": {
            "root": {
                "children": [
                    {"type": "paragraph", "children": [{"type": "karaoke", "text": text, "s": start, "e": start + 1}]}
                ]
            }
        }
    }


class _Response:
    def __init__(self, payload: Any) -> None:
        self._body = payload if isinstance(payload, str) else json.dumps(payload)

    def read(self) -> bytes:
        return self._body.encode("utf-8")

    def __enter__(self) -> _Response:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None


class _FakeUpstream:
    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.requests: list[Any] = []

    def __call__(self, req: Any, timeout: int) -> _Response:
        self.requests.append(req)
        parsed = parse.urlsplit(req.full_url)
        query = dict(parse.parse_qsl(parsed.query))
        key = parsed.path + (f"#{query['page']}" if "page" in query else "")
        route = self.routes.get(key)
        if route is None or isinstance(route, int):
            raise HTTPError(req.full_url, route or 404, "Not Found", None, io.BytesIO(b""))
        return _Response(route)


def test_fetch_script_pages_fetches_every_page_in_order(monkeypatch: pytest.MonkeyPatch) -> None:
    upstream = _FakeUpstream(
        {
            "/file-meta/fm1/script#0": {"item": _compress(_page("one", 0)), "meta": {"totalPages": 3}},
            "/file-meta/fm1/script#1": {"item": _compress(_page("two", 60))},
            "/file-meta/fm1/script#2": {"item": "not-compressed"},
        }
    )
    monkeypatch.setattr(client_module.request, "urlopen", upstream)

    documents = TranscriptClient("https://api.example.test/", "token-1").fetch_script_pages("fm1")

    assert [doc["editorState"]["root"]["children"][0]["children"][0]["text"] for doc in documents] == ["one", "two"]
    pages = [dict(parse.parse_qsl(parse.urlsplit(req.full_url).query))["page"] for req in upstream.requests]
    assert pages == ["0", "1", "2"]
    assert upstream.requests[0].get_header("Authorization") == "Bearer token-1"


def test_non_success_status_aborts_with_status_text(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(client_module.request, "urlopen", _FakeUpstream({}))

    with pytest.raises(TranscriptFetchError, match="Failed to fetch script page 0: Not Found") as excinfo:
        TranscriptClient("https://api.example.test").fetch_script_pages("fm1")

    assert excinfo.value.status == 404


def test_resolve_source_prefers_explicit_file_meta_id(monkeypatch: pytest.MonkeyPatch) -> None:
    upstream = _FakeUpstream({})
    monkeypatch.setattr(client_module.request, "urlopen", upstream)

    source = TranscriptClient().resolve_source(file_meta_id="fm9", board_id="b1")

    assert source.file_meta_id == "fm9"
    assert upstream.requests == []


def test_resolve_source_from_board(monkeypatch: pytest.MonkeyPatch) -> None:
    upstream = _FakeUpstream({"/boards/b1": {"fileMeta": [{"id": "fm2"}], "keywords": ["금리", "AI"]}})
    monkeypatch.setattr(client_module.request, "urlopen", upstream)

    source = TranscriptClient("https://api.example.test").resolve_source(board_id="b1")

    assert source.file_meta_id == "fm2"
    assert source.keywords == ["금리", "AI"]


def test_resolve_source_requires_identifier() -> None:
    with pytest.raises(ValueError, match="Provide a board id or file meta id"):
        TranscriptClient().resolve_source()


def test_resolve_source_board_without_file(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(client_module.request, "urlopen", _FakeUpstream({"/boards/b1": {"title": "empty"}}))

    with pytest.raises(ValueError, match="Could not determine file meta id"):
        TranscriptClient("https://api.example.test").resolve_source(board_id="b1")


def test_fetch_keywords_tolerates_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    upstream = _FakeUpstream({"/file-meta/fm1/keywords": {"keywords": ["rates", "oracle"]}})
    monkeypatch.setattr(client_module.request, "urlopen", upstream)
    client = TranscriptClient("https://api.example.test")

    assert client.fetch_keywords("fm1") == ["rates", "oracle"]
    assert client.fetch_keywords("missing") == []


def test_decode_helpers_never_raise() -> None:
    document = _page("hello", 0)

    assert decode_script_item(_compress(document)) == document
    assert decode_script_item(json.dumps(document)) == document
    assert decode_script_item("garbage") is None
    assert decode_script_item(None) is None
    assert inflate_content("plain text") == "plain text"


def test_load_transcript_file_shapes(tmp_path: Path) -> None:
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"item": _compress(_page("x", 0))}), encoding="utf-8")
    pages = tmp_path / "pages.json"
    pages.write_text(json.dumps([_page("a", 0), _page("b", 1)]), encoding="utf-8")

    assert load_transcript_file(wrapped) == [_page("x", 0)]
    assert len(load_transcript_file(pages)) == 2
    with pytest.raises(FileNotFoundError):
        load_transcript_file(tmp_path / "missing.json")
