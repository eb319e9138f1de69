from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from highlight_clip.models import Token

WORD_NODE_TYPE = "karaoke"
WRAPPER_FIELDS = ("text", "item", "content")


@dataclass(frozen=True, slots=True)
class WordLeaf:
    token: Token
    children: Any = None


@dataclass(frozen=True, slots=True)
class Container:
    children: Any


@dataclass(frozen=True, slots=True)
class NodeList:
    items: list[Any]


TranscriptNode = Union[WordLeaf, Container, NodeList]


def extract_tokens(payload: Any) -> list[Token]:
    """Flatten a transcript document into time-ordered word tokens.

    ``payload`` may be the decoded JSON tree or a JSON string, possibly wrapped one or
    more levels deep in ``text``/``item``/``content`` string fields. Undecodable input
    yields an empty list.
    """

    document = unwrap_document(payload)
    if document is None:
        return []

    tokens: list[Token] = []
    _visit(traversal_root(document), tokens)
    return tokens


def unwrap_document(payload: Any) -> dict[str, Any] | list[Any] | None:
    """Decode nested JSON string wrappers until a JSON object or array remains."""

    current = payload
    while True:
        if isinstance(current, str):
            try:
                current = json.loads(current)
            except json.JSONDecodeError:
                return None
            continue

        if isinstance(current, dict):
            wrapped = next(
                (current[key] for key in WRAPPER_FIELDS if isinstance(current.get(key), str)),
                None,
            )
            if wrapped is not None and not _has_structure(current):
                current = wrapped
                continue
            return current

        if isinstance(current, list):
            return current

        return None


def traversal_root(document: dict[str, Any] | list[Any]) -> Any:
    if not isinstance(document, dict):
        return document

    editor_state = document.get("editorState")
    if isinstance(editor_state, dict):
        return editor_state.get("root", editor_state)
    if editor_state is not None:
        return editor_state
    return document


def classify_node(node: Any) -> TranscriptNode | None:
    """Map a raw JSON value onto the closed set of transcript node shapes."""

    if isinstance(node, list):
        return NodeList(items=node)
    if not isinstance(node, dict):
        return None
    if _is_word_node(node):
        return WordLeaf(
            token=Token(text=node["text"], start_seconds=float(node["s"]), end_seconds=float(node["e"])),
            children=node.get("children"),
        )
    if node.get("children") is not None:
        return Container(children=node["children"])
    return None


def _visit(node: Any, tokens: list[Token]) -> None:
    shape = classify_node(node)
    if shape is None:
        return

    if isinstance(shape, NodeList):
        for item in shape.items:
            _visit(item, tokens)
    elif isinstance(shape, WordLeaf):
        tokens.append(shape.token)
        if shape.children is not None:
            _visit(shape.children, tokens)
    else:
        _visit(shape.children, tokens)


def _has_structure(node: dict[str, Any]) -> bool:
    return "editorState" in node or "children" in node or _is_word_node(node)


def _is_word_node(node: dict[str, Any]) -> bool:
    return (
        node.get("type") == WORD_NODE_TYPE
        and isinstance(node.get("text"), str)
        and _is_number(node.get("s"))
        and _is_number(node.get("e"))
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)
