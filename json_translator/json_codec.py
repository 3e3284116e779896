"""
Reading and writing flat JSON locale documents.

A locale document is a single JSON object whose values are all strings. Key
order is part of the document: it is kept exactly as read so that rewritten
files diff cleanly against their previous versions.
"""
import json
import logging
import os
import tempfile
from typing import List, Optional, Tuple

import jsonschema

from json_translator.exceptions import FileSystemError, MalformedDocument
from json_translator.ordered_store import OrderedKeyValueStore

logger = logging.getLogger(__name__)

# Every key maps to a string; nested objects, arrays, numbers and nulls are rejected.
FLAT_DOCUMENT_SCHEMA = {
    "type": "object",
    "additionalProperties": {"type": "string"}
}


class _ObjectPairs(list):
    """Key/value pairs of a decoded JSON object, in source order."""


def _collect_pairs(pairs: List[Tuple[str, object]]) -> _ObjectPairs:
    return _ObjectPairs(pairs)


def decode_document(text: str, path: Optional[str] = None) -> OrderedKeyValueStore:
    """
    Decode the text of a flat JSON object into an ordered store.

    Args:
        text: The JSON text.
        path: The file the text came from, used in error messages only.

    Returns:
        OrderedKeyValueStore: The entries in the order they appear in ``text``.

    Raises:
        MalformedDocument: If the text is not valid JSON, is not an object, or
            holds a value that is not a string.
    """
    try:
        parsed = json.loads(text, object_pairs_hook=_collect_pairs)
    except json.JSONDecodeError as exc:
        raise MalformedDocument(f"invalid JSON: {exc}", path) from exc

    if not isinstance(parsed, _ObjectPairs):
        raise MalformedDocument(
            f"expected a JSON object at the top level, got {type(parsed).__name__}", path
        )

    try:
        jsonschema.validate(instance=dict(parsed), schema=FLAT_DOCUMENT_SCHEMA)
    except jsonschema.ValidationError as exc:
        key = exc.path[0] if exc.path else None
        if key is not None:
            raise MalformedDocument(f"value for key '{key}' must be a string", path) from exc
        raise MalformedDocument(exc.message, path) from exc

    # A repeated key keeps its first position and takes its last value.
    return OrderedKeyValueStore.from_pairs(parsed)


def read_json_file(file_path: str, missing_ok: bool = False) -> OrderedKeyValueStore:
    """
    Read a flat JSON document from disk.

    Args:
        file_path: Path of the document.
        missing_ok: Return an empty store instead of failing when the file does
            not exist. Used for the output side, which is absent on the first
            run for a new language.

    Returns:
        OrderedKeyValueStore: The document's entries in file order.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            text = f.read()
    except FileNotFoundError as exc:
        if missing_ok:
            logger.debug("No existing document at '%s'; starting empty.", file_path)
            return OrderedKeyValueStore()
        raise FileSystemError(f"error reading '{file_path}': file does not exist") from exc
    except UnicodeDecodeError as exc:
        raise MalformedDocument(f"not valid UTF-8: {exc}", file_path) from exc
    except OSError as exc:
        raise FileSystemError(f"error reading '{file_path}': {exc}") from exc

    return decode_document(text, file_path)


def encode_string(value: str) -> str:
    """JSON-encode a single string, leaving HTML characters and non-ASCII text literal."""
    encoded = json.dumps(value, ensure_ascii=False)
    return encoded.replace('\N{LINE SEPARATOR}', '\\u2028').replace('\N{PARAGRAPH SEPARATOR}', '\\u2029')


def encode_document(store: OrderedKeyValueStore) -> str:
    """
    Encode a store as a JSON object, one entry per line with two-space indent.

    Keys are written in insertion order and the text ends with a newline.
    """
    lines = ["{\n"]
    last_index = len(store) - 1
    for index, (key, value) in enumerate(store.items()):
        lines.append(f"  {encode_string(key)}: {encode_string(value)}")
        if index < last_index:
            lines.append(",")
        lines.append("\n")
    lines.append("}\n")
    return ''.join(lines)


def write_json_file(file_path: str, store: OrderedKeyValueStore) -> None:
    """
    Write a store to disk, creating the parent directory if needed.

    The content goes to a temporary file in the same directory, which then
    replaces ``file_path``. A failed write leaves the previous document intact.

    Raises:
        MalformedDocument: If a value cannot be encoded as UTF-8 (e.g., a lone surrogate).
        FileSystemError: If the directory cannot be created or the file written.
    """
    try:
        data = encode_document(store).encode('utf-8')
    except UnicodeEncodeError as exc:
        raise MalformedDocument(f"content cannot be encoded as UTF-8: {exc}", file_path) from exc

    output_dir = os.path.dirname(file_path)
    if output_dir:
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as exc:
            raise FileSystemError(f"error creating output directory '{output_dir}': {exc}") from exc

    temp_file_path = None
    try:
        with tempfile.NamedTemporaryFile(
                mode='wb', delete=False, dir=output_dir or '.', prefix='.', suffix='.json.tmp') as temp_f:
            temp_file_path = temp_f.name
            temp_f.write(data)
        os.chmod(temp_file_path, 0o644)
        os.replace(temp_file_path, file_path)
    except OSError as exc:
        if temp_file_path and os.path.exists(temp_file_path):
            try:
                os.remove(temp_file_path)
            except OSError as _e:
                logger.warning("Could not delete temporary file '%s': %s", temp_file_path, _e)
        raise FileSystemError(f"error writing to file '{file_path}': {exc}") from exc
