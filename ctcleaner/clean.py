"""
Cheat table cleaning pipeline.

Responsibilities:
- encoding detection + decode
- delimiter repair before parsing (optional)
- ID renumbering, removal of bloat and redundant default-valued elements
- script linearization (optional)
- serialization + whitespace compaction
"""

from __future__ import annotations

import base64
import hashlib
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from charset_normalizer import from_bytes
from lxml import etree

from .linearize import linearize_asm_field, linearize_lua_field
from .models import CleanOptions
from .repair import repair_delimiters
from .rules import (
    ASSEMBLER_SCRIPT_TAG,
    ID_TAG,
    LUA_SCRIPT_TAG,
    OUTPUT_ENCODING,
    REDUNDANT_DEFAULTS,
    SIGNATURE_TAG,
    STRUCTURES_TAG,
    USER_DEFINED_SYMBOLS_TAG,
)

logger = logging.getLogger(__name__)

_BLANK_RUN = re.compile(r"\s*\r?\n")


class TableParseError(ValueError):
    """The (possibly repaired) table text is not loadable XML."""


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def decode_table_bytes(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Decode table bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is dropped.
    - If decode fails, fall back to UTF-8, then UTF-8 with replacement characters.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    # A UTF-8 BOM settles the question, whatever the detector guessed.
    if raw.startswith(b"\xef\xbb\xbf"):
        decode_used = "utf-8-sig"

    decode_fallback = False
    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        decode_fallback = True
        try:
            text = raw.decode("utf-8-sig")
            decode_used = "utf-8-sig"
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"

    return text, {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
        "output": OUTPUT_ENCODING,
    }


def compact_newlines(text: str) -> str:
    """Collapse every whitespace run that contains a line break into one "\\n"."""
    return _BLANK_RUN.sub("\n", text)


def remove_extra_spaces(text: str) -> str:
    """Collapse runs of spaces to one space, except inside double quotes."""
    out: List[str] = []
    in_quotes = False
    last = ""
    for ch in text:
        if ch == '"':
            in_quotes = not in_quotes
        if not in_quotes and ch == " " and last == " ":
            continue
        out.append(ch)
        last = ch
    return "".join(out)


def _value(el: etree._Element) -> str:
    return "".join(el.itertext())


def _set_value(el: etree._Element, value: str) -> None:
    for child in list(el):
        el.remove(child)
    el.text = value


def _int_value(el: etree._Element) -> Optional[int]:
    try:
        return int(_value(el).strip())
    except ValueError:
        return None


def _drop(el: etree._Element) -> bool:
    parent = el.getparent()
    if parent is None:
        return False
    if el.tail:
        prev = el.getprevious()
        if prev is not None:
            prev.tail = (prev.tail or "") + el.tail
        else:
            parent.text = (parent.text or "") + el.tail
    parent.remove(el)
    return True


def _is_redundant(el: etree._Element, kind: str, default: Any, warnings: list) -> bool:
    if kind == "any":
        return True
    if kind == "blank":
        return not _value(el).strip()
    if kind == "str":
        return _value(el) == default

    number = _int_value(el)
    if number is None:
        warnings.append({
            "element": el.tag,
            "issue": "not_an_integer",
            "value": _value(el),
            "action": "kept",
        })
        return False
    return number == default


def load_table(text: str) -> etree._ElementTree:
    parser = etree.XMLParser(remove_blank_text=True, encoding="utf-8")
    try:
        root = etree.fromstring(text.encode("utf-8"), parser)
    except etree.XMLSyntaxError as e:
        raise TableParseError(str(e)) from e
    return root.getroottree()


def clean_table_text(text: str, options: CleanOptions) -> Tuple[str, Dict[str, Any], List[dict]]:
    """
    Run the cleaning pipeline over one table's text.

    Raises TableParseError when the text cannot be loaded, even after repair.
    """
    warnings: list[dict] = []
    steps: Dict[str, Any] = {}

    if options.repair:
        logger.info("Repairing...")
        repaired = repair_delimiters(text)
        steps["repair"] = {"changed": repaired != text}
        text = repaired

    tree = load_table(text)

    # Renumber IDs to get rid of needlessly high values.
    ids = 0
    for ids, el in enumerate(tree.iter(ID_TAG), start=1):
        el.text = str(ids)
    steps["ids"] = {"renumbered": ids}

    doomed: List[etree._Element] = []
    for enabled, tag, message in (
        (options.remove_signature, SIGNATURE_TAG, "Removing signature..."),
        (options.remove_structures, STRUCTURES_TAG, "Removing structures..."),
        (options.remove_user_defined_symbols, USER_DEFINED_SYMBOLS_TAG, "Removing user defined symbols..."),
    ):
        if enabled:
            logger.info(message)
            doomed.extend(tree.iter(tag))

    scripts = 0
    if options.linear_lua:
        logger.info("Linearizing LUA...")
        for tag, linearize in (
            (LUA_SCRIPT_TAG, linearize_lua_field),
            (ASSEMBLER_SCRIPT_TAG, linearize_asm_field),
        ):
            for el in list(tree.iter(tag)):
                _set_value(el, linearize(_value(el)))
                scripts += 1
        logger.debug("Linearized %d script fields", scripts)
    steps["linearize"] = {"enabled": options.linear_lua, "scripts": scripts}

    logger.info("Removing redundancies...")
    for tag, kind, default in REDUNDANT_DEFAULTS:
        doomed.extend(el for el in tree.iter(tag) if _is_redundant(el, kind, default, warnings))

    removed: Dict[str, int] = {}
    for el in doomed:
        if _drop(el):
            removed[el.tag] = removed.get(el.tag, 0) + 1
    steps["removed"] = removed

    text = etree.tostring(
        tree,
        xml_declaration=True,
        encoding=OUTPUT_ENCODING,
        pretty_print=options.no_linear_xml,
    ).decode(OUTPUT_ENCODING)

    if options.compact:
        logger.info("Compacting...")
        text = compact_newlines(text)
    steps["compact"] = options.compact

    if options.remove_extra_spaces:
        logger.info("Removing extra spaces...")
        text = remove_extra_spaces(text)
    steps["remove_extra_spaces"] = options.remove_extra_spaces

    for item in warnings:
        logger.warning("%s: %s (%r), %s", item["element"], item["issue"], item["value"], item["action"])

    return text, steps, warnings


def clean_table_bytes(raw: bytes, options: CleanOptions) -> Dict[str, Any]:
    """
    Decode, clean and re-encode one table.
    Returns a dict matching the API's response envelope.
    """
    text, enc_report = decode_table_bytes(raw)
    cleaned, steps, warnings = clean_table_text(text, options)
    steps["encoding"] = enc_report

    cleaned_bytes = cleaned.encode(OUTPUT_ENCODING)
    b64 = base64.b64encode(cleaned_bytes).decode("ascii")
    return {
        "cleaned_table": {
            "sha256": _sha256_hex(cleaned_bytes),
            "encoding": OUTPUT_ENCODING,
            "content_b64": b64,
        },
        "report": {
            "summary": {
                "ids_renumbered": steps["ids"]["renumbered"],
                "elements_removed": sum(steps["removed"].values()),
                "scripts_linearized": steps["linearize"]["scripts"],
                "warnings": len(warnings),
                "deterministic": True,
            },
            "steps": steps,
            "warnings": warnings,
        },
    }
