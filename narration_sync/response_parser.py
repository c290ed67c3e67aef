"""Extract commentary timecodes from raw Gemini replies.

Gemini answers in one of several shapes depending on the prompt and on
whether it chose to call the ``set_timecodes`` function:

* a ``functionCall`` part carrying ``args.timecodes``
* a fenced ```json block
* a bare JSON array (or ``{"timecodes": [...]}`` object)
* free text lines such as ``00:03 What a save!``

Everything here is upstream of ``normalize_entries``; the functions only
locate the list, they never validate entries.
"""

import json
import re
from typing import Any

from .commentary_store import CommentaryFormatError, Fatal, ParseResult, normalize_entries

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```[a-zA-Z]*\s*([\s\S]*?)```")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_FREE_TEXT_LINE_RE = re.compile(
    r"^\s*[\[(*-]*\s*(\d{1,2}:\d{2}(?::\d{2})?)\s*[\])*]*\s*[-–—:]?\s*(.+?)\s*$"
)


def _unwrap_timecodes(parsed: Any) -> list:
    if isinstance(parsed, dict) and isinstance(parsed.get("timecodes"), list):
        return parsed["timecodes"]
    if isinstance(parsed, list):
        return parsed
    raise CommentaryFormatError("JSON reply does not contain a timecode list")


def _loads_lenient(text: str) -> Any:
    """``json.loads`` that tolerates trailing commas."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return json.loads(_TRAILING_COMMA_RE.sub(r"\1", text))


def parse_free_text(text: str) -> list[dict]:
    """Pick ``mm:ss text`` lines out of prose."""
    timecodes = []
    for line in text.splitlines():
        match = _FREE_TEXT_LINE_RE.match(line)
        if match:
            timecodes.append({"time": match.group(1), "text": match.group(2)})
    return timecodes


def extract_timecodes_from_text(text: str) -> list:
    """Find a timecode list in a text reply.

    Tries a ```json fence, then any fence, then the first JSON bracket,
    then free-text ``mm:ss`` lines.
    """
    raw = text.strip()

    blocks = _FENCED_JSON_RE.findall(raw) or _ANY_FENCE_RE.findall(raw)
    for block in blocks:
        try:
            return _unwrap_timecodes(_loads_lenient(block.strip()))
        except (json.JSONDecodeError, CommentaryFormatError):
            continue

    first_bracket = re.search(r"[\[{]", raw)
    if first_bracket:
        opener = raw[first_bracket.start()]
        closer = "]" if opener == "[" else "}"
        end = raw.rfind(closer)
        if end > first_bracket.start():
            try:
                return _unwrap_timecodes(_loads_lenient(raw[first_bracket.start(): end + 1]))
            except (json.JSONDecodeError, CommentaryFormatError):
                pass

    timecodes = parse_free_text(raw)
    if timecodes:
        return timecodes

    raise CommentaryFormatError("No JSON block, function call, or timecoded lines found in reply")


def extract_timecodes(response: Any) -> list:
    """Locate the timecode list in a Gemini ``generateContent`` response.

    Accepts the full response dict, a bare text reply, or an already
    extracted list.
    """
    if isinstance(response, list):
        return response
    if isinstance(response, str):
        return extract_timecodes_from_text(response)
    if not isinstance(response, dict):
        raise CommentaryFormatError(f"Unexpected response type {type(response).__name__}")

    candidates = response.get("candidates") or []
    texts: list[str] = []

    # Function calls win over text in any candidate/part
    for candidate in candidates:
        parts = (candidate.get("content") or {}).get("parts") or []
        for part in parts:
            call = part.get("functionCall") or {}
            args = call.get("args") or {}
            if isinstance(args.get("timecodes"), list):
                return args["timecodes"]
            if isinstance(part.get("text"), str):
                texts.append(part["text"])

    if not texts:
        raise CommentaryFormatError("Unexpected response format: no text or function call")

    return extract_timecodes_from_text("\n".join(texts))


def parse_commentary(response: Any) -> ParseResult:
    """Extract and normalize in one step."""
    try:
        items = extract_timecodes(response)
    except CommentaryFormatError as e:
        return Fatal(str(e))
    return normalize_entries(items)
