"""Best-effort cleanup of LLM-drafted and stored free text before PDF layout.

Everything here is heuristic string munging over a fixed vocabulary of detail
labels (Location, Cost, Hours, ...). No uniqueness or completeness guarantee is
made over which labels are found; callers must tolerate empty results.
"""

import re
import unicodedata
from dataclasses import dataclass

# Canonical detail label -> accepted spellings (matched case-insensitively)
DETAIL_LABELS: dict[str, tuple[str, ...]] = {
    "Description": ("description", "details", "overview"),
    "Location": ("location", "address", "where"),
    "Cost": ("cost", "price", "price range", "fee", "entry fee", "admission"),
    "Hours": ("hours", "opening hours", "times", "open"),
    "Website": ("website", "web", "url"),
    "Contact": ("contact", "phone", "email"),
    "Reservation": ("reservation", "reservations", "booking"),
    "Tip": ("tip", "tips", "local tip", "insider tip", "note"),
    "Duration": ("duration", "time needed", "time required"),
    "Transport": ("transport", "transportation", "getting there"),
    "Cuisine": ("cuisine", "food", "dishes"),
}

_ALIAS_TO_LABEL = {alias: label for label, aliases in DETAIL_LABELS.items() for alias in aliases}

# Longest aliases first so "opening hours" wins over "open"
_ALIAS_PATTERN = "|".join(
    re.escape(alias).replace(r"\ ", r"\s+")
    for alias in sorted(_ALIAS_TO_LABEL, key=len, reverse=True)
)

_BULLET_RE = re.compile(r"^\s*[•\-*]\s*")
_LABEL_LINE_RE = re.compile(
    rf"^\s*(?:[•\-*]\s*)?(?P<label>{_ALIAS_PATTERN})\s*:\s*(?P<value>.*)$", re.IGNORECASE
)
_LEADING_LABEL_RE = re.compile(rf"^\s*(?:[•\-*]\s*)?(?:{_ALIAS_PATTERN})\s*:\s*", re.IGNORECASE)
# Any "Word:" or "Two Words:" header, known label or not
_GENERIC_LABEL_RE = re.compile(r"^\s*(?:[•\-*]\s*)?[A-Z][A-Za-z]+(?: [A-Za-z]+)?\s*:")

# Schema-formatted output puts these labels at line starts
_SCHEMA_RE = re.compile(
    r"^\s*(?:[•\-*]\s*)?(?:Description|Price Range|Cost|Address|Opening Hours|Location):",
    re.MULTILINE,
)

# Labels that get a line of their own in unstructured text
_LINE_LABELS = (
    "Opening Hours|Price Range|Location|Address|Cost|Price|Hours|Website|Phone|Tip|Note|"
    "Reservation|Admission|Fee"
)
_LABEL_BREAK_RE = re.compile(
    rf"(?<=\S)[ \t]*\b(?<!Opening )(?<!Price )(?=(?:{_LINE_LABELS}):)"
)
_GLUED_LABEL_RE = re.compile(r"(?<=[a-z.,;)])(?=(?:Location|Address|Cost|Price|Hours):)")

# Lines dropped when recovering narrative text from unstructured input
_NARRATIVE_NOISE = (
    re.compile(r"^\s*(?:Location|Address)\s*:.*(?:\n|$)", re.MULTILINE | re.IGNORECASE),
    re.compile(
        r"^\s*(?:Cost|Price Range|Price|Fee|Admission)\s*:.*(?:\n|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(
        r"^\s*(?:Opening Hours|Hours|Times|Open)\s*:.*(?:\n|$)", re.MULTILINE | re.IGNORECASE
    ),
    re.compile(
        r"^\s*(?:Website|Phone|Reservation|Booking|Contact)\s*:.*(?:\n|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
)

# Inline detail fallbacks
_LOCATED_AT_RE = re.compile(r"\blocated\s+(?:at|in|on)\s+([^.,;\n]+)", re.IGNORECASE)
_PAREN_PLACE_RE = re.compile(r"\(([A-Z][^()\n]{2,80})\)")
_AMOUNT_RE = re.compile(
    r"(?:[$€£]\s?\d[\d,.]*(?:\s?(?:-|–|to)\s?[$€£]?\d[\d,.]*)?"
    r"|\b\d[\d,.]*\s?(?:USD|EUR|GBP|CAD|dollars|euros)\b)",
    re.IGNORECASE,
)
_OPENING_TIMES_RE = re.compile(
    r"\b(?:open|opens|hours?)\b[^\d\n]{0,12}"
    r"(\d{1,2}(?::\d{2})?\s*(?:am|pm)?\s*(?:-|–|to)\s*\d{1,2}(?::\d{2})?\s*(?:am|pm)?)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class TextDetail:
    """Labelled sub-field pulled out of free text."""

    label: str
    value: str


def _canonical_label(raw: str) -> str:
    return _ALIAS_TO_LABEL[re.sub(r"\s+", " ", raw.strip().lower())]


def _collapse_blank_lines(text: str) -> str:
    lines = [line.rstrip() for line in text.split("\n")]
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()


def _strip_leading_labels(text: str) -> str:
    """Remove label tokens from the start until none remain."""
    previous = None
    while previous != text:
        previous = text
        text = _LEADING_LABEL_RE.sub("", text, count=1).strip()
    return text


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def sanitize_llm_text(text: str) -> str:
    """Normalize detail labels and line structure of drafted text.

    Schema-like input (labels at line starts) goes through the structured cleanup;
    anything else gets each recognised label moved onto its own line.

    Args:
        text: Raw drafted or stored text

    Returns:
        Cleaned text, possibly empty
    """
    if not text or not text.strip():
        return ""

    text = _normalize_newlines(text)
    if _SCHEMA_RE.search(text):
        return _clean_structured_text(text)

    # Words split across a single line break are rejoined; paragraph breaks survive
    text = re.sub(r"(\w)[ \t]*\n(?=\w)", r"\1 ", text)
    text = _GLUED_LABEL_RE.sub(" ", text)
    text = _LABEL_BREAK_RE.sub("\n", text)
    return _collapse_blank_lines(text)


def _clean_structured_text(text: str) -> str:
    cleaned: list[str] = []
    for raw in text.split("\n"):
        line = _BULLET_RE.sub("", raw.strip())
        match = _LABEL_LINE_RE.match(line)
        if match:
            label = re.sub(r"\s+", " ", match["label"]).title()
            value = match["value"].strip()
            # "Cost: Cost: $10" -> "Cost: $10"
            value = re.sub(rf"^{re.escape(label)}\s*:\s*", "", value, flags=re.IGNORECASE)
            line = f"{label}: {value}".rstrip()
        cleaned.append(line)
    return _collapse_blank_lines("\n".join(cleaned))


def clean_activity_text(text: str) -> str:
    """Recover the narrative part of an activity description.

    Fallback chain for label-formatted input: an explicit Description/Details block,
    then the narrative lines before the first label, then the first non-label line,
    then the first line with its label removed. Unformatted input loses its
    location/cost/hours/contact lines and falls back to the first sentence.

    The result never starts with a detail label such as ``Location:``.

    Args:
        text: Free text, possibly mixing narrative and labelled details

    Returns:
        Narrative text, or "" when nothing is left
    """
    if not text or not text.strip():
        return ""

    original = _normalize_newlines(text).strip()
    lines = original.split("\n")

    if any(_LABEL_LINE_RE.match(line) for line in lines):
        description = _description_block(lines)
        if description:
            return _strip_leading_labels(description)

        leading = _leading_narrative(lines)
        if leading:
            return _strip_leading_labels(leading)

        for line in lines:
            if line.strip() and not _GENERIC_LABEL_RE.match(line):
                return _strip_leading_labels(_BULLET_RE.sub("", line.strip()))

        return _strip_leading_labels(lines[0])

    narrative = original
    for pattern in _NARRATIVE_NOISE:
        narrative = pattern.sub("", narrative)
    narrative = _BULLET_RE.sub("", narrative).strip()
    if not narrative:
        narrative = re.split(r"\.\s+", original)[0]
    return _strip_leading_labels(narrative)


def _description_block(lines: list[str]) -> str | None:
    for index, line in enumerate(lines):
        match = _LABEL_LINE_RE.match(line)
        if not match or _canonical_label(match["label"]) != "Description":
            continue
        parts = [match["value"].strip()]
        for follow in lines[index + 1 :]:
            if not follow.strip() or _GENERIC_LABEL_RE.match(follow):
                break
            parts.append(follow.strip())
        block = " ".join(part for part in parts if part)
        if block:
            return block
    return None


def _leading_narrative(lines: list[str]) -> str | None:
    if _BULLET_RE.match(lines[0]):
        return None
    collected = []
    for line in lines:
        if _GENERIC_LABEL_RE.match(line) or _LABEL_LINE_RE.match(line):
            break
        collected.append(line.strip())
    joined = " ".join(part for part in collected if part)
    return joined or None


def extract_details(text: str) -> list[TextDetail]:
    """Pull labelled sub-fields out of free text.

    Label lines start a detail; following non-blank lines that are not themselves
    labels or bullets are joined onto it. Location, cost and opening times are
    then looked for inline when no label supplied them. The first occurrence of
    each label wins.

    Args:
        text: Free text with optional "Label: value" lines

    Returns:
        Details in order of appearance
    """
    if not text or not text.strip():
        return []

    found: list[TextDetail] = []
    label: str | None = None
    parts: list[str] = []

    def flush() -> None:
        value = " ".join(part for part in parts if part).strip()
        if label and value:
            found.append(TextDetail(label=label, value=value))

    for raw in _normalize_newlines(text).split("\n"):
        match = _LABEL_LINE_RE.match(raw)
        if match:
            flush()
            label = _canonical_label(match["label"])
            parts = [match["value"].strip()]
        elif label and raw.strip() and not (_GENERIC_LABEL_RE.match(raw) or _BULLET_RE.match(raw)):
            parts.append(raw.strip())
        else:
            flush()
            label, parts = None, []
    flush()

    seen = {detail.label for detail in found}
    if "Location" not in seen:
        located = _LOCATED_AT_RE.search(text) or _PAREN_PLACE_RE.search(text)
        if located:
            found.append(TextDetail(label="Location", value=located.group(1).strip()))
    if "Cost" not in seen:
        amount = _AMOUNT_RE.search(text)
        if amount:
            found.append(TextDetail(label="Cost", value=amount.group(0).strip()))
    if "Hours" not in seen:
        times = _OPENING_TIMES_RE.search(text)
        if times:
            found.append(TextDetail(label="Hours", value=times.group(1).strip()))

    unique: list[TextDetail] = []
    labels: set[str] = set()
    for detail in found:
        if detail.label not in labels:
            labels.add(detail.label)
            unique.append(detail)
    return unique


def strip_markdown(text: str) -> str:
    """Remove emphasis markers, code fences and quotes around labels.

    Headings (``#``) are kept for the guide renderer; ``* item`` bullets become
    ``- item``.
    """
    if not text:
        return ""
    text = _normalize_newlines(text)
    text = re.sub(r"^\s*```\w*\s*$", "", text, flags=re.MULTILINE)
    text = text.replace("**", "").replace("__", "")
    text = re.sub(r"^(\s*)\*\s+", r"\1- ", text, flags=re.MULTILINE)
    text = text.replace("*", "")
    text = re.sub(r"[\"“”']([A-Z][\w ]{0,30})[\"“”']\s*:", r"\1:", text)
    return _collapse_blank_lines(text)


def to_pdf_safe(text: str) -> str:
    """Fold text into the WinAnsi character set used by the standard PDF fonts."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text)
    return text.encode("cp1252", "replace").decode("cp1252")
