"""
Greek to Latin (Greeklish) transliteration for safe file names.

Usage:
    to_greeklish("ΑΘΗΝΑ")                            # "ATHINA"
    create_safe_filename("ΠΕΛΑΤΗΣ ΑΕ", "BOM", 3)       # "PELATIS_AE - BOM - v3.xlsx"
"""

import re

# Applied before single letters, in this order
DIGRAPHS: tuple[tuple[str, str], ...] = (
    ("ΑΥ", "AU"), ("ΕΥ", "EU"), ("ΟΥ", "OU"),
    ("αυ", "au"), ("ευ", "eu"), ("ου", "ou"),
    ("ΑΎ", "AU"), ("ΕΎ", "EU"), ("ΟΎ", "OU"),
    ("αύ", "au"), ("εύ", "eu"), ("ού", "ou"),
    ("ΜΠ", "B"), ("μπ", "b"),
    ("ΝΤ", "D"), ("ντ", "d"),
    ("ΓΚ", "G"), ("γκ", "g"),
    ("ΓΓ", "NG"), ("γγ", "ng"),
    ("ΤΣ", "TS"), ("τσ", "ts"),
    ("ΤΖ", "TZ"), ("τζ", "tz"),
)

LETTERS: dict[str, str] = {
    "Α": "A", "Β": "B", "Γ": "G", "Δ": "D", "Ε": "E", "Ζ": "Z", "Η": "I",
    "Θ": "TH", "Ι": "I", "Κ": "K", "Λ": "L", "Μ": "M", "Ν": "N", "Ξ": "X",
    "Ο": "O", "Π": "P", "Ρ": "R", "Σ": "S", "Τ": "T", "Υ": "Y", "Φ": "F",
    "Χ": "CH", "Ψ": "PS", "Ω": "O",
    "α": "a", "β": "b", "γ": "g", "δ": "d", "ε": "e", "ζ": "z", "η": "i",
    "θ": "th", "ι": "i", "κ": "k", "λ": "l", "μ": "m", "ν": "n", "ξ": "x",
    "ο": "o", "π": "p", "ρ": "r", "σ": "s", "ς": "s", "τ": "t", "υ": "y",
    "φ": "f", "χ": "ch", "ψ": "ps", "ω": "o",
    "Ά": "A", "Έ": "E", "Ή": "I", "Ί": "I", "Ό": "O", "Ύ": "Y", "Ώ": "O",
    "ά": "a", "έ": "e", "ή": "i", "ί": "i", "ό": "o", "ύ": "y", "ώ": "o",
    "Ϊ": "I", "Ϋ": "Y", "ϊ": "i", "ϋ": "y", "ΐ": "i", "ΰ": "y",
}

_UNSAFE = re.compile(r"[^a-zA-Z0-9\s\-_]")
_SEPARATOR_RUNS = re.compile(r"[\s_]+")
_EDGE_SEPARATORS = re.compile(r"^[\s\-_]+|[\s\-_]+$")


def to_greeklish(text: str | None) -> str:
    """Transliterate Greek characters to Latin; other characters pass through."""
    if not text:
        return ""
    for greek, latin in DIGRAPHS:
        text = text.replace(greek, latin)
    return "".join(LETTERS.get(char, char) for char in text)


def sanitize_filename(
    filename: str | None,
    preserve_extension: bool = True,
    max_length: int = 255,
    replacement: str = "_",
) -> str:
    """
    Make a file name safe for storage paths and downloads.

    Greek is transliterated, characters outside letters, digits, spaces,
    hyphens and underscores are replaced, runs of whitespace/underscores
    collapse to a single replacement, and leading/trailing separators are
    trimmed. The extension is kept as-is when `preserve_extension` is set.
    """
    if not filename:
        return "unnamed"

    name, extension = filename, ""
    if preserve_extension:
        dot = filename.rfind(".")
        if dot > 0:
            name, extension = filename[:dot], filename[dot:]

    name = to_greeklish(name)
    name = _UNSAFE.sub(replacement, name)
    name = _SEPARATOR_RUNS.sub(replacement, name)
    name = _EDGE_SEPARATORS.sub("", name)
    if not name:
        name = "unnamed"

    if len(name) + len(extension) > max_length:
        name = name[: max_length - len(extension)]
    return name + extension


def create_safe_filename(
    entity_name: str,
    document_type: str,
    version: int | str | None = None,
    extension: str = ".xlsx",
) -> str:
    """Join sanitized entity name, document type and optional version with " - "."""
    parts = [
        sanitize_filename(entity_name, preserve_extension=False),
        sanitize_filename(document_type, preserve_extension=False),
    ]
    if version is not None:
        parts.append(f"v{version}")
    if extension and not extension.startswith("."):
        extension = f".{extension}"
    return " - ".join(parts) + extension
