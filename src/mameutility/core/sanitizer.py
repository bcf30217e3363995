"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/sanitizer.py
Turns arbitrary catalog text into filesystem-safe names and clean XML values.
"""

import os
import re
from functools import lru_cache
from typing import Optional

from mameutility.core.config import ProcessingConfig

# Pre-compiled regex patterns (performance optimization)
_PATTERN_INVALID_FILENAME = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_PATTERN_MANUFACTURER_STRIP = re.compile(r'[<>:"/\\|?*]')
_PATTERN_WHITESPACE = re.compile(r'\s+')
_PATTERN_PATH_SEPARATOR = re.compile(r'[\\/]')

_AMP_ENTITY = "&amp;"

RESERVED_DEVICE_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)


def _collapse_whitespace(text: str) -> str:
    return _PATTERN_WHITESPACE.sub(" ", text).strip()


def _decode_ampersand(text: str) -> str:
    # Repeat until stable so "&amp;amp;" cannot survive a single pass
    while _AMP_ENTITY in text:
        text = text.replace(_AMP_ENTITY, "&")
    return text


@lru_cache(maxsize=16384)
def sanitize_for_file_name(text: Optional[str], default: str = ProcessingConfig.DEFAULT_FILE_NAME) -> str:
    """
    Sanitize a string for use as a file name.

    Rules:
    - Replace characters invalid in file names (<>:"/\\|?* and control chars) with "_"
    - Collapse runs of whitespace to one space and trim
    - Decode "&amp;" to "&"
    - Append "_" to reserved device names (CON, PRN, AUX, NUL, COM1-9, LPT1-9), case-insensitive
    - Return `default` if nothing is left

    Examples:
        "Capcom / Mitsubishi" → "Capcom _ Mitsubishi"
        "com1" → "com1_"
        "   " → "Untitled"
    """
    if text is None or not text.strip():
        return default

    result = _PATTERN_INVALID_FILENAME.sub("_", text)
    result = _collapse_whitespace(result)
    result = _decode_ampersand(result)

    if result.upper() in RESERVED_DEVICE_NAMES:
        result += "_"

    if not result:
        return default
    return result


def sanitize_for_xml_value(text: Optional[str]) -> Optional[str]:
    """
    Clean a string for use as an XML element value: collapse whitespace and
    decode "&amp;". Empty or missing input is returned unchanged.
    """
    if not text:
        return text
    return _decode_ampersand(_collapse_whitespace(text))


def strip_manufacturer_chars(manufacturer: str) -> str:
    """
    Manufacturer key used for both the bootleg exclusion check and the output file name:
    drop <>:"/\\|?* and spell out the literal "unknown".

        "<unknown>" → "UnknownManufacturer"
    """
    stripped = _PATTERN_MANUFACTURER_STRIP.sub("", manufacturer)
    return stripped.replace("unknown", "UnknownManufacturer")


def manufacturer_file_key(manufacturer: str) -> str:
    return sanitize_for_file_name(strip_manufacturer_chars(manufacturer))


def year_file_key(year: str) -> str:
    """"19??" → "19XX". The "?" survives as the grouping key; only the file name changes."""
    return sanitize_for_file_name(year.replace("?", "X"))


def source_file_key(source_file: str) -> str:
    """"capcom/cps1.cpp" → "cps1"."""
    base_name = _PATTERN_PATH_SEPARATOR.split(source_file)[-1]
    stem, _ = os.path.splitext(base_name)
    return sanitize_for_file_name(stem)


def contains_ci(text: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test that treats None as empty."""
    return bool(text) and needle.lower() in text.lower()
