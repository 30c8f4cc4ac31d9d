"""
Text <-> Code conversion.

decode() is the single entry point from text: it validates structure
first (length, A-Z only) and only then interprets the letters, left to
right, against the registry. The first failure is raised; there is no
partial result. encode() is the inverse and cannot fail.
"""

from __future__ import annotations

import logging

from cfi_codes.exceptions import (
    DecodeError,
    StructuralError,
    UnknownAttributeError,
    UnknownCategoryError,
    UnknownGroupError,
)
from cfi_codes.models import Code
from cfi_codes.registry import Registry, default_registry

logger = logging.getLogger(__name__)

CFI_LENGTH = 6


def _check_structure(text: str) -> None:
    """Raise StructuralError unless *text* is exactly 6 letters A-Z."""
    if len(text) != CFI_LENGTH:
        # First missing character, or the first extra one
        position = len(text) + 1 if len(text) < CFI_LENGTH else CFI_LENGTH + 1
        raise StructuralError(
            f"A CFI code has {CFI_LENGTH} characters, got {len(text)}: {text!r}",
            text,
            position,
        )
    bad = tuple(i for i, ch in enumerate(text, start=1) if not "A" <= ch <= "Z")
    if bad:
        raise StructuralError(
            f"A CFI code contains only uppercase letters A-Z; "
            f"invalid character(s) at position(s) {list(bad)}: {text!r}",
            text,
            bad[0],
            bad,
        )


def is_well_formed(text: object) -> bool:
    """True if *text* is 6 uppercase ASCII letters. Does not consult the tables."""
    if not isinstance(text, str):
        return False
    try:
        _check_structure(text)
    except StructuralError:
        return False
    return True


def decode(text: str, registry: Registry | None = None) -> Code:
    """Parse a 6-character CFI code.

    Args:
        text: The code, e.g. ``"ESVUFR"``. No trimming or case folding
            is applied.
        registry: Tables to decode against. Defaults to the shipped tables.

    Returns:
        The decoded Code.

    Raises:
        TypeError: If *text* is not a str.
        StructuralError: Wrong length or a character outside A-Z.
        UnknownCategoryError: Character 1 is not a category.
        UnknownGroupError: Character 2 is not a group of that category.
        UnknownAttributeError: A character 3-6 is outside its domain.
    """
    if not isinstance(text, str):
        raise TypeError(f"decode() expects str, got {type(text).__name__}")
    _check_structure(text)
    if registry is None:
        registry = default_registry()

    category = registry.category(text[0])
    if category is None:
        raise UnknownCategoryError(f"Unknown category '{text[0]}' in {text!r}", text, 1)

    group = category.group(text[1])
    if group is None:
        raise UnknownGroupError(
            f"Unknown group '{text[1]}' for category '{category.code}' "
            f"({category.name}) in {text!r}; "
            f"expected one of {[g.code for g in category.groups]}",
            text,
            2,
        )

    values = []
    for position, (domain, letter) in enumerate(zip(group.attributes, text[2:]), start=3):
        value = domain.lookup(letter)
        if value is None:
            raise UnknownAttributeError(
                f"Invalid {domain.name} '{letter}' at position {position} for "
                f"{category.name} / {group.name} in {text!r}; "
                f"expected one of {list(domain.letters)}",
                text,
                position,
            )
        values.append(value)

    code = Code(category, group, tuple(values))
    logger.debug("Decoded %s -> %s", text, code.label)
    return code


def encode(code: Code) -> str:
    """Return the 6-character text of *code*."""
    if not isinstance(code, Code):
        raise TypeError(f"encode() expects Code, got {type(code).__name__}")
    return str(code)


def is_valid(text: object, registry: Registry | None = None) -> bool:
    """True if *text* decodes without error."""
    if not isinstance(text, str):
        return False
    try:
        decode(text, registry)
    except DecodeError:
        return False
    return True
