"""
The CFI code value type.

A ``Code`` holds the resolved category, group and the four attribute
values, not bare letters. Construction checks that the group belongs to
the category and that every attribute value belongs to the domain
registered for its position, so a ``Code`` that exists is always
encodable. Codes are frozen; ``dataclasses.replace`` gives a new,
re-validated value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from cfi_codes.exceptions import UnknownAttributeError, UnknownGroupError

if TYPE_CHECKING:
    from cfi_codes.registry import AttributeValue, CategoryDef, GroupDef


class CategoryCode(str, Enum):
    """Category letters (character 1) of ISO 10962."""

    EQUITY = "E"
    DEBT = "D"
    CIV = "C"
    ENTITLEMENT = "R"
    LISTED_OPTION = "O"
    FUTURE = "F"
    SWAP = "S"
    NON_LISTED_OPTION = "H"
    SPOT = "I"
    FORWARD = "J"
    STRATEGY = "K"
    FINANCING = "L"
    REFERENTIAL = "T"
    OTHER = "M"


@dataclass(frozen=True)
class Code:
    """A decoded CFI code: category, group and four attribute values."""

    category: CategoryDef
    group: GroupDef
    attributes: tuple[AttributeValue, AttributeValue, AttributeValue, AttributeValue]

    def __post_init__(self) -> None:
        # registry imports CategoryCode from this module
        from cfi_codes.registry import AttributeValue, CategoryDef, GroupDef

        if not isinstance(self.category, CategoryDef):
            raise TypeError(
                f"Code category must be a CategoryDef, got {type(self.category).__name__}"
            )
        if not isinstance(self.group, GroupDef):
            raise TypeError(f"Code group must be a GroupDef, got {type(self.group).__name__}")
        object.__setattr__(self, "attributes", tuple(self.attributes))
        if len(self.attributes) != 4:
            raise TypeError(
                f"Code takes exactly 4 attribute values, got {len(self.attributes)}"
            )
        bad = [type(v).__name__ for v in self.attributes if not isinstance(v, AttributeValue)]
        if bad:
            raise TypeError(f"Code attributes must be AttributeValue instances, got {bad}")
        text = str(self)
        if self.category.group(self.group.code) != self.group:
            raise UnknownGroupError(
                f"'{self.group.code}' ({self.group.name}) is not a group of "
                f"category '{self.category.code}' ({self.category.name})",
                text,
                2,
            )
        for position, (domain, value) in enumerate(
            zip(self.group.attributes, self.attributes), start=3
        ):
            if domain.lookup(value.code) != value:
                raise UnknownAttributeError(
                    f"'{value.code}' ({value.name}) is not a value of "
                    f"{domain.name} at position {position}",
                    text,
                    position,
                )

    # -- Accessors -----------------------------------------------------------

    @property
    def kind(self) -> CategoryCode:
        return CategoryCode(self.category.code)

    @property
    def attr1(self) -> AttributeValue:
        return self.attributes[0]

    @property
    def attr2(self) -> AttributeValue:
        return self.attributes[1]

    @property
    def attr3(self) -> AttributeValue:
        return self.attributes[2]

    @property
    def attr4(self) -> AttributeValue:
        return self.attributes[3]

    def attribute(self, key: str | int) -> AttributeValue:
        """Look up an attribute by accessor field name or character position (3-6).

        Raises:
            KeyError: If the group has no attribute with that field name
                or the position is outside 3-6.
        """
        if isinstance(key, int):
            if not 3 <= key <= 6:
                raise KeyError(key)
            return self.attributes[key - 3]
        for domain, value in zip(self.group.attributes, self.attributes):
            if domain.field == key:
                return value
        raise KeyError(key)

    def fields(self) -> dict[str, AttributeValue]:
        """Named attributes of this code's group, in position order."""
        return {
            domain.field: value
            for domain, value in zip(self.group.attributes, self.attributes)
            if domain.field is not None
        }

    def describe(self) -> dict[str, str]:
        """Human-readable breakdown, one entry per character.

        Keys are ``code``, ``category``, ``group`` and then each slot's
        field name, or ``attr<n>`` for slots without one.
        """
        result = {
            "code": str(self),
            "category": self.category.name,
            "group": self.group.name,
        }
        for n, (domain, value) in enumerate(zip(self.group.attributes, self.attributes), start=1):
            result[domain.field or f"attr{n}"] = value.name
        return result

    @property
    def label(self) -> str:
        """e.g. ``Equities / Common/ordinary shares / Voting / ... / Registered``."""
        parts = [self.category.name, self.group.name]
        parts.extend(value.name for value in self.attributes)
        return " / ".join(parts)

    def __str__(self) -> str:
        return self.category.code + self.group.code + "".join(v.code for v in self.attributes)

    def __repr__(self) -> str:
        return f"Code('{self}')"
