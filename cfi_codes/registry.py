"""
Classification table loader for cfi-codes.

Loads the category/group/attribute tables from cfi_codes/tables/*.yaml and
exposes them as frozen Pydantic models. A table file may define:

- attributes: map of domain id -> attribute domain (name, accessor field,
  legal letters). Ids are global across files, so shared domains such as
  ``form`` and ``not_applicable`` live once in common.yaml.
- categories: list of categories, each with its groups. A group names its
  four attribute domains (characters 3-6) by id.

Why YAML instead of hardcoded enums:
- The tables are domain data, and ISO 10962 revisions touch them far more
  often than the decoding logic.
- A reviewer can compare a table file side by side with the standard.
- Separation of classification knowledge (YAML) from codec logic (Python).

Every attribute domain contains ``X`` (Not applicable/undefined); it is
appended automatically when a table omits it. Categories marked
``reserved: true`` have no group tables yet: any group letter resolves to a
placeholder group whose domains accept any letter.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from cfi_codes.exceptions import RegistryError
from cfi_codes.models import CategoryCode

logger = logging.getLogger(__name__)

# Directory containing the table YAML files (sibling package)
_TABLES_DIR = Path(__file__).parent / "tables"

_LETTER_PATTERN = r"^[A-Z]$"
UNDEFINED = "X"
UNASSIGNED = "Unassigned"


def _is_letter(value: object) -> bool:
    return isinstance(value, str) and len(value) == 1 and "A" <= value <= "Z"


class AttributeValue(BaseModel):
    """One legal letter of an attribute domain."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., pattern=_LETTER_PATTERN)
    name: str
    description: str = ""


_UNDEFINED_VALUE = AttributeValue(code=UNDEFINED, name="Not applicable/undefined")


class AttributeDomain(BaseModel):
    """A closed set of letters for one attribute position of a group.

    ``field`` is the accessor name used by ``Code.attribute()`` and
    ``Code.describe()``; it is ``None`` for pure not-applicable slots.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    field: str | None = None
    values: tuple[AttributeValue, ...] = Field(default=(), validate_default=True)
    accepts_any: bool = False

    @field_validator("values")
    @classmethod
    def _ensure_undefined(
        cls, values: tuple[AttributeValue, ...]
    ) -> tuple[AttributeValue, ...]:
        """Reject duplicate letters and append X when the table omits it."""
        letters = [v.code for v in values]
        duplicates = sorted({c for c in letters if letters.count(c) > 1})
        if duplicates:
            raise ValueError(f"Duplicate attribute letters: {duplicates}")
        if UNDEFINED not in letters:
            values = values + (_UNDEFINED_VALUE,)
        return values

    @property
    def letters(self) -> tuple[str, ...]:
        return tuple(v.code for v in self.values)

    def lookup(self, letter: str) -> AttributeValue | None:
        """Return the value for *letter*, or None if it is not in the domain."""
        for value in self.values:
            if value.code == letter:
                return value
        if self.accepts_any and _is_letter(letter):
            return AttributeValue(code=letter, name=UNASSIGNED)
        return None

    def __getitem__(self, letter: str) -> AttributeValue:
        value = self.lookup(letter)
        if value is None:
            raise KeyError(letter)
        return value


UNASSIGNED_DOMAIN = AttributeDomain(
    id="unassigned",
    name=UNASSIGNED,
    description="Attribute of a category whose tables are not modelled yet.",
    accepts_any=True,
)


class GroupDef(BaseModel):
    """A group (character 2) with its four ordered attribute domains."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., pattern=_LETTER_PATTERN)
    name: str
    description: str = ""
    attributes: tuple[AttributeDomain, AttributeDomain, AttributeDomain, AttributeDomain]
    reserved: bool = False

    @model_validator(mode="after")
    def _check_unique_fields(self) -> GroupDef:
        fields = [d.field for d in self.attributes if d.field is not None]
        if len(fields) != len(set(fields)):
            raise ValueError(
                f"Group '{self.code}' uses the same accessor field twice: {fields}"
            )
        return self


@functools.lru_cache(maxsize=None)
def _unassigned_group(letter: str) -> GroupDef:
    """Placeholder group for a reserved category."""
    return GroupDef(
        code=letter,
        name=UNASSIGNED,
        reserved=True,
        attributes=(UNASSIGNED_DOMAIN,) * 4,
    )


class CategoryDef(BaseModel):
    """A category (character 1) and its closed set of groups."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., pattern=_LETTER_PATTERN)
    name: str
    description: str = ""
    groups: tuple[GroupDef, ...] = ()
    reserved: bool = False

    @model_validator(mode="after")
    def _check_groups(self) -> CategoryDef:
        letters = [g.code for g in self.groups]
        duplicates = sorted({c for c in letters if letters.count(c) > 1})
        if duplicates:
            raise ValueError(f"Category '{self.code}' defines groups twice: {duplicates}")
        if not self.groups and not self.reserved:
            raise ValueError(
                f"Category '{self.code}' has no groups. "
                "Mark it 'reserved: true' or add its group tables."
            )
        return self

    def group(self, letter: str) -> GroupDef | None:
        """Return the group for *letter*, or None if the category has none.

        Reserved categories resolve any letter to an Unassigned placeholder.
        """
        for group in self.groups:
            if group.code == letter:
                return group
        if self.reserved and _is_letter(letter):
            return _unassigned_group(letter)
        return None

    def __getitem__(self, letter: str) -> GroupDef:
        group = self.group(letter)
        if group is None:
            raise KeyError(letter)
        return group


class Registry(BaseModel):
    """All categories, one per CategoryCode member, in CategoryCode order."""

    model_config = ConfigDict(frozen=True)

    categories: tuple[CategoryDef, ...]

    def category(self, letter: str) -> CategoryDef | None:
        for category in self.categories:
            if category.code == letter:
                return category
        return None

    def __getitem__(self, letter: str) -> CategoryDef:
        category = self.category(letter)
        if category is None:
            raise KeyError(letter)
        return category

    def __len__(self) -> int:
        return len(self.categories)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _read_table_file(path: Path) -> dict[str, Any]:
    """Read one table YAML file into a raw dict."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise RegistryError(f"Invalid YAML in {path.name}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise RegistryError(
            f"{path.name} must contain a mapping with 'attributes' and/or 'categories'"
        )
    return raw


def _build_domain(domain_id: str, spec: dict[str, Any], path: Path) -> AttributeDomain:
    if not isinstance(spec, dict):
        raise RegistryError(f"Attribute domain '{domain_id}' in {path.name} must be a mapping")
    try:
        return AttributeDomain(id=domain_id, **spec)
    except ValidationError as exc:
        raise RegistryError(
            f"Invalid attribute domain '{domain_id}' in {path.name}: {exc}"
        ) from exc


def _resolve_group(
    category_code: str,
    spec: dict[str, Any],
    domains: dict[str, AttributeDomain],
    path: Path,
) -> dict[str, Any]:
    """Replace a group's domain ids with the loaded AttributeDomain models."""
    ids = spec.get("attributes") or []
    label = f"{category_code}{spec.get('code', '?')}"
    if len(ids) != 4:
        raise RegistryError(
            f"Group '{label}' in {path.name} must list exactly 4 attribute domains, "
            f"got {len(ids)}"
        )
    unknown = [domain_id for domain_id in ids if domain_id not in domains]
    if unknown:
        raise RegistryError(
            f"Group '{label}' in {path.name} references unknown attribute domains: {unknown}"
        )
    return {**spec, "attributes": tuple(domains[domain_id] for domain_id in ids)}


def _build_category(
    spec: dict[str, Any],
    domains: dict[str, AttributeDomain],
    path: Path,
) -> CategoryDef:
    code = spec.get("code")
    if code not in {c.value for c in CategoryCode}:
        raise RegistryError(f"Unknown category letter {code!r} in {path.name}")
    groups = [_resolve_group(code, g, domains, path) for g in spec.get("groups") or []]
    try:
        return CategoryDef(**{**spec, "groups": tuple(groups)})
    except ValidationError as exc:
        raise RegistryError(f"Invalid category '{code}' in {path.name}: {exc}") from exc


def load_registry(tables_dir: str | Path | None = None) -> Registry:
    """Load and validate all table YAML files.

    Two passes: attribute domains from every file first, then categories,
    so a group may reference a domain defined in any file.

    Args:
        tables_dir: Directory to scan for .yaml files. Defaults to
            the built-in tables/ directory.

    Returns:
        A Registry with one CategoryDef per CategoryCode member.

    Raises:
        RegistryError: If a file is malformed, a domain or letter is defined
            twice, a reference cannot be resolved, or a category is missing.
    """
    tables_dir = Path(tables_dir) if tables_dir is not None else _TABLES_DIR
    paths = sorted(tables_dir.glob("*.yaml"))
    if not paths:
        raise RegistryError(f"No table YAML files found in {tables_dir}")
    raw_files = [(path, _read_table_file(path)) for path in paths]

    # Pass 1: attribute domains
    domains: dict[str, AttributeDomain] = {}
    for path, raw in raw_files:
        for domain_id, spec in (raw.get("attributes") or {}).items():
            if domain_id in domains:
                raise RegistryError(
                    f"Attribute domain '{domain_id}' defined twice (again in {path.name})"
                )
            domains[domain_id] = _build_domain(domain_id, spec, path)

    # Pass 2: categories
    by_code: dict[str, CategoryDef] = {}
    for path, raw in raw_files:
        for spec in raw.get("categories") or []:
            category = _build_category(spec, domains, path)
            if category.code in by_code:
                raise RegistryError(
                    f"Category '{category.code}' defined twice (again in {path.name})"
                )
            by_code[category.code] = category
        logger.debug("Loaded tables from %s", path)

    missing = [c.value for c in CategoryCode if c.value not in by_code]
    if missing:
        raise RegistryError(f"Categories missing from the tables: {missing}")

    registry = Registry(categories=tuple(by_code[c.value] for c in CategoryCode))
    logger.info(
        "Loaded %d categories, %d groups, %d attribute domains from %s",
        len(registry),
        sum(len(c.groups) for c in registry.categories),
        len(domains),
        tables_dir,
    )
    return registry


@functools.lru_cache(maxsize=1)
def default_registry() -> Registry:
    """The registry built from the shipped tables, loaded once per process."""
    return load_registry()
