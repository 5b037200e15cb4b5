"""Parameter reference catalog.

The catalog is a JSON file keyed by parameter name::

    {
      "Mdisk": {"desc": "disk mass", "type": "real", "default": "0.01",
                "unit": "Msun", "wiki": ["DiskMass.md"]},
      ...
    }

Two legacy layouts are normalized into the same mapping at load time: a
top-level array of records, and ``{"parameters": [records]}``. Legacy
records carry the name inline and may spell the description ``description``.

Missing fields degrade to empty values; only an unreadable source or a
structurally malformed one raises ``CatalogLoadError``.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import orjson

from prodimo_assist.io_utils import load_json

log = logging.getLogger(__name__)

# Reference data writes "-" for dimensionless parameters.
NO_UNIT = "-"


class CatalogLoadError(RuntimeError):
    """Raised when the parameter catalog source is missing or malformed."""


@dataclass(frozen=True, slots=True)
class ParameterDefinition:
    """Reference entry for one parameter."""

    name: str
    type: str
    default: str
    unit: str
    description: str
    wiki_references: tuple[str, ...] = ()

    @property
    def has_unit(self) -> bool:
        unit = self.unit.strip()
        return bool(unit) and unit != NO_UNIT


class ParameterCatalog:
    """Read-only mapping from parameter name to definition.

    ``generation`` identifies one load of the source; caches built from a
    catalog key on it so a reload never serves stale entries.
    """

    def __init__(
        self,
        definitions: dict[str, ParameterDefinition],
        *,
        generation: int = 0,
    ) -> None:
        self._definitions = dict(definitions)
        self.generation = generation

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __repr__(self) -> str:
        return f"ParameterCatalog({len(self)} entries, generation={self.generation})"

    def lookup(self, name: str) -> ParameterDefinition | None:
        return self._definitions.get(name)

    def entries(self) -> Iterator[tuple[str, ParameterDefinition]]:
        """Iterate ``(name, definition)`` pairs in source order.

        Each call returns a fresh iterator.
        """
        return iter(self._definitions.items())


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return ".true." if value else ".false."
    return str(value)


def _wiki(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, list):
        return tuple(str(v) for v in value if v)
    return ()


def _definition(name: str, record: Any) -> ParameterDefinition:
    if not isinstance(record, dict):
        raise CatalogLoadError(
            f"Catalog entry {name!r} must be an object, got {type(record).__name__}"
        )
    desc = record.get("desc")
    if desc is None:
        desc = record.get("description")
    return ParameterDefinition(
        name=name,
        type=_text(record.get("type")),
        default=_text(record.get("default")),
        unit=_text(record.get("unit")),
        description=_text(desc),
        wiki_references=_wiki(record.get("wiki")),
    )


def _from_records(records: list[Any]) -> dict[str, ParameterDefinition]:
    definitions: dict[str, ParameterDefinition] = {}
    for i, record in enumerate(records):
        if not isinstance(record, dict) or not record.get("name"):
            raise CatalogLoadError(f"Catalog record {i} has no parameter name")
        name = str(record["name"])
        definitions[name] = _definition(name, record)
    return definitions


def parse_catalog(raw: Any) -> dict[str, ParameterDefinition]:
    """Normalize decoded catalog JSON into a name -> definition mapping."""
    if isinstance(raw, list):
        return _from_records(raw)
    if not isinstance(raw, dict):
        raise CatalogLoadError(
            f"Catalog must be an object or array, got {type(raw).__name__}"
        )
    legacy = raw.get("parameters")
    if isinstance(legacy, list):
        return _from_records(legacy)
    return {str(name): _definition(str(name), record) for name, record in raw.items()}


def load_catalog(source: Path, *, generation: int = 0) -> ParameterCatalog:
    """Read and normalize the catalog at *source*.

    Raises:
        CatalogLoadError: if the file cannot be read or is not a valid catalog.
    """
    try:
        raw = load_json(source)
    except OSError as exc:
        raise CatalogLoadError(f"Cannot read parameter catalog {source}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise CatalogLoadError(f"Malformed parameter catalog {source}: {exc}") from exc
    catalog = ParameterCatalog(parse_catalog(raw), generation=generation)
    log.info("Loaded %d parameters from %s", len(catalog), source)
    return catalog


def definition_to_dict(definition: ParameterDefinition) -> dict[str, Any]:
    """Serialize a definition back to the canonical catalog record shape."""
    return {
        "name": definition.name,
        "type": definition.type,
        "default": definition.default,
        "unit": definition.unit,
        "desc": definition.description,
        "wiki": list(definition.wiki_references),
    }
