"""
Catalog loader — reads the probe catalog YAML into domain models.

The built-in catalog ships as ``sysreport/core/data/catalog.yml``.
A user catalog with the same shape can replace it (``--catalog``).

Shape::

    sections:
      - name: hardware
        title: GENERAL SYSTEM & HARDWARE OVERVIEW
        subsections:
          - title: System Information
            probes:
              - command: uname -a
                description: System information (uname -a)
              - command: ip -brief address
                fallback:
                  command: ifconfig -a
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from sysreport.core.data import BUILTIN_CATALOG
from sysreport.core.models.probe import Catalog, Section

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when a probe catalog is missing or invalid."""


def load_catalog(path: Path | None = None) -> Catalog:
    """Load and validate a probe catalog.

    Args:
        path: Explicit catalog file. If None, the built-in catalog.

    Returns:
        Validated Catalog model.

    Raises:
        CatalogError: If the file is missing or invalid.
    """
    if path is None:
        path = BUILTIN_CATALOG

    if not path.is_file():
        raise CatalogError(f"Catalog file not found: {path}")

    logger.debug("Loading probe catalog from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        catalog = Catalog.model_validate(data)
    except Exception as e:
        raise CatalogError(f"Invalid probe catalog {path}: {e}") from e

    names = catalog.section_names
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise CatalogError(f"Duplicate section names in {path}: {', '.join(duplicates)}")

    logger.info(
        "Loaded catalog with %d sections, %d probes",
        len(catalog.sections),
        sum(1 for s in catalog.sections for _ in s.probes()),
    )
    return catalog


def select_sections(
    catalog: Catalog,
    names: list[str] | None = None,
) -> list[tuple[int, Section]]:
    """Pick sections by name, keeping catalog order and numbering.

    Args:
        catalog: The loaded catalog.
        names: Section names to keep. None or empty = all.

    Returns:
        ``(number, section)`` pairs, numbered by catalog position.

    Raises:
        CatalogError: If a requested name is not in the catalog.
    """
    numbered = list(enumerate(catalog.sections, start=1))
    if not names:
        return numbered

    unknown = [n for n in names if catalog.get_section(n) is None]
    if unknown:
        raise CatalogError(
            f"Unknown section(s): {', '.join(unknown)}. "
            f"Available: {', '.join(catalog.section_names)}"
        )

    wanted = set(names)
    return [(number, section) for number, section in numbered if section.name in wanted]
