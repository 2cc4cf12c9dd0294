"""
Static data shipped with the package.

``catalog.yml`` is the built-in probe catalog: five sections of Linux
introspection commands, loaded by ``sysreport.core.config.catalog_loader``.
"""

from __future__ import annotations

from pathlib import Path

_DATA_DIR = Path(__file__).parent

BUILTIN_CATALOG = _DATA_DIR / "catalog.yml"
