"""Subsidy catalog and eligibility matching."""

from costpilot.services.subsidies.catalog import (
    DEFAULT_PROGRAMS,
    SubsidyCatalog,
    match_program,
    parse_catalog_csv,
)

__all__ = [
    "DEFAULT_PROGRAMS",
    "SubsidyCatalog",
    "match_program",
    "parse_catalog_csv",
]
