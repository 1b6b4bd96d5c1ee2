"""
Case Lifecycle Packs

Schema validation and loading for lifecycle packs.

Lifecycle packs are YAML or JSON files that define the deadline rule table
and the task template catalog for one practice area in one jurisdiction.

Usage:
    from caselifecycle.packs import load_default_pack, load_pack

    # Bundled Ontario personal injury pack
    pack = load_default_pack()

    # A firm's own pack
    pack = load_pack("path/to/firm_pack.yaml")
    calculator = TimelineCalculator(pack.rule_table, pack.build_calendar())
"""
from __future__ import annotations

from .loader import (
    DEFAULT_PACK,
    LoadedPack,
    PackLoader,
    load_default_pack,
    load_pack,
    load_pack_from_string,
    validate_reference_integrity,
)
from .schema import (
    SCHEMA_VERSION,
    DeadlineRuleSchema,
    LifecyclePackSchema,
    TaskTemplateSchema,
    check_schema_version,
    validate_pack,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Loader
    "DEFAULT_PACK",
    "LoadedPack",
    "PackLoader",
    "load_pack",
    "load_pack_from_string",
    "load_default_pack",
    # Validation
    "validate_pack",
    "validate_reference_integrity",
    "check_schema_version",
    # Schemas
    "LifecyclePackSchema",
    "DeadlineRuleSchema",
    "TaskTemplateSchema",
]
