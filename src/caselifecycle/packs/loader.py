"""
Case Lifecycle Pack Loader

Loads and validates lifecycle packs from YAML or JSON files.

Converts Pydantic schema models to caselifecycle domain models.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from importlib import resources
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..calendars import CALENDARS, BaseCalendar
from ..exceptions import (
    CaseLifecycleError,
    InvalidCalendarError,
    PackLoadError,
    PackValidationError,
    PackVersionMismatch,
)
from ..models import (
    AnchorSelector,
    DeadlineKind,
    DeadlineRule,
    DeadlineRuleTable,
    OffsetDirection,
    StaffRole,
    TaskCategory,
    TaskPriority,
    TaskTemplate,
    TaskTemplateCatalog,
    TriggerKind,
)
from .schema import (
    SCHEMA_VERSION,
    DeadlineRuleSchema,
    LifecyclePackSchema,
    TaskTemplateSchema,
    check_schema_version,
    validate_pack,
)

logger = logging.getLogger(__name__)

DEFAULT_PACK = "ontario_personal_injury.yaml"


@dataclass(frozen=True)
class LoadedPack:
    """A validated pack converted to engine inputs."""
    id: str
    name: str
    jurisdiction: str
    version: str
    rule_table: DeadlineRuleTable
    template_catalog: TaskTemplateCatalog
    calendar_name: str

    def build_calendar(self) -> BaseCalendar:
        try:
            calendar_cls = CALENDARS[self.calendar_name]
        except KeyError:
            raise InvalidCalendarError(
                message=f"Unknown calendar '{self.calendar_name}'",
                details={"calendar": self.calendar_name, "known": sorted(CALENDARS)},
            )
        return calendar_cls()


# =============================================================================
# Reference Integrity Validation
# =============================================================================

def validate_reference_integrity(pack: LoadedPack, path: str = "") -> None:
    """
    Validate internal references are consistent.

    Catches:
    - Duplicate rule or template IDs
    - other_deadline_expiry rules referencing an undeclared kind
    - on_deadline templates for kinds no rule produces

    Raises:
        ValueError: If reference integrity errors are found
    """
    errors = pack.rule_table.integrity_errors()
    errors.extend(pack.template_catalog.integrity_errors())

    produced = {rule.kind for rule in pack.rule_table}
    for template in pack.template_catalog.by_trigger(TriggerKind.ON_DEADLINE):
        if template.deadline_kind not in produced:
            errors.append(
                f"Template '{template.id}' targets '{template.deadline_kind.value}' "
                f"which no rule produces"
            )

    if pack.calendar_name not in CALENDARS:
        errors.append(f"Unknown calendar '{pack.calendar_name}'")

    if errors:
        path_str = f" in {path}" if path else ""
        raise ValueError(
            f"Reference integrity errors{path_str}:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_rule(schema: DeadlineRuleSchema) -> DeadlineRule:
    return DeadlineRule(
        id=schema.id,
        kind=DeadlineKind(schema.kind),
        anchor_selector=AnchorSelector(schema.anchor),
        anchor_key=schema.anchor_key,
        offset_days=schema.offset_days,
        offset_months=schema.offset_months,
        direction=OffsetDirection(schema.direction),
        business_days=schema.business_days,
        critical=schema.critical,
        tolls_for_minors=schema.tolls_for_minors,
        description=schema.description,
        enabled=schema.enabled,
    )


def _convert_template(schema: TaskTemplateSchema) -> TaskTemplate:
    return TaskTemplate(
        id=schema.id,
        name=schema.name,
        description=schema.description,
        category=TaskCategory(schema.category),
        default_assignee_role=StaffRole(schema.assignee_role),
        default_priority=TaskPriority(schema.priority),
        trigger_kind=TriggerKind(schema.trigger),
        deadline_kind=DeadlineKind(schema.deadline_kind) if schema.deadline_kind else None,
        lead_days=schema.lead_days,
        estimated_hours=Decimal(schema.estimated_hours) if schema.estimated_hours is not None else None,
    )


def _convert_pack(schema: LifecyclePackSchema) -> LoadedPack:
    return LoadedPack(
        id=schema.id,
        name=schema.name,
        jurisdiction=schema.jurisdiction,
        version=schema.version,
        rule_table=DeadlineRuleTable(
            rules=tuple(_convert_rule(r) for r in schema.rules),
            name=schema.id,
            jurisdiction=schema.jurisdiction,
        ),
        template_catalog=TaskTemplateCatalog(
            templates=tuple(_convert_template(t) for t in schema.templates),
            name=schema.id,
        ),
        calendar_name=schema.calendar,
    )


# =============================================================================
# Pack Loader
# =============================================================================

class PackLoader:
    """
    Loads lifecycle packs from YAML or JSON files.

    Usage:
        loader = PackLoader()
        pack = loader.load("path/to/pack.yaml")
    """

    def __init__(self, strict_version: bool = True):
        """
        Args:
            strict_version: If True, reject packs with incompatible schema versions
        """
        self.strict_version = strict_version
        self._packs: dict[str, LoadedPack] = {}

    def load(self, path: Union[str, Path]) -> LoadedPack:
        """
        Load a lifecycle pack from a file.

        Raises:
            PackLoadError: If file cannot be read
            PackValidationError: If validation fails
            PackVersionMismatch: If schema version incompatible
        """
        path = Path(path)

        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise PackLoadError(
                message=f"Failed to load lifecycle pack: {e}",
                details={"path": str(path), "error": str(e)},
            )

        pack = self.load_data(data, source=str(path))
        logger.info(
            "Loaded pack %s (%d rules, %d templates) from %s",
            pack.id, len(pack.rule_table), len(pack.template_catalog), path,
        )
        return pack

    def load_data(self, data: Any, source: str = "") -> LoadedPack:
        """Validate and convert an already-parsed pack document."""
        if not isinstance(data, dict):
            raise PackLoadError(
                message="Lifecycle pack must be a mapping at the top level",
                details={"path": source, "type": type(data).__name__},
            )

        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise PackVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={
                    "pack_version": pack_version,
                    "expected_version": SCHEMA_VERSION,
                },
            )

        try:
            schema = validate_pack(data)
        except ValidationError as e:
            raise PackValidationError(
                message=f"Lifecycle pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False), "path": source},
            )

        # Domain constructors re-check invariants the schema already covers
        try:
            pack = _convert_pack(schema)
        except CaseLifecycleError as e:
            raise PackValidationError(
                message=f"Lifecycle pack conversion failed: {e.message}",
                details={"errors": e.details, "path": source},
            )

        try:
            validate_reference_integrity(pack, source)
        except ValueError as e:
            raise PackValidationError(
                message="Reference integrity validation failed",
                details={"errors": str(e), "path": source},
            )

        self._packs[pack.id] = pack
        return pack

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def get_pack(self, pack_id: str) -> Optional[LoadedPack]:
        """Get a cached pack by ID."""
        return self._packs.get(pack_id)

    def list_packs(self) -> list[str]:
        return list(self._packs.keys())


# =============================================================================
# Convenience Functions
# =============================================================================

def load_pack(path: Union[str, Path]) -> LoadedPack:
    """Load a lifecycle pack from a file with a temporary loader."""
    return PackLoader().load(path)


def load_pack_from_string(content: str, format: str = "yaml") -> LoadedPack:
    """
    Load a lifecycle pack from a string.

    Args:
        content: YAML or JSON string
        format: "yaml" or "json"
    """
    try:
        if format.lower() == "json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise PackLoadError(
            message=f"Failed to parse lifecycle pack: {e}",
            details={"format": format, "error": str(e)},
        )
    return PackLoader().load_data(data, source="<string>")


def load_default_pack() -> LoadedPack:
    """Load the bundled Ontario personal injury pack."""
    content = resources.files(__package__).joinpath(DEFAULT_PACK).read_text(encoding="utf-8")
    return PackLoader().load_data(yaml.safe_load(content), source=DEFAULT_PACK)
