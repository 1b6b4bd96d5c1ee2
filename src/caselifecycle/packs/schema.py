"""
Case Lifecycle Pack Schemas

Pydantic models for validating lifecycle pack YAML/JSON files.

A lifecycle pack bundles the deadline rule table and the task template
catalog for one practice area in one jurisdiction. The schemas map to the
domain models in caselifecycle.models.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check that the major version matches
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

DeadlineKindValue = Literal[
    "sabs_notice", "sabs_3_week", "sabs_1_month", "sabs_3_month",
    "sabs_4_month", "sabs_5_month", "sabs_6_month", "sabs_9_month",
    "sabs_12_month",
    "ocf1_deadline", "ocf3_expiry", "ocf3_renewal", "ocf18_deemed_approval",
    "tort_notice", "limitation_period", "lat_limitation", "rule48_dismissal",
    "pretrial_brief", "expert_report", "responding_report",
]

AnchorSelectorValue = Literal[
    "primary_anchor", "secondary_event_date", "other_deadline_expiry"
]

OffsetDirectionValue = Literal["before", "after"]

TaskCategoryValue = Literal[
    "ocf_forms", "discovery", "pleadings", "medical_records", "undertakings",
    "settlement", "lat", "court", "client_communication", "administrative",
    "other",
]

StaffRoleValue = Literal[
    "lawyer", "law_clerk", "paralegal", "legal_assistant",
    "accident_benefits_coordinator",
]

TaskPriorityValue = Literal["low", "medium", "high", "critical"]

TriggerKindValue = Literal["on_case_open", "on_deadline", "on_form_event", "manual"]


# =============================================================================
# Rule Schemas
# =============================================================================

class DeadlineRuleSchema(BaseModel):
    """
    Schema for one deadline rule.

    Exactly one of offset_days / offset_months must be given. Secondary and
    other-deadline selectors also need an anchor_key.
    """
    id: str = Field(..., description="Unique rule identifier")
    kind: DeadlineKindValue = Field(..., description="Deadline kind produced")
    anchor: AnchorSelectorValue = Field("primary_anchor", description="Anchor selector")
    anchor_key: Optional[str] = Field(
        None, description="Secondary date key or referenced deadline kind"
    )
    offset_days: Optional[int] = Field(None, ge=0, description="Offset in days")
    offset_months: Optional[int] = Field(None, ge=0, description="Offset in months")
    direction: OffsetDirectionValue = Field("after", description="Before or after the anchor")
    business_days: bool = Field(False, description="Count offset_days in business days")
    critical: bool = Field(False, description="Missing it harms the claim")
    tolls_for_minors: bool = Field(False, description="Subject to minority tolling")
    description: str = Field(..., description="Human-readable description")
    enabled: bool = Field(True, description="Whether rule is active")

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_offset(self) -> "DeadlineRuleSchema":
        if (self.offset_days is None) == (self.offset_months is None):
            raise ValueError(
                f"Rule '{self.id}' must set exactly one of offset_days/offset_months"
            )
        if self.business_days and self.offset_days is None:
            raise ValueError(f"Rule '{self.id}' business_days requires offset_days")
        if self.anchor != "primary_anchor" and not self.anchor_key:
            raise ValueError(f"Rule '{self.id}' anchor '{self.anchor}' requires anchor_key")
        return self


# =============================================================================
# Template Schemas
# =============================================================================

class TaskTemplateSchema(BaseModel):
    """Schema for a task template."""
    id: str = Field(..., description="Unique template identifier")
    name: str = Field(..., description="Task title")
    description: str = Field("", description="Task description")
    category: TaskCategoryValue = Field(..., description="Task category")
    assignee_role: StaffRoleValue = Field(..., description="Default assignee role")
    priority: TaskPriorityValue = Field("medium", description="Default priority")
    trigger: TriggerKindValue = Field(..., description="What fires the template")
    deadline_kind: Optional[DeadlineKindValue] = Field(
        None, description="Deadline kind for on_deadline templates"
    )
    lead_days: Optional[int] = Field(
        None, ge=0, description="Days before due date the task is generated"
    )
    estimated_hours: Optional[Decimal] = Field(None, ge=0)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_trigger(self) -> "TaskTemplateSchema":
        if self.trigger == "on_deadline":
            if self.deadline_kind is None or self.lead_days is None:
                raise ValueError(
                    f"Template '{self.id}' on_deadline requires deadline_kind and lead_days"
                )
        return self


# =============================================================================
# Pack Schema
# =============================================================================

class LifecyclePackSchema(BaseModel):
    """Top-level schema for a lifecycle pack file."""
    schema_version: str = Field(SCHEMA_VERSION, description="Pack schema version")
    id: str = Field(..., description="Pack identifier")
    name: str = Field(..., description="Human-readable name")
    jurisdiction: str = Field(..., description="Jurisdiction code (e.g., CA-ON)")
    version: str = Field("1.0", description="Pack content version")
    calendar: str = Field("ontario", description="Business-day calendar name")
    description: Optional[str] = None

    rules: list[DeadlineRuleSchema] = Field(
        default_factory=list,
        description="Deadline rules in declaration order"
    )
    templates: list[TaskTemplateSchema] = Field(
        default_factory=list,
        description="Task templates; first match per deadline kind wins"
    )

    @field_validator("jurisdiction")
    @classmethod
    def validate_jurisdiction(cls, v: str) -> str:
        return v.upper()

    model_config = {
        "extra": "forbid",  # Reject unknown fields
    }


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_pack(data: dict[str, Any]) -> LifecyclePackSchema:
    """
    Validate a pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return LifecyclePackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """True when the pack's major schema version matches ours."""
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    pack_major = pack_version.split(".")[0]
    current_major = SCHEMA_VERSION.split(".")[0]
    return pack_major == current_major
