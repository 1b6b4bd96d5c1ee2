"""
Case Lifecycle Catalogs

Immutable rule table and template catalog. Both are built once (normally
from a pack file) and injected into the engine, so tests and other
jurisdictions can substitute their own.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from .deadline import DeadlineRule
from .enums import AnchorSelector, DeadlineKind, TriggerKind
from .task import TaskTemplate


@dataclass(frozen=True)
class DeadlineRuleTable:
    """
    Ordered deadline rules.

    Declaration order matters twice: it breaks due-date ties in timeline
    output, and an OTHER_DEADLINE_EXPIRY rule can only reference a kind
    declared before it.
    """
    rules: tuple[DeadlineRule, ...] = field(default_factory=tuple)
    name: str = "custom"
    jurisdiction: Optional[str] = None

    def __iter__(self) -> Iterator[DeadlineRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def enabled_rules(self) -> tuple[DeadlineRule, ...]:
        return tuple(r for r in self.rules if r.enabled)

    def get(self, rule_id: str) -> Optional[DeadlineRule]:
        return next((r for r in self.rules if r.id == rule_id), None)

    def for_kind(self, kind: DeadlineKind) -> tuple[DeadlineRule, ...]:
        return tuple(r for r in self.rules if r.kind == kind)

    def integrity_errors(self) -> list[str]:
        """Problems that make the table unusable; empty when valid."""
        errors: list[str] = []
        seen_ids: set[str] = set()
        declared: set[str] = set()
        for rule in self.rules:
            if rule.id in seen_ids:
                errors.append(f"Duplicate rule ID: '{rule.id}'")
            seen_ids.add(rule.id)
            if rule.anchor_selector == AnchorSelector.OTHER_DEADLINE_EXPIRY:
                if rule.anchor_key not in {k.value for k in DeadlineKind}:
                    errors.append(
                        f"Rule '{rule.id}' references unknown deadline kind '{rule.anchor_key}'"
                    )
                elif rule.anchor_key not in declared:
                    errors.append(
                        f"Rule '{rule.id}' references '{rule.anchor_key}' before it is declared"
                    )
            declared.add(rule.kind.value)
        return errors


@dataclass(frozen=True)
class TaskTemplateCatalog:
    """Ordered task templates; the first match for a deadline kind wins."""
    templates: tuple[TaskTemplate, ...] = field(default_factory=tuple)
    name: str = "custom"

    def __iter__(self) -> Iterator[TaskTemplate]:
        return iter(self.templates)

    def __len__(self) -> int:
        return len(self.templates)

    def get(self, template_id: str) -> Optional[TaskTemplate]:
        return next((t for t in self.templates if t.id == template_id), None)

    def for_deadline(self, kind: DeadlineKind) -> Optional[TaskTemplate]:
        return next((t for t in self.templates if t.matches(kind)), None)

    def by_trigger(self, trigger_kind: TriggerKind) -> tuple[TaskTemplate, ...]:
        return tuple(t for t in self.templates if t.trigger_kind == trigger_kind)

    def integrity_errors(self) -> list[str]:
        errors: list[str] = []
        seen: set[str] = set()
        for template in self.templates:
            if template.id in seen:
                errors.append(f"Duplicate template ID: '{template.id}'")
            seen.add(template.id)
        return errors
