"""
Case Lifecycle Configuration

Environment-driven settings, logging setup and engine wiring.

Environment variables:
    CLE_PACK_PATH            Lifecycle pack file (default: bundled Ontario pack)
    CLE_GAP_THRESHOLD_DAYS   Treatment gap threshold in days (default: 14)
    CLE_REMINDER_LEAD_DAYS   Comma-separated reminder lead days (default: 7,3,1)
    CLE_LOG_LEVEL            Logging level (default: INFO)
    CLE_LOG_FORMAT           "json" or "text" (default: json)
"""
from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping, Optional

from .calendars import BaseCalendar
from .clock import Clock, SystemClock
from .engine import TimelineCalculator, TreatmentGapDetector, WorkflowTaskGenerator
from .exceptions import InvalidArgumentError
from .packs import LoadedPack, load_default_pack, load_pack

LOGGER_NAME = "caselifecycle"

LOG_FORMATS = {"json", "text"}

TEXT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


# =============================================================================
# Settings
# =============================================================================

@dataclass(frozen=True)
class EngineSettings:
    """Runtime settings for an engine instance."""
    pack_path: Optional[str] = None
    gap_threshold_days: int = 14
    reminder_lead_days: tuple[int, ...] = (7, 3, 1)
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
        """
        Read settings from the environment.

        Raises:
            InvalidArgumentError: A variable is set to an unusable value
        """
        env = os.environ if environ is None else environ

        gap_raw = env.get("CLE_GAP_THRESHOLD_DAYS", "14")
        try:
            gap_threshold_days = int(gap_raw)
        except ValueError:
            raise InvalidArgumentError(
                message="CLE_GAP_THRESHOLD_DAYS must be an integer",
                details={"value": gap_raw},
            )
        if gap_threshold_days < 0:
            raise InvalidArgumentError(
                message="CLE_GAP_THRESHOLD_DAYS must be non-negative",
                details={"value": gap_raw},
            )

        lead_raw = env.get("CLE_REMINDER_LEAD_DAYS", "7,3,1")
        try:
            reminder_lead_days = tuple(int(p) for p in lead_raw.split(",") if p.strip())
        except ValueError:
            raise InvalidArgumentError(
                message="CLE_REMINDER_LEAD_DAYS must be comma-separated integers",
                details={"value": lead_raw},
            )
        if any(d < 0 for d in reminder_lead_days):
            raise InvalidArgumentError(
                message="CLE_REMINDER_LEAD_DAYS must be non-negative",
                details={"value": lead_raw},
            )

        log_level = env.get("CLE_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise InvalidArgumentError(
                message=f"Unknown log level: {log_level}",
                details={"value": log_level},
            )

        log_format = env.get("CLE_LOG_FORMAT", "json").lower()
        if log_format not in LOG_FORMATS:
            raise InvalidArgumentError(
                message=f"CLE_LOG_FORMAT must be one of {sorted(LOG_FORMATS)}",
                details={"value": log_format},
            )

        return cls(
            pack_path=env.get("CLE_PACK_PATH") or None,
            gap_threshold_days=gap_threshold_days,
            reminder_lead_days=reminder_lead_days,
            log_level=log_level,
            log_format=log_format,
        )


# =============================================================================
# Logging
# =============================================================================

class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Add extra fields if present
        if hasattr(record, "case_id"):
            log_entry["case_id"] = record.case_id
        if hasattr(record, "pack_id"):
            log_entry["pack_id"] = record.pack_id
        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
    stream=None,
) -> logging.Logger:
    """
    Install a single handler on the package logger.

    Calling it again replaces the handler instead of adding another.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_caselifecycle", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_LOG_FORMAT))
    handler._caselifecycle = True

    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger


# =============================================================================
# Engine Wiring
# =============================================================================

@dataclass
class Engine:
    """A pack plus the components built from it."""
    settings: EngineSettings
    pack: LoadedPack
    calendar: BaseCalendar
    timeline_calculator: TimelineCalculator
    task_generator: WorkflowTaskGenerator
    gap_detector: TreatmentGapDetector
    clock: Clock = field(default_factory=SystemClock)


def build_engine(
    settings: Optional[EngineSettings] = None,
    clock: Optional[Clock] = None,
) -> Engine:
    """
    Load the configured pack and wire the engine components.

    Raises:
        PackLoadError / PackValidationError / PackVersionMismatch: Bad pack
        InvalidCalendarError: The pack names an unknown calendar
    """
    settings = settings or EngineSettings()
    clock = clock or SystemClock()

    pack = load_pack(settings.pack_path) if settings.pack_path else load_default_pack()
    calendar = pack.build_calendar()
    calculator = TimelineCalculator(rule_table=pack.rule_table, calendar=calendar)

    logging.getLogger(__name__).debug(
        "Built engine from pack %s with calendar %s", pack.id, pack.calendar_name,
        extra={"pack_id": pack.id},
    )

    return Engine(
        settings=settings,
        pack=pack,
        calendar=calendar,
        timeline_calculator=calculator,
        task_generator=WorkflowTaskGenerator(
            template_catalog=pack.template_catalog,
            timeline_calculator=calculator,
            clock=clock,
            reminder_lead_days=settings.reminder_lead_days,
        ),
        gap_detector=TreatmentGapDetector(
            threshold_days=settings.gap_threshold_days,
            clock=clock,
        ),
        clock=clock,
    )
