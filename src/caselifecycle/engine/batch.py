"""
Bulk timeline evaluation.

Cases share no state, so each timeline runs as an independent job on a
thread pool. Results come back keyed by case id in input order.
"""
from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from ..exceptions import InvalidArgumentError
from ..models import CaseFile, Deadline
from .timeline_calculator import TimelineCalculator

logger = logging.getLogger(__name__)


def compute_timelines(
    calculator: TimelineCalculator,
    cases: Iterable[CaseFile],
    max_workers: Optional[int] = None,
) -> dict[str, list[Deadline]]:
    """
    Compute timelines for many cases in parallel.

    Every job runs to completion; then the exception of the earliest failing
    case in input order is re-raised.

    Raises:
        InvalidArgumentError: Duplicate case ids in ``cases``
    """
    case_list = list(cases)
    seen: set[str] = set()
    for case in case_list:
        if case.case_id in seen:
            raise InvalidArgumentError(
                message=f"Duplicate case id in batch: {case.case_id}",
                case_id=case.case_id,
            )
        seen.add(case.case_id)

    if not case_list:
        return {}

    if max_workers is None:
        max_workers = min(os.cpu_count() or 4, 8)

    results: dict[str, list[Deadline]] = {}
    first_error: Optional[Exception] = None

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            (case.case_id, executor.submit(calculator.compute_for_case, case))
            for case in case_list
        ]
        for case_id, future in futures:
            try:
                results[case_id] = future.result()
            except Exception as e:
                logger.debug("Timeline failed for case %s: %s", case_id, e)
                if first_error is None:
                    first_error = e

    if first_error is not None:
        raise first_error

    logger.debug("Computed %d timelines with %d workers", len(results), max_workers)
    return results
