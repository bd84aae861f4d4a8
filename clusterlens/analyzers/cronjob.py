"""Detects suspended or misconfigured cron jobs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any
from zoneinfo import ZoneInfo

from clusterlens.common import AnalysisContext, Analyzer, Failure, Result, Sensitive
from clusterlens.kube import GroupVersion, K8sApiReference
from clusterlens.metrics import ANALYZER_ERRORS
from clusterlens.util import mask_string

KIND = "CronJob"


class CronScheduleError(ValueError):
    """Raised when a cron schedule cannot be parsed."""


@dataclass(frozen=True)
class _Bounds:
    minimum: int
    maximum: int
    names: dict[str, int] = field(default_factory=dict)


_MONTH_NAMES = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")
_DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

_FIELDS = (
    _Bounds(0, 59),
    _Bounds(0, 23),
    _Bounds(1, 31),
    _Bounds(1, 12, {name: index for index, name in enumerate(_MONTH_NAMES, start=1)}),
    _Bounds(0, 6, {name: index for index, name in enumerate(_DAY_NAMES)}),
)

_DESCRIPTORS = frozenset(
    {"@yearly", "@annually", "@monthly", "@weekly", "@daily", "@midnight", "@hourly"}
)
_INTEGER = re.compile(r"[+-]?[0-9]+")
_DURATION = re.compile(r"[+-]?(?:0|(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:ns|us|µs|μs|ms|s|m|h))+)")


def _parse_int(expr: str) -> int:
    if not _INTEGER.fullmatch(expr):
        raise CronScheduleError(
            f'failed to parse int from {expr}: strconv.Atoi: parsing "{expr}": invalid syntax'
        )
    number = int(expr)
    if number < 0:
        raise CronScheduleError(f"negative number ({number}) not allowed: {expr}")
    return number


def _parse_int_or_name(expr: str, names: dict[str, int]) -> int:
    named = names.get(expr.lower())
    return named if named is not None else _parse_int(expr)


def _check_range(expr: str, bounds: _Bounds) -> None:
    range_and_step = expr.split("/")
    low_and_high = range_and_step[0].split("-")
    single = len(low_and_high) == 1

    if low_and_high[0] in ("*", "?"):
        start, end = bounds.minimum, bounds.maximum
    else:
        start = _parse_int_or_name(low_and_high[0], bounds.names)
        if len(low_and_high) == 1:
            end = start
        elif len(low_and_high) == 2:
            end = _parse_int_or_name(low_and_high[1], bounds.names)
        else:
            raise CronScheduleError(f"too many hyphens: {expr}")

    if len(range_and_step) == 1:
        step = 1
    elif len(range_and_step) == 2:
        step = _parse_int(range_and_step[1])
        if single:
            end = bounds.maximum
    else:
        raise CronScheduleError(f"too many slashes: {expr}")

    if start < bounds.minimum:
        raise CronScheduleError(
            f"beginning of range ({start}) below minimum ({bounds.minimum}): {expr}"
        )
    if end > bounds.maximum:
        raise CronScheduleError(f"end of range ({end}) above maximum ({bounds.maximum}): {expr}")
    if start > end:
        raise CronScheduleError(f"beginning of range ({start}) beyond end of range ({end}): {expr}")
    if step == 0:
        raise CronScheduleError(f"step of range should be a positive number: {expr}")


def _check_descriptor(spec: str) -> None:
    if spec in _DESCRIPTORS:
        return
    every = "@every "
    if spec.startswith(every):
        value = spec[len(every):]
        if not _DURATION.fullmatch(value):
            raise CronScheduleError(
                f'failed to parse duration {spec}: time: invalid duration "{value}"'
            )
        return
    raise CronScheduleError(f"unrecognized descriptor: {spec}")


def check_cron_schedule_is_valid(schedule: str) -> bool:
    """Return True for a valid standard cron schedule; raise CronScheduleError otherwise."""
    spec = schedule
    if not spec:
        raise CronScheduleError("empty spec string")

    if spec.startswith(("TZ=", "CRON_TZ=")):
        space = spec.find(" ")
        if space < 0:
            raise CronScheduleError(f"missing schedule after time zone: {spec}")
        location = spec[spec.find("=") + 1 : space]
        try:
            ZoneInfo(location)
        except (ValueError, LookupError) as error:
            raise CronScheduleError(f"provided bad location {location}: {error}") from None
        spec = spec[space:].strip()

    if spec.startswith("@"):
        _check_descriptor(spec)
        return True

    fields = spec.split()
    if len(fields) != len(_FIELDS):
        raise CronScheduleError(
            f"expected exactly {len(_FIELDS)} fields, found {len(fields)}: [{' '.join(fields)}]"
        )
    for text, bounds in zip(fields, _FIELDS):
        for expr in text.split(","):
            _check_range(expr, bounds)
    return True


class CronJobAnalyzer(Analyzer):
    """Reports suspended cron jobs and those with bad schedules or deadlines."""

    def analyze(self, context: AnalysisContext) -> list[Result]:
        api_doc = K8sApiReference(
            api_version=GroupVersion("batch", "v1"),
            kind=KIND,
            openapi_schema=context.openapi_schema,
        )
        ANALYZER_ERRORS.delete_partial_match({"analyzer_name": KIND})

        pre_analysis: dict[str, list[Failure]] = {}
        for cronjob in context.client.list(KIND, context.namespace):
            meta: dict[str, Any] = cronjob.get("metadata") or {}
            name = meta.get("name", "")
            namespace = meta.get("namespace", "")
            spec = cronjob.get("spec") or {}

            def failure(text: str, doc_field: str) -> Failure:
                return Failure(
                    text=text,
                    kubernetes_doc=api_doc.get_api_doc_v2(doc_field),
                    sensitive=[
                        Sensitive(namespace, mask_string(namespace)),
                        Sensitive(name, mask_string(name)),
                    ],
                )

            failures = []
            if spec.get("suspend"):
                failures.append(failure(f"CronJob {name} is suspended", "spec.suspend"))
            else:
                try:
                    check_cron_schedule_is_valid(spec.get("schedule", ""))
                except CronScheduleError as error:
                    failures.append(
                        failure(
                            f"CronJob {name} has an invalid schedule: {error}", "spec.schedule"
                        )
                    )
                deadline = spec.get("startingDeadlineSeconds")
                if deadline is not None and deadline < 0:
                    failures.append(
                        failure(
                            f"CronJob {name} has a negative starting deadline",
                            "spec.startingDeadlineSeconds",
                        )
                    )

            if failures:
                pre_analysis[f"{namespace}/{name}"] = failures
                ANALYZER_ERRORS.set(len(failures), KIND, name, namespace)

        results = list(context.results)
        results.extend(
            Result(kind=KIND, name=key, error=failures)
            for key, failures in pre_analysis.items()
        )
        return results