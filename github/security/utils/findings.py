#
# Copyright 2026 ABSA Group Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""Finding construction – combines the container-scan signals available to
the workflow run (SARIF report and/or ``[container-scan]`` check-runs) into
one ``Finding`` plus the health ``Conclusion``.

Precedence (first strategy returning a finding wins):
1. a SARIF report path is configured
2. at least one matching check-run contributed details
3. generic fallback
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, Iterable

from github import GithubException

from shared.common import vprint
from shared.github_checks import CheckRunResult

from .errors import CheckRunLookupError
from .models import CheckRunSignal, Conclusion, Finding, FindingSource, RunContext
from .templates import (
    CHECK_RUN_ENTRY_TEMPLATE,
    CHECK_RUN_REMEDIATION_TEMPLATE,
    CONTAINER_SCAN_DESCRIPTION_TEMPLATE,
    CONTAINER_SCAN_TITLE,
    DEFAULT_DISPLAY_TITLE,
    FALLBACK_DESCRIPTION_TEMPLATE,
    FALLBACK_REMEDIATION,
    FALLBACK_TITLE,
    SARIF_REMEDIATION_TEMPLATE,
    render_template,
)

CONTAINER_SCAN_MARKER = "[container-scan]"
FAILURE_CONCLUSION = "failure"


@dataclass
class FindingContext:
    """Inputs of the aggregation; the callables are read-only lookups."""
    run: RunContext
    commit_id: str
    lookup_check_runs: Callable[[str], list[CheckRunResult]]
    summarise_report: Callable[[str], str]
    report_path: str | None = None
    title_override: str | None = None


def collect_check_run_signal(runs: Iterable[CheckRunResult] | None) -> CheckRunSignal:
    """Fold container-scan check-runs into a ``CheckRunSignal``.

    Zero or one check-run overall carries no signal.
    """
    signal = CheckRunSignal()
    all_runs = list(runs or [])
    if len(all_runs) <= 1:
        vprint(f"{len(all_runs)} check-run(s) for commit – no container-scan signal")
        return signal

    for run in all_runs:
        if not run.name or CONTAINER_SCAN_MARKER not in run.name:
            continue
        print(f"Found container scan result: {run.name}")
        entry = render_template(
            CHECK_RUN_ENTRY_TEMPLATE,
            {"html_url": run.html_url, "text": run.output_text.replace("**", "")},
        )
        signal.details = f"{signal.details}\n{entry}" if signal.details else entry
        signal.conclusion = signal.conclusion.merge(run.conclusion == FAILURE_CONCLUSION)
        signal.matched += 1
        signal.names.append(run.name)

    signal.details = signal.details.strip()
    return signal


def _links(ctx: FindingContext) -> dict[str, str]:
    return {"workflow_url": ctx.run.workflow_url, "run_url": ctx.run.run_url}


def finding_from_report(ctx: FindingContext, signal: CheckRunSignal) -> Finding | None:
    if not ctx.report_path:
        return None
    summary = ctx.summarise_report(ctx.report_path)
    return Finding(
        title=CONTAINER_SCAN_TITLE,
        description=render_template(CONTAINER_SCAN_DESCRIPTION_TEMPLATE, _links(ctx)),
        remediation_steps=render_template(SARIF_REMEDIATION_TEMPLATE, {"details": summary}),
        source=FindingSource.REPORT,
    )


def finding_from_check_runs(ctx: FindingContext, signal: CheckRunSignal) -> Finding | None:
    if not signal.details.strip():
        return None
    return Finding(
        title=CONTAINER_SCAN_TITLE,
        description=render_template(CONTAINER_SCAN_DESCRIPTION_TEMPLATE, _links(ctx)),
        remediation_steps=render_template(CHECK_RUN_REMEDIATION_TEMPLATE, {"details": signal.details}),
        source=FindingSource.CHECK_RUNS,
    )


def fallback_finding(ctx: FindingContext, signal: CheckRunSignal) -> Finding:
    return Finding(
        title=FALLBACK_TITLE,
        description=render_template(FALLBACK_DESCRIPTION_TEMPLATE, _links(ctx)),
        remediation_steps=FALLBACK_REMEDIATION,
        source=FindingSource.FALLBACK,
    )


FINDING_STRATEGIES: tuple[Callable[[FindingContext, CheckRunSignal], Finding | None], ...] = (
    finding_from_report,
    finding_from_check_runs,
    fallback_finding,
)


def select_finding(ctx: FindingContext, signal: CheckRunSignal) -> Finding:
    for strategy in FINDING_STRATEGIES:
        finding = strategy(ctx, signal)
        if finding is not None:
            vprint(f"Finding built from {finding.source}")
            return finding
    raise AssertionError("fallback_finding always returns a finding")


def apply_title_override(finding: Finding, title: str | None) -> Finding:
    if title and title.strip():
        return dataclasses.replace(finding, title=title)
    return finding


def build_finding(ctx: FindingContext) -> tuple[Finding, Conclusion]:
    """Return the finding to publish and the health verdict for the commit.

    The verdict always comes from the check-runs, also when a SARIF report
    supplies the text.
    """
    try:
        runs = ctx.lookup_check_runs(ctx.commit_id)
    except GithubException as exc:
        raise CheckRunLookupError(ctx.commit_id, str(exc)) from exc
    signal = collect_check_run_signal(runs)
    if signal.matched:
        print(f"{signal.matched} container-scan check-run(s): {', '.join(signal.names)} ({signal.conclusion})")
    finding = apply_title_override(select_finding(ctx, signal), ctx.title_override)
    return finding, signal.conclusion


def assessment_display_name(finding: Finding, run: RunContext) -> str:
    title = finding.title or DEFAULT_DISPLAY_TITLE
    return f"{title} - {run.workflow} - {run.run_id}"
