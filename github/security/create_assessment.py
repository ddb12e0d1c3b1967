#!/usr/bin/env python3
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

"""Publish a Microsoft Defender for Cloud assessment for a deployed image.

The assessment describes the container-scan status of the commit being
deployed and is attached to an AKS cluster or an App Service web app.

Flow:
1. Exchange the service principal in ``--creds`` for an ARM bearer token.
2. Build the finding from the SARIF report (``--upload-sarif``) or from the
   commit's ``[container-scan]`` check-runs; any failing check-run marks the
   assessment ``Unhealthy``.
3. PUT the assessment metadata, then the assessment on the target resource.

Environment variables
---------------------
AZURE_CREDENTIALS   default for --creds (JSON from ``az ad sp create-for-rbac --sdk-auth``)
GITHUB_SHA          default for --commit-id
GITHUB_TOKEN        default for --token (check-run lookup)
GITHUB_REPOSITORY   default for --repository
GITHUB_RUN_ID / GITHUB_WORKFLOW / GITHUB_SERVER_URL  run links in the description
RUNNER_DEBUG        '1' enables verbose logs

Usage examples
--------------
create-assessment --severity High --resource-group rg-prod --cluster-name aks-prod

# Validate inputs and print the payloads without any write
create-assessment --severity High --resource-group rg-prod \\
    --web-app-name shop-web --upload-sarif results.sarif --dry-run
"""

from __future__ import annotations

import argparse
import json
import os

import requests

from security.utils.errors import AssessmentError
from security.utils.findings import FindingContext
from security.utils.models import Credentials, RunContext
from security.utils.sarif import summarise_sarif
from security.utils.workflow import AssessmentConfig, AssessmentWorkflow, preview_assessment
from shared.common import env_or_none, parse_runner_debug, set_verbose_enabled
from shared.github_checks import CheckRunLookup


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Create or update a Defender for Cloud assessment for a deployed container image",
    )
    p.add_argument("--creds", default=os.environ.get("AZURE_CREDENTIALS"),
                   help="Service principal JSON (default: $AZURE_CREDENTIALS)")
    p.add_argument("--severity", help="Assessment severity: Low, Medium or High (required)")
    p.add_argument("--resource-group", help="Resource group of the assessed resource (required)")

    target = p.add_mutually_exclusive_group()
    target.add_argument("--cluster-name", help="AKS cluster the image is deployed to")
    target.add_argument("--web-app-name", help="App Service web app the image is deployed to")

    p.add_argument("--commit-id", default=os.environ.get("GITHUB_SHA"),
                   help="Commit whose check-runs are inspected (default: $GITHUB_SHA)")
    p.add_argument("--token", default=os.environ.get("GITHUB_TOKEN"),
                   help="GitHub token for the check-run lookup (default: $GITHUB_TOKEN)")
    p.add_argument("--repository", default=os.environ.get("GITHUB_REPOSITORY"),
                   help="owner/repo of the workflow (default: $GITHUB_REPOSITORY)")
    p.add_argument("--upload-sarif", help="SARIF report whose results become the remediation text")
    p.add_argument("--assessment-title", help="Override the assessment title")
    p.add_argument("--dry-run", action="store_true",
                   help="Do not acquire a token or write anything; print the payloads instead")
    p.add_argument("--verbose", action="store_true",
                   help="Enable verbose logs (also enabled when RUNNER_DEBUG=1)")
    return p.parse_args(argv)


def _require(value: str | None, option: str) -> str:
    if value is None or not str(value).strip():
        raise SystemExit(f"ERROR: {option} is required")
    return str(value).strip()


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def build_run_context(repository: str) -> RunContext:
    return RunContext(
        repository=repository,
        run_id=env_or_none("GITHUB_RUN_ID") or "",
        workflow=env_or_none("GITHUB_WORKFLOW") or "",
        server_url=(env_or_none("GITHUB_SERVER_URL") or "https://github.com").rstrip("/"),
    )


def build_inputs(args: argparse.Namespace) -> tuple[AssessmentConfig, FindingContext]:
    """Validate the parsed options; fails before any network call."""
    creds_raw = _require(args.creds, "--creds / AZURE_CREDENTIALS")
    severity = _require(args.severity, "--severity")
    resource_group = _require(args.resource_group, "--resource-group")
    commit_id = _require(args.commit_id, "--commit-id / GITHUB_SHA")
    repository = _require(args.repository, "--repository / GITHUB_REPOSITORY")

    try:
        credentials = Credentials.from_json(creds_raw)
    except AssessmentError as exc:
        raise SystemExit(f"ERROR: {exc}") from exc

    config = AssessmentConfig(
        credentials=credentials,
        severity=severity,
        resource_group=resource_group,
        cluster_name=_blank_to_none(args.cluster_name),
        web_app_name=_blank_to_none(args.web_app_name),
    )
    context = FindingContext(
        run=build_run_context(repository),
        commit_id=commit_id,
        lookup_check_runs=CheckRunLookup(repository, _blank_to_none(args.token)),
        summarise_report=summarise_sarif,
        report_path=_blank_to_none(args.upload_sarif),
        title_override=_blank_to_none(args.assessment_title),
    )
    return config, context


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    set_verbose_enabled(bool(args.verbose) or parse_runner_debug())

    config, context = build_inputs(args)

    if args.dry_run:
        try:
            payloads = preview_assessment(config, context)
        except (AssessmentError, requests.RequestException) as exc:
            raise SystemExit(f"ERROR: {exc}") from exc
        print("DRY-RUN: no token requested and no assessment written")
        print(json.dumps(payloads, indent=2))
        return

    print("Creating Defender for Cloud assessment")
    workflow = AssessmentWorkflow(config=config, finding_context=context)
    try:
        workflow.run()
    except (AssessmentError, requests.RequestException) as exc:
        raise SystemExit(f"ERROR: {exc}") from exc
    print(f"Assessment {workflow.metadata_id} published ({workflow.conclusion})")


if __name__ == "__main__":
    main()
