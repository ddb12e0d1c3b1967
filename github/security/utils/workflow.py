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

"""Workflow orchestration – token, finding, metadata upsert, assessment upsert.

The run is a linear state machine::

    Start -> CredentialAcquired -> FindingBuilt -> MetadataUpserted
          -> AssessmentUpserted -> Done

Any failure moves the workflow to ``Failed`` and is re-raised to the caller;
nothing is retried at this level.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import requests

from shared.common import vprint

from .assessment import (
    build_assessment_payload,
    build_metadata_payload,
    publish_assessment,
    resolve_scope,
)
from .credentials import acquire_token
from .errors import AssessmentError, ConfigurationError
from .findings import FindingContext, assessment_display_name, build_finding
from .models import Conclusion, Credentials, Finding, TargetScope


class WorkflowState(StrEnum):
    START = "Start"
    CREDENTIAL_ACQUIRED = "CredentialAcquired"
    FINDING_BUILT = "FindingBuilt"
    METADATA_UPSERTED = "MetadataUpserted"
    ASSESSMENT_UPSERTED = "AssessmentUpserted"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class AssessmentConfig:
    """Validated inputs for one run."""
    credentials: Credentials
    severity: str
    resource_group: str
    cluster_name: str | None = None
    web_app_name: str | None = None

    def scope(self) -> TargetScope:
        return resolve_scope(
            self.credentials.subscription_id,
            self.resource_group,
            self.cluster_name,
            self.web_app_name,
        )


@dataclass
class AssessmentWorkflow:
    config: AssessmentConfig
    finding_context: FindingContext
    metadata_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: WorkflowState = WorkflowState.START
    history: list[WorkflowState] = field(default_factory=lambda: [WorkflowState.START])
    failure: Exception | None = None
    finding: Finding | None = None
    conclusion: Conclusion | None = None
    metadata_name: str | None = None

    def _advance(self, state: WorkflowState) -> None:
        vprint(f"Workflow state: {self.state} -> {state}")
        self.state = state
        self.history.append(state)

    def run(self) -> WorkflowState:
        try:
            self._run()
        except (AssessmentError, requests.RequestException) as exc:
            self.failure = exc
            self._advance(WorkflowState.FAILED)
            raise
        return self.state

    def _run(self) -> None:
        if self.state is not WorkflowState.START:
            raise RuntimeError(f"workflow already ran (state={self.state})")
        if not self.config.severity or not self.config.severity.strip():
            raise ConfigurationError("severity is required")
        scope = self.config.scope()
        vprint(f"Assessment target ({scope.kind}): {scope.path}")
        creds = self.config.credentials

        token = acquire_token(creds)
        self._advance(WorkflowState.CREDENTIAL_ACQUIRED)

        self.finding, self.conclusion = build_finding(self.finding_context)
        self._advance(WorkflowState.FINDING_BUILT)
        print(f"Assessment conclusion: {self.conclusion}")

        self.metadata_name = publish_assessment(
            token,
            creds.subscription_id,
            creds.management_endpoint,
            self.metadata_id,
            self.finding,
            scope,
            severity=self.config.severity,
            display_name=assessment_display_name(self.finding, self.finding_context.run),
            conclusion=self.conclusion,
            on_metadata_upserted=lambda _name: self._advance(WorkflowState.METADATA_UPSERTED),
        )
        self._advance(WorkflowState.ASSESSMENT_UPSERTED)
        self._advance(WorkflowState.DONE)


def preview_assessment(config: AssessmentConfig, finding_context: FindingContext) -> dict[str, Any]:
    """Build both request payloads without acquiring a token or writing anything.

    Check-runs are still looked up to derive the verdict.
    """
    if not config.severity or not config.severity.strip():
        raise ConfigurationError("severity is required")
    scope = config.scope()
    finding, conclusion = build_finding(finding_context)
    endpoint = config.credentials.management_endpoint
    return {
        "metadata": build_metadata_payload(
            finding,
            assessment_display_name(finding, finding_context.run),
            config.severity,
        ),
        "assessment": build_assessment_payload(finding, scope, endpoint, conclusion),
    }
