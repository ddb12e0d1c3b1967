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

"""Defender for Cloud assessment upserts – the assessment metadata
definition followed by the assessment result on the target resource.

Both writes are HTTP PUTs keyed by the same generated metadata id, so a
replay with the same id overwrites instead of duplicating. Neither write is
retried here and a failed result write leaves the metadata in place.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import requests

from shared.common import vprint
from shared.http_client import response_json, send_request

from .errors import ConfigurationError, RemoteWriteError
from .models import Conclusion, Finding, TargetScope

API_VERSION = "2020-01-01"
ASSESSMENT_CATEGORY = "Compute"
ASSESSMENT_CAUSE = "Created Using a GitHub action"


def _auth_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json; charset=utf-8",
    }


def _raw_body(resp: requests.Response) -> str:
    payload = response_json(resp)
    if payload is None:
        return resp.text or ""
    return json.dumps(payload)


def metadata_url(endpoint: str, subscription_id: str, metadata_id: str) -> str:
    return (
        f"{endpoint.rstrip('/')}/subscriptions/{subscription_id}"
        f"/providers/Microsoft.Security/assessmentMetadata/{metadata_id}?api-version={API_VERSION}"
    )


def assessment_url(endpoint: str, scope: TargetScope, metadata_id: str) -> str:
    return (
        f"{endpoint.rstrip('/')}/{scope.path}"
        f"/providers/Microsoft.Security/assessments/{metadata_id}?api-version={API_VERSION}"
    )


def build_metadata_payload(finding: Finding, display_name: str, severity: str) -> dict[str, Any]:
    return {
        "properties": {
            "displayName": display_name,
            "description": finding.description,
            "remediationDescription": finding.remediation_steps,
            "category": [ASSESSMENT_CATEGORY],
            "severity": severity,
            "userImpact": "Low",
            "implementationEffort": "Low",
            "assessmentType": "CustomerManaged",
        }
    }


def build_assessment_payload(
    finding: Finding,
    scope: TargetScope,
    endpoint: str,
    conclusion: Conclusion,
) -> dict[str, Any]:
    return {
        "properties": {
            "resourceDetails": {
                "id": scope.resource_id(endpoint),
                "source": "Azure",
            },
            "status": {
                "cause": ASSESSMENT_CAUSE,
                "code": str(conclusion),
                "description": finding.description,
            },
        }
    }


def resolve_scope(
    subscription_id: str,
    resource_group: str | None,
    cluster_name: str | None = None,
    web_app_name: str | None = None,
) -> TargetScope:
    """Return the scope of the single cluster or web app being assessed."""
    if cluster_name and web_app_name:
        raise ConfigurationError("Supply either clusterName or webAppName, not both")
    if not cluster_name and not web_app_name:
        raise ConfigurationError("Supply clusterName or webAppName")
    if not resource_group:
        raise ConfigurationError("resourceGroup is required")

    base = f"subscriptions/{subscription_id}/resourceGroups/{resource_group}/providers"
    if cluster_name:
        return TargetScope(
            path=f"{base}/Microsoft.ContainerService/managedClusters/{cluster_name}",
            kind="managedCluster",
        )
    return TargetScope(path=f"{base}/Microsoft.Web/sites/{web_app_name}", kind="webApp")


def upsert_metadata(
    token: str,
    subscription_id: str,
    endpoint: str,
    metadata_id: str,
    finding: Finding,
    *,
    severity: str | None,
    display_name: str,
) -> str:
    """PUT the assessment metadata and return the ``name`` the service assigned."""
    if not severity or not severity.strip():
        raise ConfigurationError("severity is required")

    print("Creating assessment metadata")
    resp = send_request(
        "PUT",
        metadata_url(endpoint, subscription_id, metadata_id),
        headers=_auth_headers(token),
        json_body=build_metadata_payload(finding, display_name, severity),
    )

    payload = response_json(resp)
    name = payload.get("name") if isinstance(payload, dict) else None
    if not resp.ok or not name:
        raise RemoteWriteError(
            "Assessment metadata creation failed",
            status_code=resp.status_code,
            body=_raw_body(resp),
        )
    vprint(f"Assessment metadata created: {name}")
    return str(name)


def upsert_assessment_result(
    token: str,
    endpoint: str,
    metadata_id: str,
    finding: Finding,
    scope: TargetScope,
    conclusion: Conclusion,
) -> None:
    """PUT the assessment result on *scope*; only HTTP 200 counts as success."""
    resp = send_request(
        "PUT",
        assessment_url(endpoint, scope, metadata_id),
        headers=_auth_headers(token),
        json_body=build_assessment_payload(finding, scope, endpoint, conclusion),
    )
    if resp.status_code != 200:
        print("Assessment creation failed")
        raise RemoteWriteError(
            "Assessment creation failed",
            status_code=resp.status_code,
            body=_raw_body(resp),
        )
    print("Successfully created assessment")


def publish_assessment(
    token: str,
    subscription_id: str,
    endpoint: str,
    metadata_id: str,
    finding: Finding,
    scope: TargetScope,
    *,
    severity: str | None,
    display_name: str,
    conclusion: Conclusion,
    on_metadata_upserted: Callable[[str], None] | None = None,
) -> str:
    """Upsert the metadata definition, then the result that references it.

    Returns the metadata name reported by the service.
    """
    name = upsert_metadata(
        token,
        subscription_id,
        endpoint,
        metadata_id,
        finding,
        severity=severity,
        display_name=display_name,
    )
    if on_metadata_upserted is not None:
        on_metadata_upserted(name)
    upsert_assessment_result(token, endpoint, metadata_id, finding, scope, conclusion)
    return name
