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

"""Assessment data models."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any
from urllib.parse import quote

from .errors import ConfigurationError

DEFAULT_AUTHORITY_URL = "https://login.microsoftonline.com"
DEFAULT_RESOURCE_MANAGER_URL = "https://management.azure.com/"


class Conclusion(StrEnum):
    """Health verdict reported as the assessment status code."""
    HEALTHY = "Healthy"
    UNHEALTHY = "Unhealthy"

    def merge(self, failed: bool) -> "Conclusion":
        """Return the verdict after observing one more result.

        ``UNHEALTHY`` is absorbing: once reached it never reverts.
        """
        if self is Conclusion.UNHEALTHY or failed:
            return Conclusion.UNHEALTHY
        return Conclusion.HEALTHY


class FindingSource(StrEnum):
    REPORT = "report"
    CHECK_RUNS = "check-runs"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Finding:
    title: str
    description: str
    remediation_steps: str
    source: FindingSource


# JSON key -> attribute, for the fields that must be present in the creds blob.
_REQUIRED_CREDENTIAL_KEYS: dict[str, str] = {
    "clientId": "client_id",
    "clientSecret": "client_secret",
    "tenantId": "tenant_id",
    "subscriptionId": "subscription_id",
}


@dataclass(frozen=True)
class Credentials:
    """Service principal credentials as emitted by ``az ad sp create-for-rbac --sdk-auth``."""
    client_id: str
    client_secret: str
    tenant_id: str
    subscription_id: str
    authority_url: str = DEFAULT_AUTHORITY_URL
    resource_manager_endpoint_url: str = DEFAULT_RESOURCE_MANAGER_URL

    def __repr__(self) -> str:
        return (
            f"Credentials(client_id={self.client_id!r}, tenant_id={self.tenant_id!r}, "
            f"subscription_id={self.subscription_id!r}, client_secret='***')"
        )

    @property
    def management_endpoint(self) -> str:
        return (self.resource_manager_endpoint_url or DEFAULT_RESOURCE_MANAGER_URL).rstrip("/")

    def missing_identity_fields(self) -> list[str]:
        """Return the names of empty fields needed for the token exchange."""
        fields = {
            "clientId": self.client_id,
            "clientSecret": self.client_secret,
            "tenantId": self.tenant_id,
            "authorityUrl": self.authority_url,
        }
        return [name for name, value in fields.items() if not value]

    @classmethod
    def from_json(cls, raw: str | None) -> "Credentials":
        if not raw or not raw.strip():
            raise ConfigurationError("Credentials are required (creds input is empty)")
        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError("Credentials object is not a valid JSON") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("Credentials object must be a JSON object")

        missing = [key for key in _REQUIRED_CREDENTIAL_KEYS if not str(data.get(key) or "").strip()]
        if missing:
            raise ConfigurationError(
                f"Not all values are present in the creds object: missing {', '.join(missing)}"
            )

        values = {attr: str(data[key]).strip() for key, attr in _REQUIRED_CREDENTIAL_KEYS.items()}
        return cls(
            authority_url=str(data.get("activeDirectoryEndpointUrl") or DEFAULT_AUTHORITY_URL),
            resource_manager_endpoint_url=str(
                data.get("resourceManagerEndpointUrl") or DEFAULT_RESOURCE_MANAGER_URL
            ),
            **values,
        )


@dataclass(frozen=True)
class RunContext:
    """Identifies the GitHub Actions run that produced the assessment."""
    repository: str
    run_id: str
    workflow: str
    server_url: str = "https://github.com"

    @property
    def run_url(self) -> str:
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}?check_suite_focus=true"

    @property
    def workflow_url(self) -> str:
        return f"{self.server_url}/{self.repository}/actions?query=workflow%3A{quote(self.workflow)}"


@dataclass(frozen=True)
class TargetScope:
    """Resource path of the cluster or web app the assessment applies to."""
    path: str
    kind: str

    def resource_id(self, endpoint: str) -> str:
        return f"{endpoint.rstrip('/')}/{self.path}"


@dataclass
class CheckRunSignal:
    """Accumulated container-scan check-run details and the running verdict."""
    details: str = ""
    conclusion: Conclusion = Conclusion.HEALTHY
    matched: int = 0
    names: list[str] = field(default_factory=list)
