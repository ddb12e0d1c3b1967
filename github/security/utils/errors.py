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

"""Exception types raised while publishing an assessment."""

from __future__ import annotations


class AssessmentError(Exception):
    """Base exception for assessment publishing failures."""


class ConfigurationError(AssessmentError):
    """Raised when required configuration is missing or conflicting."""


class CredentialError(AssessmentError):
    """Raised when a bearer token cannot be obtained."""


class ExpiredOrInvalidCredentialError(CredentialError):
    """The token endpoint rejected the service principal (400/401/403)."""

    def __init__(self, status_code: int):
        super().__init__(f"ExpiredOrInvalidCredential: token endpoint returned HTTP {status_code}")
        self.status_code = status_code


class TokenAcquisitionFailedError(CredentialError):
    """The token endpoint failed for any other reason."""

    def __init__(self, status_code: int, detail: str = ""):
        message = f"TokenAcquisitionFailed: token endpoint returned HTTP {status_code}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.status_code = status_code


class RemoteWriteError(AssessmentError):
    """A metadata or assessment PUT was not accepted; carries the raw body."""

    def __init__(self, message: str, *, status_code: int, body: str):
        super().__init__(f"{message} (HTTP {status_code}): {body}")
        self.status_code = status_code
        self.body = body


class CheckRunLookupError(AssessmentError):
    """The GitHub check-run lookup for the commit failed."""

    def __init__(self, commit_id: str, detail: str):
        super().__init__(f"Check-run lookup failed for commit {commit_id}: {detail}")
        self.commit_id = commit_id
