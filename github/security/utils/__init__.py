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

"""Defender for Cloud assessment publishing utilities.

Modules
-------
errors          Exception taxonomy (configuration, credential, remote write).
models          Core dataclasses (Credentials, Finding, RunContext, TargetScope) and ``Conclusion``.
templates       Description / remediation templates and ``{{ placeholder }}`` rendering.
credentials     Azure AD client-credentials token acquisition.
sarif           Best-effort SARIF report summarisation.
findings        Finding construction from SARIF / check-run signals and the health verdict.
assessment      Assessment metadata and assessment result upserts.
workflow        Linear orchestration of the above (``AssessmentWorkflow``).
"""
