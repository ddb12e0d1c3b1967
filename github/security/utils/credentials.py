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

"""Azure AD token acquisition – exchanges service principal credentials for a
short-lived ARM bearer token using the OAuth client-credentials grant.
"""

from __future__ import annotations

from shared.common import vprint
from shared.http_client import TRANSIENT_STATUS_CODES, response_json, send_request

from .errors import (
    ConfigurationError,
    ExpiredOrInvalidCredentialError,
    TokenAcquisitionFailedError,
)
from .models import Credentials

MANAGEMENT_RESOURCE = "https://management.azure.com"
REJECTED_CREDENTIAL_STATUSES = frozenset({400, 401, 403})


def token_url(credentials: Credentials) -> str:
    return f"{credentials.authority_url.rstrip('/')}/{credentials.tenant_id}/oauth2/token/"


def acquire_token(credentials: Credentials) -> str:
    """Return an access token for the Azure Resource Manager audience.

    Raises ``ConfigurationError`` without touching the network when any of
    clientId, clientSecret, tenantId or authorityUrl is empty.
    """
    missing = credentials.missing_identity_fields()
    if missing:
        raise ConfigurationError(
            "Not all values are present in the creds object. "
            f"Ensure clientId, clientSecret and tenantId are supplied (missing: {', '.join(missing)})"
        )

    resp = send_request(
        "POST",
        token_url(credentials),
        headers={"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"},
        data={
            "resource": MANAGEMENT_RESOURCE,
            "client_id": credentials.client_id,
            "grant_type": "client_credentials",
            "client_secret": credentials.client_secret,
        },
        retriable_status_codes=TRANSIENT_STATUS_CODES,
    )

    if resp.status_code == 200:
        payload = response_json(resp)
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise TokenAcquisitionFailedError(resp.status_code, "response has no access_token")
        vprint("Acquired Azure access token")
        return str(token)

    if resp.status_code in REJECTED_CREDENTIAL_STATUSES:
        raise ExpiredOrInvalidCredentialError(resp.status_code)

    raise TokenAcquisitionFailedError(resp.status_code)
