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

"""HTTP transport – one request per call over ``requests``, with optional
transport-level retries on a caller-supplied set of transient status codes.

Retries are opt-in: calls that do not pass ``retriable_status_codes`` are
sent exactly once. When retries are exhausted the last response is returned
unchanged so the caller can map the status code itself.
"""

from __future__ import annotations

from typing import Any, Iterable

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from .common import vprint

DEFAULT_TIMEOUT = 30
DEFAULT_RETRY_COUNT = 3
DEFAULT_BACKOFF_FACTOR = 0.5

TRANSIENT_STATUS_CODES: tuple[int, ...] = (400, 408, 409, 500, 502, 503, 504)


def build_retry(
    status_codes: Iterable[int],
    *,
    retry_count: int = DEFAULT_RETRY_COUNT,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
) -> Retry:
    """Return a ``Retry`` policy that retries any HTTP method on *status_codes*."""
    return Retry(
        total=retry_count,
        connect=0,
        read=0,
        status=retry_count,
        status_forcelist=sorted(set(status_codes)),
        allowed_methods=None,
        backoff_factor=backoff_factor,
        raise_on_status=False,
        respect_retry_after_header=True,
    )


def build_session(retriable_status_codes: Iterable[int] | None = None) -> requests.Session:
    """Create a session; mount a retrying adapter only when codes are given."""
    session = requests.Session()
    codes = list(retriable_status_codes or [])
    if codes:
        adapter = HTTPAdapter(max_retries=build_retry(codes))
    else:
        adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def send_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    data: Any = None,
    json_body: Any = None,
    retriable_status_codes: Iterable[int] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Response:
    """Execute one HTTP request and return the final response.

    Network-level failures surface as ``requests.RequestException`` and are
    not caught here.
    """
    vprint(f"HTTP {method} {url}")
    with build_session(retriable_status_codes) as session:
        resp = session.request(
            method,
            url,
            headers=headers,
            data=data,
            json=json_body,
            timeout=timeout,
        )
    vprint(f"HTTP {method} {url} -> {resp.status_code}")
    return resp


def response_json(resp: requests.Response) -> Any:
    """Return the decoded JSON body, or ``None`` when the body is not JSON."""
    try:
        return resp.json()
    except ValueError:
        return None
