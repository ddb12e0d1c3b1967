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

"""SARIF summarisation – best-effort flattening of a SARIF report into the
plain-text summary used as assessment remediation text.

Parsing is deliberately lossy: a missing file, invalid JSON or an unexpected
document shape produce an empty summary and a warning, never an exception.
"""

from __future__ import annotations

import json
import os
from typing import Any

from shared.common import vprint, warn

RESULT_SEPARATOR = " \n ----------------- \n "


def _result_messages(document: Any) -> list[str]:
    messages: list[str] = []
    if not isinstance(document, dict):
        return messages
    runs = document.get("runs")
    if not isinstance(runs, list):
        return messages
    for run in runs:
        if not isinstance(run, dict):
            continue
        results = run.get("results")
        if not isinstance(results, list):
            continue
        for result in results:
            if not isinstance(result, dict):
                continue
            message = result.get("message")
            text = message.get("text") if isinstance(message, dict) else None
            if text:
                messages.append(str(text))
    return messages


def summarise_sarif_document(document: Any) -> str:
    """Join every ``runs[].results[].message.text`` with ``RESULT_SEPARATOR``."""
    return RESULT_SEPARATOR.join(_result_messages(document))


def summarise_sarif(path: str) -> str:
    """Read the SARIF file at *path* and return its summary ("" on any failure)."""
    if not os.path.exists(path):
        warn(f"SARIF file not found: {path}")
        return ""

    try:
        with open(path, "r", encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        warn(f"failed to parse SARIF file {path}: {exc}")
        return ""

    summary = summarise_sarif_document(document)
    vprint(f"Summarised SARIF file {path} ({len(summary)} chars)")
    return summary
