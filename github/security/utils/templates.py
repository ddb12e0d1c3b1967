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

"""Assessment text templates (HTML-ish, rendered by Defender for Cloud) and a
minimal ``{{ placeholder }}`` renderer.

Placeholders available to every template:
- ``workflow_url`` – link to the workflow definition runs list
- ``run_url``      – link to the workflow run that created the assessment
- ``details``      – scanner-specific text (check-run output or SARIF summary)
"""

import re
from typing import Any


PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def render_template(template: str, values: dict[str, Any]) -> str:
    """Replace ``{{ key }}`` placeholders; unknown keys render as empty text."""
    def repl(match: re.Match[str]) -> str:
        v = values.get(match.group(1))
        return "" if v is None else str(v)

    return PLACEHOLDER_RE.sub(repl, template)


CONTAINER_SCAN_TITLE = "Github container scanning for deployed container images"
FALLBACK_TITLE = "Assessment from github"
DEFAULT_DISPLAY_TITLE = "Assessment from GitHub Action"

CONTAINER_SCAN_DESCRIPTION_TEMPLATE = """Results of running the Github container scanning action on the image deployed to this cluster.
You can find <a href="{{ workflow_url }}">the workflow here</a>.
This assessment was created from <a href="{{ run_url }}">this workflow run</a>."""

FALLBACK_DESCRIPTION_TEMPLATE = """This security assessment has been created from GitHub actions workflow.

You can find <a href="{{ workflow_url }}">the workflow here</a>.
This assessment was created from <a href="{{ run_url }}">this workflow run</a>.

For mitigation take appropriate steps."""

SARIF_REMEDIATION_TEMPLATE = "{{ details }} \n "

CHECK_RUN_REMEDIATION_TEMPLATE = """{{ details }} \n
<b>Steps to remediate:</b>
If possible, update base images to a version that addresses these vulnerabilities.
If the vulnerabilities are known and acceptable, add them to the allowed list in the Github repo."""

FALLBACK_REMEDIATION = "You can do it yourself"

CHECK_RUN_ENTRY_TEMPLATE = """The check-run can be found <a href="{{ html_url }}"> here </a>
{{ text }}"""
