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

"""GitHub Checks lookup – read-only retrieval of the check-runs recorded for
a commit via PyGithub, flattened into plain ``CheckRunResult`` records.
"""

from __future__ import annotations

from dataclasses import dataclass

from github import Auth, Github

from .common import vprint


@dataclass(frozen=True)
class CheckRunResult:
    """One CI check-run outcome for a commit."""
    name: str
    conclusion: str | None
    html_url: str
    output_text: str


def _to_result(run) -> CheckRunResult:
    output = getattr(run, "output", None)
    text = getattr(output, "text", None) if output is not None else None
    return CheckRunResult(
        name=str(run.name or ""),
        conclusion=run.conclusion,
        html_url=str(run.html_url or ""),
        output_text=str(text or ""),
    )


def fetch_check_runs(repo_full: str, commit_sha: str, token: str | None = None) -> list[CheckRunResult]:
    """Return all check-runs for *commit_sha* in *repo_full* (``owner/repo``)."""
    gh = Github(auth=Auth.Token(token)) if token else Github()
    repo = gh.get_repo(repo_full)
    commit = repo.get_commit(commit_sha)
    runs = [_to_result(run) for run in commit.get_check_runs()]
    vprint(f"Fetched {len(runs)} check-run(s) for {repo_full}@{commit_sha[:12]}")
    return runs


class CheckRunLookup:
    """Callable bound to a repository and token, used as the check-run source."""

    def __init__(self, repo_full: str, token: str | None = None) -> None:
        self.repo_full = repo_full
        self.token = token

    def __call__(self, commit_sha: str) -> list[CheckRunResult]:
        return fetch_check_runs(self.repo_full, commit_sha, self.token)
