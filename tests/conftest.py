import json

import pytest

from security.utils.findings import FindingContext
from security.utils.models import Credentials, RunContext
from shared.github_checks import CheckRunResult


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class RecordingTransport:
    """Stands in for ``send_request``; replays queued responses in order."""

    def __init__(self):
        self.calls = []
        self.responses = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def __call__(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def transport(monkeypatch):
    fake = RecordingTransport()
    monkeypatch.setattr("security.utils.credentials.send_request", fake)
    monkeypatch.setattr("security.utils.assessment.send_request", fake)
    return fake


@pytest.fixture
def credentials():
    return Credentials(
        client_id="app-id",
        client_secret="s3cret",
        tenant_id="tenant-1",
        subscription_id="sub-1",
    )


@pytest.fixture
def run_context():
    return RunContext(repository="octo/shop", run_id="42", workflow="deploy")


def check_run(name, conclusion="success", text="", url="https://github.com/octo/shop/runs/1"):
    return CheckRunResult(name=name, conclusion=conclusion, html_url=url, output_text=text)


@pytest.fixture
def make_context(run_context):
    def _make(runs=None, report_path=None, title=None, summary=""):
        lookups = []

        def lookup(commit_id):
            lookups.append(commit_id)
            return list(runs or [])

        ctx = FindingContext(
            run=run_context,
            commit_id="abc123",
            lookup_check_runs=lookup,
            summarise_report=lambda path: summary,
            report_path=report_path,
            title_override=title,
        )
        ctx.lookups = lookups
        return ctx

    return _make
