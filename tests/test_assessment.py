import pytest

from conftest import FakeResponse
from security.utils.assessment import (
    assessment_url,
    metadata_url,
    publish_assessment,
    resolve_scope,
    upsert_assessment_result,
    upsert_metadata,
)
from security.utils.errors import ConfigurationError, RemoteWriteError
from security.utils.models import Conclusion, Finding, FindingSource

ENDPOINT = "https://management.azure.com"


@pytest.fixture
def finding():
    return Finding(
        title="Image scan",
        description="Results of running the scan",
        remediation_steps="Upgrade openssl",
        source=FindingSource.CHECK_RUNS,
    )


@pytest.fixture
def cluster_scope():
    return resolve_scope("sub-1", "rg-prod", cluster_name="aks-prod")


def test_cluster_scope_path(cluster_scope):
    assert cluster_scope.path == (
        "subscriptions/sub-1/resourceGroups/rg-prod/providers/"
        "Microsoft.ContainerService/managedClusters/aks-prod"
    )
    assert cluster_scope.kind == "managedCluster"


def test_web_app_scope_path():
    scope = resolve_scope("sub-1", "rg-prod", web_app_name="shop-web")
    assert scope.path == "subscriptions/sub-1/resourceGroups/rg-prod/providers/Microsoft.Web/sites/shop-web"
    assert scope.kind == "webApp"


def test_scope_requires_cluster_or_web_app():
    with pytest.raises(ConfigurationError, match="clusterName or webAppName"):
        resolve_scope("sub-1", "rg-prod")


def test_scope_rejects_both_targets():
    with pytest.raises(ConfigurationError, match="not both"):
        resolve_scope("sub-1", "rg-prod", cluster_name="aks", web_app_name="web")


def test_scope_requires_resource_group():
    with pytest.raises(ConfigurationError, match="resourceGroup"):
        resolve_scope("sub-1", "", cluster_name="aks")


def test_urls(cluster_scope):
    assert metadata_url(ENDPOINT + "/", "sub-1", "guid-1") == (
        "https://management.azure.com/subscriptions/sub-1/providers/Microsoft.Security/"
        "assessmentMetadata/guid-1?api-version=2020-01-01"
    )
    assert assessment_url(ENDPOINT, cluster_scope, "guid-1") == (
        f"{ENDPOINT}/{cluster_scope.path}/providers/Microsoft.Security/assessments/guid-1?api-version=2020-01-01"
    )


def test_metadata_upsert_returns_name(transport, finding):
    transport.queue(FakeResponse(200, {"name": "m1", "id": "/subscriptions/sub-1/.../m1"}))

    name = upsert_metadata(
        "tok", "sub-1", ENDPOINT, "guid-1", finding, severity="High", display_name="Image scan - deploy - 42"
    )

    assert name == "m1"
    call = transport.calls[0]
    assert call["method"] == "PUT"
    assert call["headers"]["Authorization"] == "Bearer tok"
    assert "retriable_status_codes" not in call
    assert call["json_body"] == {
        "properties": {
            "displayName": "Image scan - deploy - 42",
            "description": "Results of running the scan",
            "remediationDescription": "Upgrade openssl",
            "category": ["Compute"],
            "severity": "High",
            "userImpact": "Low",
            "implementationEffort": "Low",
            "assessmentType": "CustomerManaged",
        }
    }


def test_metadata_upsert_without_name_fails_with_body(transport, finding):
    transport.queue(FakeResponse(200, {"properties": {}}))

    with pytest.raises(RemoteWriteError) as excinfo:
        upsert_metadata("tok", "sub-1", ENDPOINT, "guid-1", finding, severity="High", display_name="n")

    assert excinfo.value.body == '{"properties": {}}'
    assert excinfo.value.status_code == 200


def test_metadata_upsert_non_2xx_fails(transport, finding):
    transport.queue(FakeResponse(403, {"error": {"code": "AuthorizationFailed"}, "name": "ignored"}))

    with pytest.raises(RemoteWriteError) as excinfo:
        upsert_metadata("tok", "sub-1", ENDPOINT, "guid-1", finding, severity="High", display_name="n")

    assert "AuthorizationFailed" in excinfo.value.body


@pytest.mark.parametrize("severity", [None, "", "  "])
def test_metadata_upsert_requires_severity(transport, finding, severity):
    with pytest.raises(ConfigurationError, match="severity"):
        upsert_metadata("tok", "sub-1", ENDPOINT, "guid-1", finding, severity=severity, display_name="n")

    assert transport.calls == []


def test_assessment_upsert_payload(transport, finding, cluster_scope):
    transport.queue(FakeResponse(200, {"name": "guid-1"}))

    upsert_assessment_result("tok", ENDPOINT, "guid-1", finding, cluster_scope, Conclusion.UNHEALTHY)

    body = transport.calls[0]["json_body"]["properties"]
    assert body["resourceDetails"] == {"id": f"{ENDPOINT}/{cluster_scope.path}", "source": "Azure"}
    assert body["status"] == {
        "cause": "Created Using a GitHub action",
        "code": "Unhealthy",
        "description": "Results of running the scan",
    }


@pytest.mark.parametrize("status", [201, 400, 500])
def test_assessment_upsert_accepts_only_200(transport, finding, cluster_scope, status):
    transport.queue(FakeResponse(status, text="bad request"))

    with pytest.raises(RemoteWriteError) as excinfo:
        upsert_assessment_result("tok", ENDPOINT, "guid-1", finding, cluster_scope, Conclusion.HEALTHY)

    assert excinfo.value.body == "bad request"
    assert excinfo.value.status_code == status


def test_publish_writes_metadata_before_assessment(transport, finding, cluster_scope):
    transport.queue(FakeResponse(200, {"name": "m1"}), FakeResponse(200, {}))
    seen = []

    name = publish_assessment(
        "tok", "sub-1", ENDPOINT, "guid-1", finding, cluster_scope,
        severity="Medium", display_name="n", conclusion=Conclusion.HEALTHY,
        on_metadata_upserted=seen.append,
    )

    assert name == "m1"
    assert seen == ["m1"]
    assert "/assessmentMetadata/guid-1" in transport.calls[0]["url"]
    assert "/assessments/guid-1" in transport.calls[1]["url"]


def test_publish_stops_after_failed_metadata(transport, finding, cluster_scope):
    transport.queue(FakeResponse(500, text="boom"))

    with pytest.raises(RemoteWriteError):
        publish_assessment(
            "tok", "sub-1", ENDPOINT, "guid-1", finding, cluster_scope,
            severity="Medium", display_name="n", conclusion=Conclusion.HEALTHY,
        )

    assert len(transport.calls) == 1
