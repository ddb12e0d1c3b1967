import json

from security.utils.sarif import summarise_sarif, summarise_sarif_document


def test_single_result_summary():
    doc = {"runs": [{"results": [{"message": {"text": "A"}}]}]}
    assert summarise_sarif_document(doc) == "A"


def test_results_are_joined_with_separator():
    doc = {"runs": [{"results": [{"message": {"text": "A"}}, {"message": {"text": "B"}}]}]}
    assert summarise_sarif_document(doc) == "A \n ----------------- \n B"


def test_results_across_runs_and_without_text():
    doc = {
        "runs": [
            {"results": [{"message": {"text": "A"}}, {"message": {}}, None]},
            {"results": []},
            {"tool": {"driver": {"name": "trivy"}}},
            {"results": [{"message": {"text": "C"}}]},
        ]
    }
    assert summarise_sarif_document(doc) == "A \n ----------------- \n C"


def test_unexpected_shapes_yield_empty_summary():
    assert summarise_sarif_document(None) == ""
    assert summarise_sarif_document([]) == ""
    assert summarise_sarif_document({"runs": "nope"}) == ""
    assert summarise_sarif_document({"runs": [{"results": {"message": "x"}}]}) == ""


def test_file_summary(tmp_path):
    path = tmp_path / "results.sarif"
    path.write_text(json.dumps({"runs": [{"results": [{"message": {"text": "CVE-2023-1234 in openssl"}}]}]}))

    assert summarise_sarif(str(path)) == "CVE-2023-1234 in openssl"


def test_malformed_file_yields_empty_summary(tmp_path, capsys):
    path = tmp_path / "broken.sarif"
    path.write_text("{ this is not json")

    assert summarise_sarif(str(path)) == ""
    assert "WARN:" in capsys.readouterr().err


def test_missing_file_yields_empty_summary(tmp_path, capsys):
    assert summarise_sarif(str(tmp_path / "absent.sarif")) == ""
    assert "SARIF file not found" in capsys.readouterr().err
