"""
Integration Tests for the Report Orchestrator

Runs the whole pipeline with requests.Session.post mocked, checking call
order, correlation of the archive key and fail-fast behaviour.
"""

import os
import zipfile
import pytest
from unittest.mock import patch, Mock

import requests
from rich.console import Console

from flakebot_reporter.upload.report_orchestrator import ReportOrchestrator
from flakebot_reporter.upload.models import ReporterConfig
from flakebot_reporter.upload.providers import GITHUB_ACTIONS
from flakebot_reporter.upload.exceptions import (
    BadStatusError,
    ConfigError,
    MissingAPIKeyError,
    NotFoundError,
    TransportError,
    UnsupportedProviderError,
)

API_URL = "https://api.test.com"
STORAGE_URL = "https://storage.test.com/bucket"
FIELDS = {
    "key": "uploads/run-42.zip",
    "AWSAccessKeyId": "AKIAEXAMPLE",
    "policy": "cG9saWN5",
    "signature": "c2lnbmF0dXJl",
}

GITHUB_ENV = {
    "GITHUB_ACTIONS": "true",
    "GITHUB_JOB": "test",
    "GITHUB_REF": "refs/heads/main",
    "GITHUB_REF_NAME": "main",
    "GITHUB_REF_TYPE": "branch",
    "GITHUB_REPOSITORY": "acme/widgets",
    "GITHUB_RUN_ID": "1234",
    "GITHUB_SHA": "deadbeef",
    "GITHUB_RUN_ATTEMPT": "1",
    "RUNNER_ARCH": "X64",
    "RUNNER_OS": "Linux",
}


def make_response(status_code, reason="", json_data=None):
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    response.text = ""
    response.json.return_value = json_data
    return response


class FakeFlakebot:
    """Routes mocked POSTs and records what each endpoint received"""

    def __init__(self, issuance_status=200, upload_status=204, report_status=201):
        self.issuance_status = issuance_status
        self.upload_status = upload_status
        self.report_status = report_status
        self.calls = []
        self.uploaded = None
        self.report_body = None

    def __call__(self, url, **kwargs):
        self.calls.append(url)

        if url == f"{API_URL}/reports/upload/":
            return make_response(self.issuance_status, "OK", {"url": STORAGE_URL, "fields": FIELDS})

        if url == STORAGE_URL:
            name, fileobj = kwargs["files"]["file"]
            self.uploaded = {"fields": dict(kwargs["data"]), "filename": name, "content": fileobj.read()}
            return make_response(self.upload_status, "No Content")

        if url == f"{API_URL}/reports/":
            self.report_body = kwargs["json"]
            return make_response(self.report_status, "Created")

        return make_response(404, "Not Found")


class TestReportOrchestratorIntegration:
    """Integration tests for ReportOrchestrator workflow"""

    def setup_method(self):
        """Setup for each test"""
        self.config = ReporterConfig(api_url=API_URL, api_key="rk_test")
        self.console = Console(quiet=True)

    def make_reports(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        os.makedirs("reports")
        (tmp_path / "reports" / "result.xml").write_text("<testsuite tests='1'/>")
        return "reports"

    def test_successful_workflow(self, tmp_path, monkeypatch):
        """Test the full pipeline in a GitHub Actions environment"""
        path = self.make_reports(tmp_path, monkeypatch)
        fake = FakeFlakebot()
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", side_effect=fake):
            result = orchestrator.execute(path)

        assert fake.calls == [f"{API_URL}/reports/upload/", STORAGE_URL, f"{API_URL}/reports/"]

        assert fake.uploaded["fields"] == FIELDS
        assert fake.uploaded["filename"] == "report.zip"

        assert fake.report_body["archive"] == FIELDS["key"]
        assert fake.report_body["provider"] == "github_action"
        expected_metadata = {key: GITHUB_ENV.get(key, "") for key in GITHUB_ACTIONS.metadata_keys}
        assert fake.report_body["metadata"] == expected_metadata
        assert fake.report_body["metadata"]["RUNNER_TEMP"] == ""

        assert result.archive == FIELDS["key"]
        assert result.provider == "github_action"

        with zipfile.ZipFile(result.archive_path) as zf:
            assert zf.namelist() == ["reports/result.xml"]

    def test_uploaded_bytes_are_the_built_archive(self, tmp_path, monkeypatch):
        """Test that storage receives the archive written for this run"""
        path = self.make_reports(tmp_path, monkeypatch)
        fake = FakeFlakebot()
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", side_effect=fake):
            result = orchestrator.execute(path)

        with open(result.archive_path, "rb") as f:
            assert fake.uploaded["content"] == f.read()

    def test_issuance_failure_stops_before_archive(self, tmp_path, monkeypatch):
        """Test that a 503 from issuance aborts before build and upload"""
        path = self.make_reports(tmp_path, monkeypatch)
        fake = FakeFlakebot(issuance_status=503)
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", side_effect=fake):
            with pytest.raises(BadStatusError) as exc_info:
                orchestrator.execute(path)

        assert exc_info.value.status_code == 503
        assert fake.calls == [f"{API_URL}/reports/upload/"]
        assert not os.path.exists("report.zip")

    def test_no_provider_skips_submission(self, tmp_path, monkeypatch):
        """Test that an unknown CI never reaches the report endpoint"""
        path = self.make_reports(tmp_path, monkeypatch)
        fake = FakeFlakebot()
        orchestrator = ReportOrchestrator(self.config, environ={}, console=self.console)

        with patch.object(requests.Session, "post", side_effect=fake):
            with pytest.raises(UnsupportedProviderError):
                orchestrator.execute(path)

        assert f"{API_URL}/reports/" not in fake.calls
        assert fake.report_body is None

    def test_upload_failure_leaves_archive(self, tmp_path, monkeypatch):
        """Test that no cleanup happens after a failed upload"""
        path = self.make_reports(tmp_path, monkeypatch)
        fake = FakeFlakebot(upload_status=403)
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", side_effect=fake):
            with pytest.raises(BadStatusError) as exc_info:
                orchestrator.execute(path)

        assert exc_info.value.status_code == 403
        assert os.path.exists("report.zip")
        assert fake.calls == [f"{API_URL}/reports/upload/", STORAGE_URL]

    def test_submission_failure_propagates(self, tmp_path, monkeypatch):
        """Test that a rejected report is the pipeline's error"""
        path = self.make_reports(tmp_path, monkeypatch)
        fake = FakeFlakebot(report_status=400)
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", side_effect=fake):
            with pytest.raises(BadStatusError) as exc_info:
                orchestrator.execute(path)

        assert exc_info.value.status_code == 400

    def test_transport_error_propagates(self, tmp_path, monkeypatch):
        """Test that connection failures are not retried"""
        path = self.make_reports(tmp_path, monkeypatch)
        post = Mock(side_effect=requests.exceptions.ConnectionError("refused"))
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", post):
            with pytest.raises(TransportError):
                orchestrator.execute(path)

        assert post.call_count == 1

    def test_invalid_path_makes_no_requests(self, tmp_path, monkeypatch):
        """Test that validation runs before any network call"""
        monkeypatch.chdir(tmp_path)
        post = Mock()
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", post):
            with pytest.raises(NotFoundError):
                orchestrator.execute("missing")

        post.assert_not_called()

    def test_missing_api_key_makes_no_requests(self, tmp_path, monkeypatch):
        """Test that an empty key aborts before any network call"""
        path = self.make_reports(tmp_path, monkeypatch)
        post = Mock()
        config = ReporterConfig(api_url=API_URL, api_key="")
        orchestrator = ReportOrchestrator(config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", post):
            with pytest.raises(ConfigError):
                orchestrator.execute(path)

        post.assert_not_called()

    def test_injected_client(self, tmp_path, monkeypatch):
        """Test orchestration against a mocked API client"""
        path = self.make_reports(tmp_path, monkeypatch)
        client = Mock()
        client.request_presigned_upload.return_value = Mock(fields=Mock(key="k-1"))
        orchestrator = ReportOrchestrator(
            self.config, environ={"CIRCLECI": "true"}, console=self.console, client=client
        )

        result = orchestrator.execute(path)

        client.upload_archive.assert_called_once_with("report.zip", client.request_presigned_upload.return_value)
        report = client.submit_report.call_args[0][0]
        assert report.archive == "k-1"
        assert report.provider == "circle_ci"
        assert result.archive == "k-1"
        client.session.close.assert_not_called()

    def test_own_client_session_is_closed(self, tmp_path, monkeypatch):
        """Test that a client built by the orchestrator is closed after the run"""
        path = self.make_reports(tmp_path, monkeypatch)
        fake = FakeFlakebot()
        orchestrator = ReportOrchestrator(self.config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", side_effect=fake):
            with patch.object(requests.Session, "close") as close:
                orchestrator.execute(path)

        close.assert_called_once()

    def test_path_checked_before_api_key(self, tmp_path, monkeypatch):
        """Test that a bad path is reported even when the key is missing too"""
        monkeypatch.chdir(tmp_path)
        post = Mock()
        config = ReporterConfig(api_url=API_URL, api_key="")
        orchestrator = ReportOrchestrator(config, environ=GITHUB_ENV, console=self.console)

        with patch.object(requests.Session, "post", post):
            with pytest.raises(NotFoundError):
                orchestrator.execute("missing")

        post.assert_not_called()

    def test_missing_api_key_error_type(self, tmp_path, monkeypatch):
        """Test that a valid path with no key raises MissingAPIKeyError"""
        path = self.make_reports(tmp_path, monkeypatch)
        config = ReporterConfig(api_url=API_URL, api_key="")
        orchestrator = ReportOrchestrator(config, environ=GITHUB_ENV, console=self.console)

        with pytest.raises(MissingAPIKeyError) as exc_info:
            orchestrator.execute(path)

        assert exc_info.value.variable == "FLAKEBOT_REPORTER_KEY"
