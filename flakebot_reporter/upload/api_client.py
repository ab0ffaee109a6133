"""
Flakebot API Client

Handles every HTTP exchange of a reporter run: requesting a presigned
upload, posting the archive to storage, and submitting the final report.
None of the calls are retried; failures surface as ReporterError subclasses.
"""

import logging
import os
from typing import Optional

import requests

from .models import ReporterConfig, PresignedUpload, Report
from .exceptions import BadStatusError, DecodeError, TransportError


class FlakebotAPIClient:
    """Handles all API interactions with the Flakebot service and storage"""

    UPLOAD_ENDPOINT = "reports/upload/"
    REPORT_ENDPOINT = "reports/"

    def __init__(self, config: ReporterConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.session.close()

    def request_presigned_upload(self) -> PresignedUpload:
        """POST /reports/upload/"""
        url = self.config.endpoint(self.UPLOAD_ENDPOINT)

        response = self._post(
            url,
            data=b"",
            headers=self.config.get_headers(),
            timeout=self.config.request_timeout,
        )
        self._expect_status(response, requests.codes.ok, url)

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Could not decode upload response: {e}", endpoint=url)

        presigned = PresignedUpload.from_dict(data, endpoint=url)
        self.logger.info(f"Received presigned upload for key {presigned.fields.key}")
        return presigned

    def upload_archive(self, archive_path: str, presigned: PresignedUpload) -> None:
        """Multipart POST of the archive to the presigned storage URL"""
        fields = presigned.fields.to_form_fields()

        with open(archive_path, "rb") as f:
            files = {"file": (os.path.basename(archive_path), f)}
            # No reporter key here, the storage endpoint only trusts the signed fields
            response = self._post(
                presigned.url,
                data=fields,
                files=files,
                timeout=self.config.upload_timeout,
            )

        self._expect_status(response, requests.codes.no_content, presigned.url)
        self.logger.info(f"Uploaded {archive_path} to storage")

    def submit_report(self, report: Report) -> None:
        """POST /reports/"""
        url = self.config.endpoint(self.REPORT_ENDPOINT)

        response = self._post(
            url,
            json=report.to_dict(),
            headers=self.config.get_headers(),
            timeout=self.config.request_timeout,
        )
        self._expect_status(response, requests.codes.created, url)
        self.logger.info(f"Submitted report for archive {report.archive}")

    def _post(self, url: str, **kwargs) -> requests.Response:
        self.logger.debug(f"POST {url}")
        try:
            return self.session.post(url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}", endpoint=url, original_exception=e)

    def _expect_status(self, response: requests.Response, expected: int, endpoint: str):
        """Raise BadStatusError unless the response has the expected status"""
        if response.status_code != expected:
            self.logger.debug(f"{endpoint} answered {response.status_code}: {response.text[:200]}")
            raise BadStatusError(response.status_code, response.reason, endpoint=endpoint)
