"""
Data Models for the Flakebot Report Workflow

Dataclass-based models shared by the validator, archive builder, API client
and orchestrator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .exceptions import DecodeError


@dataclass
class ReporterConfig:
    """Configuration for a single reporter run"""
    api_url: str
    api_key: str
    request_timeout: int = 30
    upload_timeout: int = 300
    archive_name: str = "report.zip"
    report_pattern: str = ".xml"

    def get_headers(self) -> Dict[str, str]:
        """Get authentication headers for API requests"""
        return {"X-Reporter-Key": self.api_key}

    def endpoint(self, path: str) -> str:
        """Join the API base URL and an endpoint path"""
        return self.api_url.rstrip("/") + "/" + path.lstrip("/")

    def masked_key(self) -> str:
        return f"{self.api_key[:4]}..." if self.api_key else ""


@dataclass
class PresignedFields:
    """Form fields that must accompany a presigned POST"""
    key: str
    aws_access_key_id: str
    policy: str
    signature: str

    WIRE_NAMES = (
        ("key", "key"),
        ("aws_access_key_id", "AWSAccessKeyId"),
        ("policy", "policy"),
        ("signature", "signature"),
    )

    def to_form_fields(self) -> Dict[str, str]:
        """Wire-named form fields, values untouched"""
        return {wire: getattr(self, attr) for attr, wire in self.WIRE_NAMES}


@dataclass
class PresignedUpload:
    """Presigned storage upload descriptor"""
    url: str
    fields: PresignedFields

    @classmethod
    def from_dict(cls, data: Any, endpoint: Optional[str] = None) -> "PresignedUpload":
        """Decode the upload-issuance response body"""
        if not isinstance(data, dict):
            raise DecodeError("Upload response is not a JSON object", endpoint=endpoint)

        url = data.get("url")
        raw_fields = data.get("fields")
        if not isinstance(url, str) or not isinstance(raw_fields, dict):
            raise DecodeError("Upload response is missing 'url' or 'fields'", endpoint=endpoint)

        values = {}
        for attr, wire in PresignedFields.WIRE_NAMES:
            value = raw_fields.get(wire)
            if not isinstance(value, str):
                raise DecodeError(f"Upload response field '{wire}' is missing or not a string",
                                  endpoint=endpoint)
            values[attr] = value

        return cls(url=url, fields=PresignedFields(**values))


@dataclass(frozen=True)
class Provider:
    """Static description of a supported CI provider"""
    name: str
    label: str
    sentinel: str
    metadata_keys: Tuple[str, ...]

    def is_active(self, environ: Mapping[str, str]) -> bool:
        return environ.get(self.sentinel) == "true"

    def collect(self, environ: Mapping[str, str]) -> Dict[str, str]:
        """Copy every metadata variable, empty string when unset"""
        return {key: environ.get(key, "") for key in self.metadata_keys}


@dataclass
class Report:
    """Report record correlating an uploaded archive with its CI run"""
    archive: str
    provider: str
    metadata: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "archive": self.archive,
            "provider": self.provider,
            "metadata": dict(self.metadata),
        }


@dataclass
class ReportResult:
    """Outcome of a successful pipeline run"""
    archive: str
    provider: str
    archive_path: str
    total_time_seconds: Optional[float] = None
