"""
CI Provider Detection

Holds the static, priority-ordered table of supported CI providers and the
detector that picks one from the process environment. Each provider knows
its sentinel variable and the environment variables copied into the report
metadata; adding a provider only means adding a row to PROVIDERS.
"""

import logging
import os
from typing import Mapping, Optional, Sequence

from .exceptions import UnsupportedProviderError
from .models import Provider

logger = logging.getLogger(__name__)


CIRCLE_CI = Provider(
    name="circle_ci",
    label="CircleCI",
    sentinel="CIRCLECI",
    metadata_keys=(
        "CIRCLE_BRANCH",
        "CIRCLE_BUILD_NUM",
        "CIRCLE_BUILD_URL",
        "CIRCLE_NODE_INDEX",
        "CIRCLE_NODE_TOTAL",
        "CIRCLE_PR_NUMBER",
        "CIRCLE_PR_USERNAME",
        "CIRCLE_PR_REPONAME",
        "CIRCLE_PROJECT_REPONAME",
        "CIRCLE_PROJECT_USERNAME",
        "CIRCLE_PULL_REQUEST",
        "CIRCLE_PULL_REQUESTS",
        "CIRCLE_REPOSITORY_URL",
        "CIRCLE_SHA1",
        "CIRCLE_TAG",
        "CIRCLE_WORKFLOW_ID",
        "CIRCLE_WORKFLOW_JOB_ID",
        "CIRCLE_WORKFLOW_WORKSPACE_ID",
    ),
)

GITHUB_ACTIONS = Provider(
    name="github_action",
    label="GitHub Actions",
    sentinel="GITHUB_ACTIONS",
    metadata_keys=(
        "GITHUB_JOB",
        "GITHUB_REF",
        "GITHUB_REF_NAME",
        "GITHUB_REF_TYPE",
        "GITHUB_REPOSITORY",
        "GITHUB_RUN_ID",
        "GITHUB_SHA",
        "GITHUB_RUN_ATTEMPT",
        "RUNNER_ARCH",
        "RUNNER_OS",
        "RUNNER_TEMP",
    ),
)

# Checked in order, first active sentinel wins
PROVIDERS = (CIRCLE_CI, GITHUB_ACTIONS)


class ProviderDetector:
    """Selects the CI provider for the current run"""

    def __init__(self, providers: Sequence[Provider] = PROVIDERS):
        self.providers = tuple(providers)

    def find(self, environ: Optional[Mapping[str, str]] = None) -> Optional[Provider]:
        """Return the first provider whose sentinel is active, or None"""
        environ = os.environ if environ is None else environ

        for provider in self.providers:
            if provider.is_active(environ):
                return provider
        return None

    def detect(self, environ: Optional[Mapping[str, str]] = None) -> Provider:
        """Return the active provider or raise UnsupportedProviderError"""
        provider = self.find(environ)
        if provider is None:
            raise UnsupportedProviderError(", ".join(p.label for p in self.providers))

        logger.info(f"Detected CI provider: {provider.name}")
        return provider
