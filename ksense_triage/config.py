from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationError
from .retry import RetryPolicy

DEFAULT_BASE_URL = "https://assessment.ksensetech.com/api"
DEFAULT_PAGE_LIMIT = 20


@dataclass(frozen=True)
class AssessmentConfig:
    """
    Everything the client needs to talk to the assessment API.

    Built once by the caller (the CLI reads KSENSE_API_KEY / KSENSE_BASE_URL)
    and passed in; nothing below this layer looks at the environment.
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    page_limit: int = DEFAULT_PAGE_LIMIT
    timeout: float = 30.0
    max_retries: int = 3
    base_delay: float = 1.0

    def __post_init__(self):
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError("api_key must be a non-empty string")
        if not self.base_url:
            raise ConfigurationError("base_url must be set")
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.page_limit < 1:
            raise ConfigurationError(f"page_limit must be >= 1, got {self.page_limit}")
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay < 0:
            raise ConfigurationError(f"base_delay must be >= 0, got {self.base_delay}")

    @property
    def headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key}

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.max_retries, base_delay=self.base_delay)
