"""Configuration for test runs."""

from pydantic import BaseModel, Field


class HarnessConfig(BaseModel):
    """Configuration for a test run."""

    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Overall timeout in seconds (None means per-test allowance)",
    )
    seconds_per_test: float = Field(
        default=1.0,
        gt=0,
        description="Seconds allowed for each top-level test",
    )
    color: bool = Field(
        default=False,
        description="ANSI colors in the rendered summary",
    )

    def get_timeout(self, test_count: int) -> float:
        """Return the overall timeout for a run of `test_count` top-level tests."""
        if self.timeout is not None:
            return self.timeout
        return self.seconds_per_test * max(test_count, 1)
