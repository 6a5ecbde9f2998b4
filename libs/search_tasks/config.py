"""
Search tasks configuration
Settings come from environment variables with local defaults.
"""

import os


class Config:
    """Configuration for search task synchronization"""

    # Search service
    SEARCH_URL: str = os.getenv("SEARCH_URL", "http://localhost:7700")
    SEARCH_API_KEY: str = os.getenv("SEARCH_API_KEY", "masterKey")
    HTTP_TIMEOUT_SECONDS: float = float(
        os.getenv("HTTP_TIMEOUT_SECONDS", "30")
    )

    # Task polling
    TASK_TIMEOUT_SECONDS: float = float(
        os.getenv("TASK_TIMEOUT_SECONDS", "5.0")
    )
    TASK_POLL_INTERVAL_SECONDS: float = float(
        os.getenv("TASK_POLL_INTERVAL_SECONDS", "0.05")
    )

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # OpenTelemetry
    OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "search-tasks")
    OTLP_ENDPOINT: str = os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317"
    )
    OTEL_METRICS_EXPORT_INTERVAL_MS: int = int(
        os.getenv("OTEL_METRICS_EXPORT_INTERVAL_MS", "10000")
    )
    OTEL_SDK_DISABLED: bool = (
        os.getenv("OTEL_SDK_DISABLED", "true").lower() == "true"
    )
    OTEL_METRICS_ENABLED: bool = (
        os.getenv("OTEL_METRICS_ENABLED", "false").lower() == "true"
    )

    @classmethod
    def validate(cls) -> None:
        """Validate configuration"""
        if not cls.SEARCH_URL:
            raise ValueError("SEARCH_URL is required")

        if cls.TASK_TIMEOUT_SECONDS <= 0:
            raise ValueError("TASK_TIMEOUT_SECONDS must be positive")

        if cls.TASK_POLL_INTERVAL_SECONDS <= 0:
            raise ValueError("TASK_POLL_INTERVAL_SECONDS must be positive")

        if cls.HTTP_TIMEOUT_SECONDS <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be positive")
