# src/signature_extractor/errors.py


class SignatureExtractionError(Exception):
    """Base class for errors raised by the extraction pipeline."""


class EnvironmentNotReady(SignatureExtractionError):
    """The vision runtime did not become ready within the allowed time."""

    def __init__(self, timeout_ms: float):
        super().__init__(f"Vision runtime not ready after {timeout_ms:.0f} ms")
        self.timeout_ms = timeout_ms


class ConfigError(SignatureExtractionError, ValueError):
    """config.toml is present but malformed."""
