class LodCheckerError(Exception):
    pass


class ConfigError(LodCheckerError):
    pass


class ImageDecodeError(LodCheckerError):
    """The selected file could not be read as an image."""


class AnalysisError(LodCheckerError):
    pass


class ServiceError(AnalysisError):
    """The analysis service failed or returned no content."""


class SchemaViolationError(AnalysisError):
    """The analysis service answered with text that does not match the report schema."""
