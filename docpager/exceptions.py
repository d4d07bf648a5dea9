"""Custom exceptions for docpager."""

from typing import Optional


class DocPagerError(Exception):
    """Base exception for docpager errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(DocPagerError):
    """Exception raised for layout set-ups that can never produce a valid page."""

    pass


class GeometryError(ConfigurationError):
    """Exception raised when a page geometry cannot hold any content."""

    pass


class LayoutConfigurationError(ConfigurationError):
    """Exception raised when a fixed-height section cannot fit on an empty page."""

    pass


class ModelError(DocPagerError):
    """Exception raised when document records cannot be turned into a model."""

    pass


class RenderingError(DocPagerError):
    """Exception raised while drawing pages onto an output surface."""

    pass
