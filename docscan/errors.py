"""Exceptions raised by the document scanning pipeline."""


class DocScanError(Exception):
    """Base class for all pipeline failures."""


class DecodeError(DocScanError, ValueError):
    """Input photo is corrupt, empty or in an unsupported format."""


class InvalidCornersError(DocScanError, ValueError):
    """Corner set is not four finite, non-negative points."""


class InvalidConfigError(DocScanError, ValueError):
    """A pipeline option is out of range."""


class EncodeError(DocScanError, RuntimeError):
    """The JPEG backend failed to compress the output."""
