"""Exception types raised by the conversion and publishing stages"""


class DocpubError(Exception):
    """Base class for pipeline errors."""


class ConversionError(DocpubError):
    """An external converter (e.g. the AsciiDoc processor) failed."""


class PublishError(DocpubError):
    """A document could not be prepared for upload."""
