"""Errors raised while extracting chapters from an EPUB archive."""


class EpubError(Exception):
    """Base error for EPUB extraction failures."""

    user_message = "Failed to parse EPUB file."

    def __init__(self, message: str | None = None):
        self.message = message or self.user_message
        super().__init__(self.message)


class MalformedArchive(EpubError):
    """The input bytes are not a valid ZIP archive."""

    user_message = "Not a valid EPUB archive."


class InvalidContainer(EpubError):
    """META-INF/container.xml is missing or has no rootfile path."""

    user_message = "The EPUB archive is structurally invalid."


class InvalidPackageDescriptor(EpubError):
    """The package descriptor (OPF) is missing or incomplete."""

    user_message = "The EPUB archive is structurally invalid."


class ParseTimeout(EpubError):
    """Waiting for the archive structure took longer than allowed."""

    user_message = "Parsing the EPUB took too long."


class SectionLoadFailure(EpubError):
    """A single spine document could not be loaded or cleaned.

    Not fatal: the pipeline drops the section and keeps going.
    """

    user_message = "A section of the EPUB could not be read."

    def __init__(self, section_id: str, href: str, cause: Exception | str):
        self.section_id = section_id
        self.href = href
        self.cause = cause
        super().__init__(f"{section_id} ({href}): {cause}")
