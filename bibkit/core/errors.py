"""Error taxonomy for the citation pipeline."""


class BibKitError(Exception):
    """Base class for failures that abort a single pipeline invocation."""


class ExtractionError(BibKitError):
    """The input document or URL cannot be traversed at all."""


class MissingTitleError(BibKitError):
    """No title signal of any provenance was found."""
