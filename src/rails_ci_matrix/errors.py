"""Exception hierarchy for the matrix generator."""


class MatrixError(Exception):
    """Base class for errors that abort matrix generation."""


class ConfigNotFoundError(MatrixError):
    """Raised when the configuration document does not exist."""


class ConfigFormatError(MatrixError):
    """Raised when the configuration document cannot be parsed."""


class ManifestNotFoundError(MatrixError):
    """Raised when the project root or its version file is missing."""


class EmptyVersionCatalogError(MatrixError):
    """Raised when no Ruby version survives candidate filtering."""


class MissingRequiredFieldError(MatrixError):
    """Raised when a section or section item lacks a required key.

    Parameters
    ----------
    section : str
        Section name (e.g. ``lint``)
    field : str
        The missing key
    index : int | None
        Position of the offending item, or None for section-level keys
    """

    def __init__(self, section: str, field: str, index: int | None = None):
        self.section = section
        self.field = field
        self.index = index
        where = section if index is None else f"{section} item #{index + 1}"
        super().__init__(f"{where} is missing required key '{field}'")


class MalformedRequirementError(MatrixError):
    """Raised when a Rails version requirement cannot be parsed.

    The requirement matcher recovers from this error; it never aborts a run.
    """
