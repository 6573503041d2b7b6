"""Exceptions surfaced to callers of the evidence search pipeline."""


class EvidenceSearchError(Exception):
    """Base class for errors raised by the evidence search pipeline."""
    pass


class ServiceUnavailableError(EvidenceSearchError):
    """
    No requested source is configured, so the search cannot run at all.

    Distinct from an empty result: the caller should present a
    "service unavailable" state rather than "no results found".
    """

    def __init__(self, message: str, missing: tuple = ()):
        self.missing = tuple(missing)
        super().__init__(message)
