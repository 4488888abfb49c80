"""Exception classes raised by the compliance recommendation engine."""

from typing import Optional


class ComplianceEngineError(Exception):
    """Base exception for all compliance engine errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class RecordRetrievalError(ComplianceEngineError):
    """A record collection could not be fetched or validated.

    Raised for the whole invocation: the engine never evaluates a partial
    snapshot.
    """

    def __init__(
        self,
        message: str,
        organization_id: Optional[str] = None,
        collection: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="RECORD_RETRIEVAL", **kwargs)
        self.organization_id = organization_id
        self.collection = collection
        self.details.update({
            "organization_id": organization_id,
            "collection": collection,
        })


class CatalogError(ComplianceEngineError):
    """A department requirement catalog could not be loaded."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="CATALOG_INVALID", **kwargs)
        self.source = source
        self.details.update({"source": source})
