"""Error taxonomy shared by the store, the LLM client and the editing session."""


class PMToolsError(Exception):
    """Base class for all pmtools errors."""

    pass


class LoadError(PMToolsError):
    """Document could not be fetched (unknown id or network failure)."""

    pass


class SaveError(PMToolsError):
    """Document could not be persisted."""

    pass


class EnhancementError(PMToolsError):
    """AI enhancement round-trip failed; the form must stay untouched."""

    pass


class NetworkError(EnhancementError):
    """The enhancement endpoint could not be reached."""

    pass


class CredentialMissing(EnhancementError):
    """No API credential is configured on the server."""

    pass


class UpstreamError(EnhancementError):
    """The enhancement endpoint answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(EnhancementError):
    """Model output could not be recovered as JSON by any parse strategy."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class DocumentExistsError(PMToolsError):
    """A document with the same id is already stored."""

    pass
