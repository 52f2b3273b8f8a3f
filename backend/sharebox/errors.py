"""Error taxonomy shared by the server services and the client session."""


class ShareboxError(Exception):
    """Base class for all domain errors."""


class NotFound(ShareboxError):
    """A user or file id does not exist."""


class InvalidRequest(ShareboxError):
    """A required field is missing or empty."""


class InvalidTarget(ShareboxError):
    """Operation applied to the wrong kind of record (file vs. folder)."""


class PermissionDenied(ShareboxError):
    """Access refused: not owner/grantee, or a directory grant was revoked."""


class UserCancelled(ShareboxError):
    """The interactive directory picker was dismissed. Callers treat this as a no-op."""


class StoreUnavailable(ShareboxError):
    """The folder ledger's backing store cannot be opened or written."""


class AlreadyShared(ShareboxError):
    """The grantee already has access. Non-fatal, surfaced as a warning."""
