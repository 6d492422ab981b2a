class ForbidGpsError(Exception):
    """Base class for errors raised by forbid_gps."""


class MetadataDecodeError(ForbidGpsError):
    """A decoder could not parse the metadata of a file it should understand."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read metadata from {path}: {reason}")
