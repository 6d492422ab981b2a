from forbid_gps.exceptions import ForbidGpsError, MetadataDecodeError
from forbid_gps.guard import (
    GPS_TAG_DENYLIST,
    GpsGuard,
    UploadCandidate,
    find_gps_tags,
    inspect_upload,
    remove_prefix,
)

__version__ = "1.0.0"
