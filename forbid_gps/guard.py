"""
Upload filter that rejects images carrying GPS location tags in their EXIF.

The host (a web app, a CLI scanner) builds an ``UploadCandidate`` for every
uploaded file, runs it through ``GpsGuard.inspect`` once, and aborts the upload
when the returned candidate has ``error`` set.
"""
import copy
import logging

from forbid_gps import messages
from forbid_gps.decoders import get_decoder
from forbid_gps.exceptions import MetadataDecodeError

logger = logging.getLogger(__name__)

GPS_TAG_DENYLIST = (
    'GPSAltitude',
    'GPSAltitudeRef',
    'GPSImgDirection',
    'GPSImgDirectionRef',
    'GPSLatitude',
    'GPSLatitudeRef',
    'GPSLongitude',
    'GPSLongitudeRef',
)

IMAGE_MIME_PREFIX = 'image/'


class UploadCandidate:
    """One uploaded file as seen by the filter."""

    def __init__(self, mime_type, path, name=None, size=None, error=None):
        self.mime_type = mime_type
        self.path = path
        self.name = name
        self.size = size
        self.error = error

    @classmethod
    def from_dict(cls, data):
        """Build a candidate from an upload dict with 'type' and 'tmp_name' keys."""
        return cls(
            mime_type=data.get('type', ''),
            path=data.get('tmp_name', ''),
            name=data.get('name'),
            size=data.get('size'),
            error=data.get('error') or None,
        )

    def to_dict(self):
        data = {'name': self.name, 'type': self.mime_type, 'tmp_name': self.path, 'size': self.size}
        if self.error:
            data['error'] = self.error
        return data

    @property
    def is_image(self):
        return (self.mime_type or '').startswith(IMAGE_MIME_PREFIX)

    @property
    def rejected(self):
        return bool(self.error)

    def with_error(self, error):
        rejected = copy.copy(self)
        rejected.error = error
        return rejected

    def __eq__(self, other):
        if not isinstance(other, UploadCandidate):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"UploadCandidate(mime_type={self.mime_type!r}, path={self.path!r}, "
                f"name={self.name!r}, size={self.size!r}, error={self.error!r})")


def find_gps_tags(tags):
    """Return the denylisted GPS tag names present in tags, in denylist order."""
    return [tag for tag in GPS_TAG_DENYLIST if tag in tags]


def remove_prefix(tag):
    """Strip the leading 'GPS' from a tag name: 'GPSLatitude' -> 'Latitude'."""
    if tag.startswith('GPS'):
        return tag[len('GPS'):]
    return tag


class GpsGuard:
    """
    Decide whether an upload may pass.

    Args:
        decoder: object with ``decode(path)``; None when no EXIF reader is
            available, in which case every image is rejected
        reject_unreadable (bool): reject images the decoder fails to parse
            instead of letting them through
        languages: gettext languages for the rejection messages
    """

    def __init__(self, decoder, reject_unreadable=False, languages=None):
        self.decoder = decoder
        self.reject_unreadable = reject_unreadable
        self.languages = languages

    def inspect(self, candidate):
        """Return the candidate unchanged if it may pass, else a copy with ``error`` set."""
        result, _ = self.evaluate(candidate)
        return result

    def evaluate(self, candidate):
        """Like ``inspect``, also returning the GPS tags found (empty when none)."""
        if not candidate.is_image:
            return candidate, []

        if self.decoder is None:
            logger.warning(f"Cannot inspect {candidate.name or candidate.path}: no EXIF decoder available")
            return candidate.with_error(messages.decoder_missing(self.languages)), []

        try:
            tags = self.decoder.decode(candidate.path)
        except MetadataDecodeError as e:
            if self.reject_unreadable:
                logger.warning(f"Rejecting unreadable image: {e}")
                return candidate.with_error(messages.unreadable_image(self.languages)), []
            logger.warning(f"Letting unreadable image through: {e}")
            return candidate, []

        if tags is None:
            logger.debug(f"{candidate.path} has no EXIF container, nothing to check")
            return candidate, []

        found = find_gps_tags(tags)
        if not found:
            return candidate, []

        logger.info(f"Rejecting {candidate.name or candidate.path}: GPS tags {', '.join(found)}")
        return candidate.with_error(messages.gps_data_found(found, self.languages)), found


def inspect_upload(candidate, decoder='auto', reject_unreadable=False):
    """
    Inspect a single candidate with a guard built on the named decoder.

    ``decoder`` may also be a decoder instance or None.
    """
    if isinstance(decoder, str):
        decoder = get_decoder(decoder)
    return GpsGuard(decoder, reject_unreadable=reject_unreadable).inspect(candidate)
