"""
EXIF decoders used by the upload filter.

Every decoder exposes ``name`` and ``decode(path)``. ``decode`` returns a dict
mapping plain EXIF tag names (``GPSLatitude``, ``Make``, ...) to their values,
or ``None`` when the file format carries no EXIF container at all. Files that
should carry EXIF but cannot be parsed raise ``MetadataDecodeError``.
"""
import logging

from forbid_gps.exceptions import MetadataDecodeError

try:
    import exifread
    EXIFREAD_SUPPORT = True
except ImportError:
    EXIFREAD_SUPPORT = False

try:
    from PIL import Image, UnidentifiedImageError
    from PIL.ExifTags import TAGS, GPSTAGS
    PILLOW_SUPPORT = True
except ImportError:
    PILLOW_SUPPORT = False

try:
    import piexif
    PIEXIF_SUPPORT = True
except ImportError:
    PIEXIF_SUPPORT = False

# Import pillow-heif for HEIC support
HEIF_SUPPORT = False
if PILLOW_SUPPORT:
    try:
        import pillow_heif
        pillow_heif.register_heif_opener()
        HEIF_SUPPORT = True
    except ImportError:
        HEIF_SUPPORT = False

logger = logging.getLogger(__name__)

GPS_IFD_POINTER = 0x8825
EXIF_IFD_POINTER = 0x8769

# piexif groups its tag tables by IFD under these names
PIEXIF_TAG_GROUPS = {
    '0th': 'Image',
    'Exif': 'Exif',
    'GPS': 'GPS',
    'Interop': 'Interop',
    '1st': 'Image',
}

EXIF_SIGNATURES = {
    b'\xff\xd8': 'image/jpeg',
    b'II*\x00': 'image/tiff',
    b'MM\x00*': 'image/tiff',
}


def exif_signature_type(path):
    """MIME type of a file starting like a JPEG or TIFF (the formats that carry EXIF), else None."""
    try:
        with open(path, 'rb') as f:
            header = f.read(4)
    except OSError as e:
        raise MetadataDecodeError(path, str(e)) from e
    for signature, mime_type in EXIF_SIGNATURES.items():
        if header.startswith(signature):
            return mime_type
    return None


def has_exif_signature(path):
    return exif_signature_type(path) is not None


def identify_image(path):
    """
    Make sure Pillow recognises the file as an image.

    Used when an EXIF reader found nothing, to tell a format without an EXIF
    container apart from a corrupt or disguised file.

    Returns:
        str: Pillow's format name, or None when Pillow is not installed
    """
    if not PILLOW_SUPPORT:
        return None
    try:
        with Image.open(path) as image:
            return image.format
    except UnidentifiedImageError as e:
        raise MetadataDecodeError(path, "unidentified image format") from e
    except Exception as e:
        raise MetadataDecodeError(path, str(e)) from e


class ExifreadDecoder:
    """Decode EXIF with exifread, the same reader the media scanner tools use."""

    name = 'exifread'

    def decode(self, path):
        try:
            with open(path, 'rb') as f:
                raw_tags = exifread.process_file(f, details=False)
        except Exception as e:
            raise MetadataDecodeError(path, str(e)) from e

        if not raw_tags:
            # exifread returns {} both for clean files and for ones it cannot parse
            identify_image(path)
            logger.debug(f"No EXIF data found in {path}")
            return None

        if 'Image GPSInfo' in raw_tags and not any(key.startswith('GPS ') for key in raw_tags):
            raise MetadataDecodeError(path, "GPS IFD is present but unreadable")

        tags = {}
        for key, value in raw_tags.items():
            # exifread keys look like "GPS GPSLatitude" or "Image Make"
            tag_name = key.split(' ', 1)[-1]
            tags.setdefault(tag_name, value)
        return tags


class PillowDecoder:
    """Decode EXIF with Pillow, naming GPS entries through GPSTAGS."""

    name = 'pillow'

    def decode(self, path):
        try:
            with Image.open(path) as image:
                exif = image.getexif()
                if not exif:
                    logger.debug(f"No EXIF data found in {path}")
                    return None

                tags = {}
                for tag, value in exif.items():
                    tags[str(TAGS.get(tag, tag))] = value
                for tag, value in exif.get_ifd(EXIF_IFD_POINTER).items():
                    tags[str(TAGS.get(tag, tag))] = value
                gps_ifd = exif.get_ifd(GPS_IFD_POINTER)
                if GPS_IFD_POINTER in exif and not gps_ifd:
                    raise MetadataDecodeError(path, "GPS IFD is present but unreadable")
                for tag, value in gps_ifd.items():
                    tags[str(GPSTAGS.get(tag, tag))] = value
                return tags
        except MetadataDecodeError:
            raise
        except UnidentifiedImageError as e:
            raise MetadataDecodeError(path, "unidentified image format") from e
        except Exception as e:
            raise MetadataDecodeError(path, str(e)) from e


class PiexifDecoder:
    """Decode EXIF with piexif. Only JPEG, TIFF and WebP can carry EXIF here."""

    name = 'piexif'

    def decode(self, path):
        try:
            exif_dict = piexif.load(path)
        except piexif.InvalidImageDataError as e:
            if has_exif_signature(path):
                raise MetadataDecodeError(path, str(e)) from e
            identify_image(path)
            logger.debug(f"piexif cannot carry EXIF for {path}")
            return None
        except Exception as e:
            raise MetadataDecodeError(path, str(e)) from e

        if piexif.ImageIFD.GPSTag in (exif_dict.get('0th') or {}) and not exif_dict.get('GPS'):
            raise MetadataDecodeError(path, "GPS IFD is present but unreadable")

        tags = {}
        for ifd_name, group in PIEXIF_TAG_GROUPS.items():
            for tag, value in (exif_dict.get(ifd_name) or {}).items():
                info = piexif.TAGS.get(group, {}).get(tag)
                tags.setdefault(info['name'] if info else str(tag), value)

        if not tags:
            logger.debug(f"No EXIF data found in {path}")
            return None
        return tags


# Preference order for "auto"
DECODERS = {
    'exifread': (ExifreadDecoder, EXIFREAD_SUPPORT),
    'pillow': (PillowDecoder, PILLOW_SUPPORT),
    'piexif': (PiexifDecoder, PIEXIF_SUPPORT),
}


def available_decoders():
    """Names of the decoders whose library is installed."""
    return [name for name, (_, supported) in DECODERS.items() if supported]


def get_decoder(name='auto'):
    """
    Build a decoder by name.

    Args:
        name (str): 'exifread', 'pillow', 'piexif' or 'auto' for the first
            installed one

    Returns:
        A decoder instance, or None when the library is not installed.
    """
    name = (name or 'auto').lower()
    if name == 'auto':
        first = next(iter(available_decoders()), None)
        if first is None:
            logger.warning("No EXIF decoder library is installed")
            return None
        return DECODERS[first][0]()

    if name not in DECODERS:
        raise ValueError(f"Unknown decoder: {name}")

    decoder_cls, supported = DECODERS[name]
    if not supported:
        logger.warning(f"EXIF decoder '{name}' requested but its library is not installed")
        return None
    return decoder_cls()
