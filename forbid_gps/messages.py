"""Translatable user-facing messages (gettext domain ``forbid-gps``)."""
import os
import gettext

TEXT_DOMAIN = 'forbid-gps'
LOCALE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'locale')

# Message ids double as the English text; translations key on them verbatim.
DECODER_MISSING = "Image might contain GPS data, but no EXIF reader is available to check it."
UNREADABLE_IMAGE = "Image might contain GPS data, but it could not be read."
GPS_DATA_FOUND = "Image contains GPS data: %s"


def translation(languages=None):
    return gettext.translation(TEXT_DOMAIN, localedir=LOCALE_DIR, languages=languages, fallback=True)


def _(message, languages=None):
    return translation(languages).gettext(message)


def decoder_missing(languages=None):
    return _(DECODER_MISSING, languages)


def unreadable_image(languages=None):
    return _(UNREADABLE_IMAGE, languages)


def gps_data_found(tags, languages=None):
    """Format the rejection message for the GPS tags found, in the order given."""
    return _(GPS_DATA_FOUND, languages) % ' '.join(tags)
