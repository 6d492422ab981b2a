#!/usr/bin/env python3
"""
GPS Tag Extraction Tool

Prints the GPS tags each installed EXIF decoder finds in an image. Useful for
diagnosing why an upload was (or was not) rejected when decoders disagree.

Usage:
  forbid-gps-tags [image_path]

Example:
  forbid-gps-tags data/uploads/20240816_171517.jpg
"""
import os
import sys
import logging
import json

from forbid_gps.decoders import DECODERS, available_decoders
from forbid_gps.exceptions import MetadataDecodeError
from forbid_gps.guard import find_gps_tags
from forbid_gps.utils import setup_logger

logger = logging.getLogger(__name__)


def extract_gps_tags(image_path, decoder):
    """
    Return the denylisted GPS tags and their values as one decoder sees them.

    Returns None when the decoder reports no EXIF container.
    """
    tags = decoder.decode(image_path)
    if tags is None:
        return None
    return {tag: str(tags[tag]) for tag in find_gps_tags(tags)}


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logger('forbid_gps')
    if len(argv) != 1:
        print("Usage: forbid-gps-tags <image_path>")
        return 1

    image_path = argv[0]
    if not os.path.exists(image_path):
        logger.error(f"Image file not found: {image_path}")
        return 1

    logger.info(f"Extracting GPS tags from: {os.path.basename(image_path)}")
    results = {}
    for name in available_decoders():
        decoder = DECODERS[name][0]()
        try:
            results[name] = extract_gps_tags(image_path, decoder)
        except MetadataDecodeError as e:
            logger.error(f"Error with {name}: {e.reason}")
            results[name] = {'error': e.reason}
            continue

        if results[name] is None:
            logger.info(f"{name}: no EXIF container")
        elif results[name]:
            logger.info(f"{name} GPS tags: {json.dumps(results[name], indent=2)}")
        else:
            logger.info(f"{name}: no GPS tags found")

    print(json.dumps(results, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
