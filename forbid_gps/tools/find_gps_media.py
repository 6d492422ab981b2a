"""
Scan a directory for images the upload filter would reject.

Usage:
  forbid-gps-scan DIRECTORY [--output gps_media.csv] [--decoder exifread]
"""
import os
import sys
import logging
import csv
import argparse
import mimetypes

from forbid_gps import config
from forbid_gps.decoders import DECODERS, get_decoder
from forbid_gps.guard import GpsGuard, UploadCandidate
from forbid_gps.utils import setup_logger, resolve_output_path

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.heic', '.heif', '.tif', '.tiff', '.webp', '.gif')


def candidate_for(file_path):
    mime_type, _ = mimetypes.guess_type(file_path)
    return UploadCandidate(
        mime_type=mime_type or '',
        path=file_path,
        name=os.path.basename(file_path),
        size=os.path.getsize(file_path),
    )


def scan_directory_for_gps(directory, guard):
    """
    Walk a directory and run every image file through the guard.

    Returns:
        list: (path, error) for each file the guard rejects
    """
    rejected = []
    total_files = 0
    logger.info(f"Scanning directory: {directory}")
    for root, _, files in os.walk(directory):
        for file in sorted(files):
            if not file.lower().endswith(IMAGE_EXTENSIONS):
                continue
            file_path = os.path.join(root, file)
            total_files += 1
            result = guard.inspect(candidate_for(file_path))
            if result.rejected:
                logger.debug(f"Would reject {file_path}: {result.error}")
                rejected.append((file_path, result.error))

    logger.info(f"Processed {total_files} files, {len(rejected)} would be rejected")
    return rejected


def write_report(rejected, output_path):
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=['path', 'status', 'error'])
        writer.writeheader()
        for path, error in rejected:
            writer.writerow({'path': path, 'status': 'rejected', 'error': error})
    logger.info(f"Results saved to {output_path}")


def build_parser():
    parser = argparse.ArgumentParser(description="List images that would be rejected for carrying GPS data.")
    parser.add_argument("directory", help="Directory to scan for images.")
    parser.add_argument("--output", help="CSV file to save results (optional).")
    parser.add_argument("--decoder", choices=['auto'] + list(DECODERS), default=config.get_decoder_name(),
                        help="EXIF decoder to use (default: auto).")
    parser.add_argument("--reject-unreadable", action="store_true", default=config.get_reject_unreadable(),
                        help="Report images whose EXIF cannot be read as rejected.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logger('forbid_gps')

    if not os.path.isdir(args.directory):
        logger.error(f"Directory not found: {args.directory}")
        return 2

    try:
        guard = GpsGuard(get_decoder(args.decoder), reject_unreadable=args.reject_unreadable)
        rejected = scan_directory_for_gps(args.directory, guard)

        if rejected:
            logger.info(f"Found {len(rejected)} files that would be rejected")
            for i, (path, error) in enumerate(rejected[:10]):
                logger.info(f"Example {i+1}: {path} ({error})")
            if len(rejected) > 10:
                logger.info(f"... and {len(rejected) - 10} more files")
        else:
            logger.info("No images with GPS data found.")

        if args.output:
            write_report(rejected, resolve_output_path(args.output, config.get_csv_folder()))
    except Exception as e:
        logger.exception(f"Error during scan: {str(e)}")
        return 1

    return 1 if rejected else 0


if __name__ == "__main__":
    sys.exit(main())
