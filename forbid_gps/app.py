import os
import shutil
import tempfile
import mimetypes
import logging

from flask import Flask, request, jsonify, current_app
from PIL import Image
from werkzeug.utils import secure_filename

from forbid_gps import config
from forbid_gps.decoders import exif_signature_type, get_decoder
from forbid_gps.exceptions import MetadataDecodeError
from forbid_gps.guard import IMAGE_MIME_PREFIX, GpsGuard, UploadCandidate, remove_prefix
from forbid_gps.utils import setup_logger

logger = logging.getLogger(__name__)


def guess_mime_type(file_storage):
    """Prefer the client's content type, fall back to a guess from the filename."""
    mime_type = file_storage.mimetype
    if mime_type and mime_type != 'application/octet-stream':
        return mime_type
    guessed, _ = mimetypes.guess_type(file_storage.filename or '')
    return guessed or mime_type or ''


def sniff_mime_type(path, declared):
    """
    Work out the MIME type of the saved upload.

    A declared image type is kept. Anything else is checked against the bytes,
    so an image sent as application/octet-stream or under a misleading name is
    still inspected.
    """
    if declared.startswith(IMAGE_MIME_PREFIX):
        return declared
    try:
        with Image.open(path) as image:
            image_format = image.format
    except OSError:
        # Damaged headers stop Pillow, but a JPEG/TIFF signature still marks an image
        try:
            return exif_signature_type(path) or declared
        except MetadataDecodeError:
            return declared
    sniffed = Image.MIME.get(image_format) or f"image/{image_format.lower()}"
    logger.info(f"Declared type {declared or 'none'} sniffed as {sniffed}")
    return sniffed


def unique_destination(folder, filename):
    """Path in folder for filename, suffixed _1, _2, ... when the name is taken."""
    base, ext = os.path.splitext(filename)
    destination = os.path.join(folder, filename)
    counter = 1
    while os.path.exists(destination):
        destination = os.path.join(folder, f"{base}_{counter}{ext}")
        counter += 1
    return destination


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.update(config.load_app_config())
    app.config['TEMP_FOLDER'] = tempfile.gettempdir()
    if overrides:
        app.config.update(overrides)

    setup_logger('forbid_gps', level=app.config['LOG_LEVEL'], log_dir=app.config['LOG_FOLDER'])
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    decoder = get_decoder(app.config['FORBID_GPS_DECODER'])
    app.extensions['forbid_gps'] = GpsGuard(
        decoder, reject_unreadable=app.config['FORBID_GPS_REJECT_UNREADABLE'])

    logger.info("Initializing forbid-gps upload service")
    logger.info(f"Upload folder: {app.config['UPLOAD_FOLDER']}")
    logger.info(f"EXIF decoder: {decoder.name if decoder else 'none'}")
    logger.info(f"Reject unreadable images: {app.config['FORBID_GPS_REJECT_UNREADABLE']}")

    register_routes(app)
    return app


def register_routes(app):

    @app.route('/healthz')
    def healthz():
        guard = current_app.extensions['forbid_gps']
        return jsonify({'status': 'ok', 'decoder': guard.decoder.name if guard.decoder else None})

    @app.route('/upload', methods=['POST'])
    def upload():
        if 'file' not in request.files:
            logger.warning("Upload request without a file field")
            return jsonify({'error': 'No file provided'}), 400
        file = request.files['file']
        if file.filename == '':
            logger.warning("Upload request with an empty filename")
            return jsonify({'error': 'No selected file'}), 400

        filename = secure_filename(file.filename)
        if not filename:
            return jsonify({'error': 'Invalid filename'}), 400

        fd, temp_path = tempfile.mkstemp(prefix='forbid-gps-', dir=current_app.config['TEMP_FOLDER'])
        os.close(fd)
        try:
            file.save(temp_path)
            candidate = UploadCandidate(
                mime_type=sniff_mime_type(temp_path, guess_mime_type(file)),
                path=temp_path,
                name=filename,
                size=os.path.getsize(temp_path),
            )
            logger.debug(f"Upload: filename={filename}, content_type={candidate.mime_type}")

            result, found = current_app.extensions['forbid_gps'].evaluate(candidate)
            if result.rejected:
                return jsonify({'error': result.error, 'fields': [remove_prefix(tag) for tag in found]}), 422

            destination = unique_destination(current_app.config['UPLOAD_FOLDER'], filename)
            filename = os.path.basename(destination)
            shutil.move(temp_path, destination)
            logger.info(f"Accepted upload {filename} ({candidate.size} bytes)")
            return jsonify({'status': 'ok', 'filename': filename}), 201
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)


if __name__ == '__main__':
    create_app().run(debug=False)
