import pytest
import piexif
from PIL import Image


def decimal_to_dms(decimal):
    """Convert decimal degrees to EXIF-friendly degrees, minutes, seconds format."""
    degrees = int(decimal)
    remainder = abs(decimal - degrees) * 60
    minutes = int(remainder)
    seconds = (remainder - minutes) * 60
    return ((degrees, 1), (minutes, 1), (int(seconds * 1000), 1000))


def save_jpeg(path, zeroth=None, gps=None):
    exif_dict = {"0th": zeroth or {}, "Exif": {}, "GPS": gps or {}, "1st": {}, "thumbnail": None}
    image = Image.new('RGB', (8, 8), color='red')
    if zeroth or gps:
        image.save(path, 'JPEG', exif=piexif.dump(exif_dict))
    else:
        image.save(path, 'JPEG')
    return str(path)


@pytest.fixture
def image_dir(tmp_path):
    d = tmp_path / "images"
    d.mkdir()
    return d


@pytest.fixture
def jpeg_without_exif(image_dir):
    return save_jpeg(image_dir / "no_exif.jpg")


@pytest.fixture
def png_without_exif(image_dir):
    path = image_dir / "no_exif.png"
    Image.new('RGB', (8, 8), color='blue').save(path, 'PNG')
    return str(path)


@pytest.fixture
def jpeg_without_gps(image_dir):
    return save_jpeg(image_dir / "without_gps.jpg", zeroth={piexif.ImageIFD.Make: b"TestCamera"})


@pytest.fixture
def jpeg_with_gps(image_dir):
    # 51°30'0" N, 0°7'0" E
    gps = {
        piexif.GPSIFD.GPSLatitudeRef: b'N',
        piexif.GPSIFD.GPSLatitude: decimal_to_dms(51.5),
        piexif.GPSIFD.GPSLongitudeRef: b'E',
        piexif.GPSIFD.GPSLongitude: decimal_to_dms(7 / 60),
    }
    return save_jpeg(image_dir / "with_gps.jpg", zeroth={piexif.ImageIFD.Make: b"TestCamera"}, gps=gps)


@pytest.fixture
def jpeg_with_all_gps(image_dir):
    gps = {
        piexif.GPSIFD.GPSLatitudeRef: b'S',
        piexif.GPSIFD.GPSLatitude: decimal_to_dms(33.8568),
        piexif.GPSIFD.GPSLongitudeRef: b'E',
        piexif.GPSIFD.GPSLongitude: decimal_to_dms(151.2153),
        piexif.GPSIFD.GPSAltitudeRef: 0,
        piexif.GPSIFD.GPSAltitude: (42, 1),
        piexif.GPSIFD.GPSImgDirectionRef: b'T',
        piexif.GPSIFD.GPSImgDirection: (180, 1),
    }
    return save_jpeg(image_dir / "with_all_gps.jpg", gps=gps)


@pytest.fixture
def not_an_image(image_dir):
    path = image_dir / "fake.jpg"
    path.write_text("this is not an image")
    return str(path)


@pytest.fixture(autouse=True)
def isolated_folders(tmp_path, monkeypatch):
    monkeypatch.setenv('LOG_FOLDER', str(tmp_path / 'log'))
    monkeypatch.setenv('CSV_FOLDER', str(tmp_path / 'csv'))
    monkeypatch.setenv('UPLOAD_FOLDER', str(tmp_path / 'uploads'))
    for key in ('FORBID_GPS_DECODER', 'FORBID_GPS_REJECT_UNREADABLE', 'LOG_LEVEL', 'MAX_CONTENT_LENGTH'):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def jpeg_with_truncated_gps(jpeg_with_gps, image_dir):
    # Cut the file inside the APP1 segment, in the middle of the GPS IFD values
    with open(jpeg_with_gps, 'rb') as f:
        data = f.read()
    exif_start = data.index(b'Exif\x00\x00')
    # the two bytes before the Exif header are the APP1 length, which counts itself
    end_of_app1 = exif_start - 2 + int.from_bytes(data[exif_start - 2:exif_start], 'big')
    path = image_dir / "truncated_gps.jpg"
    path.write_bytes(data[:end_of_app1 - 16])
    return str(path)
