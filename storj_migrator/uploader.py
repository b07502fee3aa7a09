import logging

from .destination import DestinationError
from .errors import UploadError

logger = logging.getLogger(__name__)


def normalize_upload_path(upload_path):
    if not upload_path:
        return ''
    return upload_path if upload_path.endswith('/') else upload_path + '/'


class Uploader:
    def __init__(self, bucket, upload_path, debug=False):
        self.bucket = bucket
        self.upload_path = normalize_upload_path(upload_path)
        self.debug = debug

    def upload(self, key, data: bytes) -> str:
        path = self.upload_path + str(key)
        logger.info(f"Upload Object Path: {path}")
        try:
            self.bucket.upload_object(path, data)
        except DestinationError as e:
            raise UploadError('upload_object', key=path, cause=e) from e
        if self.debug:
            logger.debug(f"Uploaded {len(data)} bytes to {path}")
        return path
