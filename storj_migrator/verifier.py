import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .destination import DestinationError
from .errors import VerifyError
from .uploader import normalize_upload_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    """Destination prefix and extension of one transferred object."""

    prefix: str
    extension: str


@dataclass
class VerifyReport:
    files: list = field(default_factory=list)
    chunks: int = 0
    bytes: int = 0
    errors: list = field(default_factory=list)


class Verifier:
    """Download uploaded chunks back and rebuild each object locally.

    Failures are logged and skipped; the transfer itself has already
    completed by the time this runs.
    """

    def __init__(self, bucket, upload_path, output_dir='debug', debug=False):
        self.bucket = bucket
        self.upload_path = normalize_upload_path(upload_path)
        self.output_dir = Path(output_dir)
        self.debug = debug

    def _skip(self, report, error):
        logger.warning(str(error))
        report.errors.append(error)

    def verify(self, records) -> VerifyReport:
        report = VerifyReport()
        for record in records:
            prefix = self.upload_path + record.prefix + '/'
            logger.info(f"Downloading Object {prefix} from bucket : Initiated...")
            try:
                listing = self.bucket.list_objects(prefix, recursive=False)
            except DestinationError as e:
                self._skip(report, VerifyError('list_objects', key=prefix, cause=e))
                continue

            target = self.output_dir / (self.upload_path + record.prefix + '.' + record.extension)
            try:
                os.makedirs(target.parent, exist_ok=True)
            except OSError as e:
                self._skip(report, VerifyError('write_local', key=str(target), cause=e))
                continue
            written = True
            for j in range(len(listing)):
                key = f"{prefix}{j}.{record.extension}"
                try:
                    stream = self.bucket.download(key)
                except DestinationError as e:
                    self._skip(report, VerifyError('download', key=key, cause=e))
                    continue
                try:
                    contents = stream.read()
                except DestinationError as e:
                    self._skip(report, VerifyError('read', key=key, cause=e))
                    continue
                finally:
                    try:
                        stream.close()
                    except DestinationError as e:
                        logger.warning(f"Could not close download of {key}: {e}")
                try:
                    with open(target, 'ab') as f:
                        f.write(contents)
                except OSError as e:
                    self._skip(report, VerifyError('write_local', key=str(target), cause=e))
                    written = False
                    break
                report.chunks += 1
                report.bytes += len(contents)
                logger.info(f"{len(contents)} bytes of Object from bucket!")
            if written and target not in report.files:
                report.files.append(target)
        return report
