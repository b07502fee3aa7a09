import logging
from dataclasses import dataclass, field
from datetime import datetime

from .paths import encode, session_timestamp
from .verifier import SessionRecord

logger = logging.getLogger(__name__)

SAMPLE_NAME = 'testdata'
SAMPLE_DATA = b'test'


@dataclass
class TransferSession:
    timestamp: str
    records: list = field(default_factory=list)
    objects: int = 0
    chunks: int = 0
    bytes: int = 0


class Migrator:
    """Chunked transfer of every source object into the destination bucket.

    Strictly sequential: an object is fully chunked and uploaded before the
    next one is read. The first error ends the run.
    """

    def __init__(self, lister, reader, uploader, debug=False):
        self.lister = lister
        self.reader = reader
        self.uploader = uploader
        self.debug = debug

    def transfer_object(self, session, obj):
        logger.info(f"Reading content from the file : {obj.key}")
        dest = None
        for chunk in self.reader.chunks(obj):
            dest = encode(obj.bucket, obj.key, session.timestamp, chunk.index)
            self.uploader.upload(dest, chunk.data)
            session.chunks += 1
            session.bytes += len(chunk.data)
        if dest is None:
            # empty object: nothing uploaded, nothing to verify
            if self.debug:
                logger.debug(f"Skipping empty object {obj.bucket}/{obj.key}")
            return None
        record = SessionRecord(prefix=dest.prefix, extension=dest.extension)
        session.records.append(record)
        session.objects += 1
        return record

    def run(self, timestamp=None) -> TransferSession:
        session = TransferSession(timestamp=timestamp or session_timestamp())
        for bucket in self.lister.list_buckets():
            with self.lister.list_objects(bucket, recursive=True) as objects:
                for obj in objects:
                    self.transfer_object(session, obj)
        logger.info(f"Transferred {session.objects} objects in {session.chunks} chunks ({session.bytes} bytes)")
        return session


def list_source(lister):
    """Log every bucket and object key of the source; returns the keys per bucket."""
    found = {}
    for bucket in lister.list_buckets():
        logger.info(f"Reading All files from the Zenko Orbit Bucket {bucket}...")
        with lister.list_objects(bucket, recursive=True) as objects:
            found[bucket] = []
            for obj in objects:
                logger.info(obj.key)
                found[bucket].append(obj.key)
    logger.info("Reading ALL files from the Zenko Orbit Bucket...Complete!")
    return found


def upload_sample(uploader, debug=False, now=None):
    name = SAMPLE_NAME
    if debug:
        name = f"uploaddata_{(now or datetime.now()).strftime('%Y-%m-%d')}.txt"
        try:
            with open(name, 'wb') as f:
                f.write(SAMPLE_DATA)
        except OSError as e:
            logger.warning(f"Error while writing to file {name}: {e}")
    return uploader.upload(name, SAMPLE_DATA)
