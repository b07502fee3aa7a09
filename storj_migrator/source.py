import logging
from dataclasses import dataclass

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError

from .errors import ChunkReadError, ListingError, StoreConnectionError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 32 * 1024


@dataclass(frozen=True)
class SourceObject:
    bucket: str
    key: str
    size: int


@dataclass(frozen=True)
class Chunk:
    index: int
    offset: int
    data: bytes

    def __len__(self):
        return len(self.data)


# ------------------ S3 client ------------------
def make_source_client(cfg):
    endpoint = cfg.endpoint
    # minio style host[:port] endpoints are served over TLS
    if endpoint and '://' not in endpoint:
        endpoint = 'https://' + endpoint
    logger.info("Connecting to Zenko...")
    try:
        return boto3.client('s3',
            endpoint_url=endpoint or None,
            aws_access_key_id=cfg.access_key_id,
            aws_secret_access_key=cfg.secret_access_key,
            config=Config(signature_version='s3v4', s3={'addressing_style': 'path'})
        )
    except (BotoCoreError, ValueError) as e:
        raise StoreConnectionError('make_source_client', key=endpoint, cause=e) from e


def _wrap_listing_error(operation, key, e):
    if isinstance(e, EndpointConnectionError):
        return StoreConnectionError(operation, key=key, cause=e)
    return ListingError(operation, key=key, cause=e)


# ------------------ listing ------------------
class ObjectListing:
    """Lazy listing of one bucket.

    Use as a context manager: leaving the block closes the underlying
    paginator generator, whether iteration finished or an error unwound it.
    """

    def __init__(self, client, bucket, prefix='', recursive=True):
        self.bucket = bucket
        self.closed = False
        self._objects = self._iter_objects(client, bucket, prefix, recursive)

    @staticmethod
    def _iter_objects(client, bucket, prefix, recursive):
        kwargs = {'Bucket': bucket, 'Prefix': prefix}
        if not recursive:
            kwargs['Delimiter'] = '/'
        try:
            paginator = client.get_paginator('list_objects_v2')
            for page in paginator.paginate(**kwargs):
                for o in page.get('Contents', []) or []:
                    yield SourceObject(bucket=bucket, key=o['Key'], size=int(o.get('Size', 0)))
        except (ClientError, BotoCoreError) as e:
            raise _wrap_listing_error('list_objects', bucket, e) from e

    def __iter__(self):
        return self

    def __next__(self):
        if self.closed:
            raise StopIteration
        return next(self._objects)

    def close(self):
        if not self.closed:
            self.closed = True
            self._objects.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False


class SourceLister:
    def __init__(self, client, debug=False):
        self.client = client
        self.debug = debug

    def list_buckets(self):
        try:
            resp = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise _wrap_listing_error('list_buckets', None, e) from e
        names = [b['Name'] for b in resp.get('Buckets', [])]
        if self.debug:
            logger.debug(f"Source buckets: {names}")
        return names

    def list_objects(self, bucket, prefix='', recursive=True) -> ObjectListing:
        return ObjectListing(self.client, bucket, prefix=prefix, recursive=recursive)


# ------------------ chunked reads ------------------
class ChunkReader:
    """Read a source object in fixed windows.

    Each window is fetched with its own ranged GET, so no stream is held
    open between chunks.
    """

    def __init__(self, client, window_size=CHUNK_SIZE, debug=False):
        if window_size <= 0:
            raise ValueError('window_size must be positive')
        self.client = client
        self.window_size = window_size
        self.debug = debug

    def read_window(self, obj: SourceObject, offset: int) -> bytes:
        end = min(offset + self.window_size, obj.size) - 1
        try:
            resp = self.client.get_object(Bucket=obj.bucket, Key=obj.key, Range=f"bytes={offset}-{end}")
            body = resp['Body']
            try:
                return body.read()
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise ChunkReadError('get_object', key=f"{obj.bucket}/{obj.key}", cause=e) from e

    def chunks(self, obj: SourceObject):
        offset = 0
        index = 0
        while offset < obj.size:
            data = self.read_window(obj, offset)
            if not data:
                raise ChunkReadError('read', key=f"{obj.bucket}/{obj.key}",
                                     message=f"no bytes returned at offset {offset} of {obj.size}")
            if len(data) > self.window_size:
                raise ChunkReadError('read', key=f"{obj.bucket}/{obj.key}",
                                     message=f"range not honoured at offset {offset}: got {len(data)} bytes")
            if self.debug:
                logger.debug(f"Read {len(data)} bytes of {obj.key} at offset {offset}")
            yield Chunk(index=index, offset=offset, data=data)
            offset += len(data)
            index += 1
