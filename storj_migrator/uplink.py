"""Storj adapter built on the ``uplink-python`` binding.

The binding exposes a single ``Access`` grant that already bundles the
satellite address, API key and encryption secrets, so several of the
primitives collapse onto it: the derived "encryption key" is the grant
returned by ``request_access_with_passphrase``, and restricting the API key
records the caveat until the grant is shared with a bucket prefix.
"""

import io
import logging
from contextlib import contextmanager
from dataclasses import dataclass

from .destination import Caveat, DestinationError, ParsedScope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _CaveatedKey:
    api_key: str
    caveat: Caveat


@contextmanager
def _translate(operation, storj_exception):
    try:
        yield
    except storj_exception as e:
        raise DestinationError(f"{operation}: {e}") from e


class _DownloadStream:
    def __init__(self, download, storj_exception):
        self._download = download
        self._storj_exception = storj_exception

    def read(self):
        buf = io.BytesIO()
        with _translate('download.read', self._storj_exception):
            self._download.read_file(buf)
        return buf.getvalue()

    def close(self):
        with _translate('download.close', self._storj_exception):
            self._download.close()


class UplinkBucket:
    def __init__(self, project, name, storj_exception, list_options):
        self.name = name
        self._project = project
        self._storj_exception = storj_exception
        self._list_options = list_options

    def upload_object(self, key, data):
        with _translate('upload_object', self._storj_exception):
            upload = self._project.upload_object(self.name, key)
            try:
                upload.write_file(io.BytesIO(data))
                upload.commit()
            except self._storj_exception:
                upload.abort()
                raise

    def list_objects(self, prefix, recursive=False):
        with _translate('list_objects', self._storj_exception):
            objects = self._project.list_objects(
                self.name, self._list_options(prefix=prefix, recursive=recursive))
            return [o.key for o in objects]

    def download(self, key):
        with _translate('download_object', self._storj_exception):
            return _DownloadStream(self._project.download_object(self.name, key), self._storj_exception)

    def close(self):
        # the project owns the connection
        pass


class UplinkProject:
    def __init__(self, uplink, satellite, api_key, storj_exception, list_options):
        self._uplink = uplink
        self._satellite = satellite
        self._api_key = api_key
        self._storj_exception = storj_exception
        self._list_options = list_options
        self._project = None

    def salted_key_from_passphrase(self, passphrase):
        with _translate('request_access_with_passphrase', self._storj_exception):
            return self._uplink.request_access_with_passphrase(self._satellite, self._api_key, passphrase)

    def _open(self, access):
        if self._project is None:
            if access is None:
                raise DestinationError('open_project: no access grant to open the project with')
            with _translate('open_project', self._storj_exception):
                self._project = access.open_project()
        return self._project

    def open_bucket(self, name, encryption_access):
        project = self._open(encryption_access)
        with _translate('open_bucket', self._storj_exception):
            project.stat_bucket(name)
        return UplinkBucket(project, name, self._storj_exception, self._list_options)

    def create_bucket(self, name):
        with _translate('create_bucket', self._storj_exception):
            self._open(None).create_bucket(name)

    def close(self):
        if self._project is not None:
            with _translate('close_project', self._storj_exception):
                self._project.close()
            self._project = None


class UplinkNetwork:
    def __init__(self):
        try:
            from uplink_python.errors import StorjException
            from uplink_python.module_classes import ListObjectsOptions, Permission, SharePrefix
            from uplink_python.uplink import Uplink
        except Exception as exc:  # noqa: BLE001
            raise RuntimeError("uplink-python is required for UplinkNetwork (pip install storj-migrator[storj])") from exc

        self._uplink = Uplink()
        self._storj_exception = StorjException
        self._list_options = ListObjectsOptions
        self._permission = Permission
        self._share_prefix = SharePrefix

    def parse_api_key(self, raw):
        key = (raw or '').strip()
        if not key:
            raise DestinationError('parse_api_key: API key is empty')
        return key

    def open_project(self, satellite, api_key):
        if isinstance(api_key, _CaveatedKey):
            api_key = api_key.api_key
        return UplinkProject(self._uplink, satellite, api_key, self._storj_exception, self._list_options)

    def new_encryption_access(self, key):
        # request_access_with_passphrase already returned a full grant
        return key

    def serialize_encryption_access(self, access):
        with _translate('serialize_access', self._storj_exception):
            return access.serialize()

    def parse_encryption_access(self, serialized):
        with _translate('parse_access', self._storj_exception):
            return self._uplink.parse_access(serialized)

    def restrict_api_key(self, api_key, caveat):
        if isinstance(api_key, _CaveatedKey):
            caveat = Caveat(
                disallow_reads=api_key.caveat.disallow_reads or caveat.disallow_reads,
                disallow_writes=api_key.caveat.disallow_writes or caveat.disallow_writes,
                disallow_deletes=api_key.caveat.disallow_deletes or caveat.disallow_deletes,
            )
            api_key = api_key.api_key
        return _CaveatedKey(api_key=api_key, caveat=caveat)

    def restrict_encryption_access(self, access, api_key, restriction):
        caveat = api_key.caveat if isinstance(api_key, _CaveatedKey) else Caveat()
        permission = self._permission(
            allow_download=not caveat.disallow_reads,
            allow_upload=not caveat.disallow_writes,
            allow_list=not caveat.disallow_reads,
            allow_delete=not caveat.disallow_deletes,
        )
        prefixes = [self._share_prefix(bucket=restriction.bucket, prefix=restriction.path_prefix)]
        with _translate('share_access', self._storj_exception):
            return api_key, access.share(permission, prefixes)

    def serialize_scope(self, satellite, api_key, access):
        with _translate('serialize_scope', self._storj_exception):
            return access.serialize()

    def parse_scope(self, serialized):
        with _translate('parse_scope', self._storj_exception):
            access = self._uplink.parse_access(serialized)
        # the grant is opaque here; the satellite comes from configuration
        return ParsedScope(satellite='', api_key=access, encryption_access=access)

    def close(self):
        pass
