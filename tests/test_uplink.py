"""UplinkNetwork against a stand-in ``uplink_python`` module."""

from __future__ import annotations

import sys
import types
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from storj_migrator.destination import Caveat, DestinationError, EncryptionRestriction
from storj_migrator.uplink import UplinkBucket, UplinkNetwork


class StorjException(Exception):
    pass


@pytest.fixture()
def network(monkeypatch: pytest.MonkeyPatch) -> UplinkNetwork:
    pkg = types.ModuleType("uplink_python")
    pkg.__path__ = []
    errors = types.ModuleType("uplink_python.errors")
    errors.StorjException = StorjException
    classes = types.ModuleType("uplink_python.module_classes")
    classes.Permission = lambda **kw: SimpleNamespace(**kw)
    classes.SharePrefix = lambda **kw: SimpleNamespace(**kw)
    classes.ListObjectsOptions = lambda **kw: SimpleNamespace(**kw)
    uplink = types.ModuleType("uplink_python.uplink")
    uplink.Uplink = MagicMock
    for name, module in (
        ("uplink_python", pkg),
        ("uplink_python.errors", errors),
        ("uplink_python.module_classes", classes),
        ("uplink_python.uplink", uplink),
    ):
        monkeypatch.setitem(sys.modules, name, module)
    return UplinkNetwork()


def test_missing_binding(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "uplink_python", None)
    with pytest.raises(RuntimeError, match="uplink-python"):
        UplinkNetwork()


def test_empty_api_key(network: UplinkNetwork) -> None:
    with pytest.raises(DestinationError):
        network.parse_api_key("  ")


def test_passphrase_requests_access(network: UplinkNetwork) -> None:
    project = network.open_project("us1.storj.io:7777", "key")
    grant = project.salted_key_from_passphrase("pass")
    network._uplink.request_access_with_passphrase.assert_called_once_with("us1.storj.io:7777", "key", "pass")
    assert network.new_encryption_access(grant) is grant


def test_restriction_shares_with_caveat_permissions(network: UplinkNetwork) -> None:
    access = MagicMock()
    key = network.restrict_api_key("key", Caveat(disallow_writes=True, disallow_deletes=True))
    _, shared = network.restrict_encryption_access(access, key, EncryptionRestriction("backups", "zenko"))

    permission, prefixes = access.share.call_args.args
    assert (permission.allow_download, permission.allow_list) == (True, True)
    assert (permission.allow_upload, permission.allow_delete) == (False, False)
    assert (prefixes[0].bucket, prefixes[0].prefix) == ("backups", "zenko")
    assert shared is access.share.return_value


def test_storj_errors_are_translated(network: UplinkNetwork) -> None:
    network._uplink.parse_access.side_effect = StorjException("malformed")
    with pytest.raises(DestinationError, match="parse_scope"):
        network.parse_scope("garbage")


def test_bucket_is_opened_and_created_through_the_grant(network: UplinkNetwork) -> None:
    access = MagicMock()
    project = network.open_project("", access)
    bucket = project.open_bucket("backups", access)
    handle = access.open_project.return_value
    handle.stat_bucket.assert_called_once_with("backups")
    assert bucket.name == "backups"

    project.create_bucket("backups")
    handle.create_bucket.assert_called_once_with("backups")
    project.close()
    handle.close.assert_called_once()


def test_failed_upload_is_aborted() -> None:
    project = MagicMock()
    upload = project.upload_object.return_value
    upload.commit.side_effect = StorjException("network down")
    bucket = UplinkBucket(project, "backups", StorjException, lambda **kw: SimpleNamespace(**kw))

    with pytest.raises(DestinationError):
        bucket.upload_object("zenko/a/0.txt", b"data")
    upload.abort.assert_called_once()


def test_listing_and_download() -> None:
    project = MagicMock()
    project.list_objects.return_value = [SimpleNamespace(key="p/0.txt"), SimpleNamespace(key="p/1.txt")]
    project.download_object.return_value.read_file.side_effect = lambda buf: buf.write(b"abc")
    bucket = UplinkBucket(project, "backups", StorjException, lambda **kw: SimpleNamespace(**kw))

    assert bucket.list_objects("p/") == ["p/0.txt", "p/1.txt"]
    options = project.list_objects.call_args.args[1]
    assert (options.prefix, options.recursive) == ("p/", False)

    stream = bucket.download("p/0.txt")
    assert stream.read() == b"abc"
    stream.close()
    project.download_object.return_value.close.assert_called_once()
