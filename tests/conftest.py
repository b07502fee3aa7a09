from __future__ import annotations

import pytest

from storj_migrator.config import StorjConfig
from tests.fakes import FakeNetwork, FakeS3Client

WINDOW = 32 * 1024


def payload(size: int) -> bytes:
    return bytes(i % 251 for i in range(size))


@pytest.fixture()
def storj_config() -> StorjConfig:
    return StorjConfig(
        api_key="13YqeGFpvtzbUp1QAfpvy2E5ZqLUFFNhEkv7153UDGDVnSmTuYYa",
        satellite="us1.storj.io:7777",
        bucket="backups",
        upload_path="zenko",
        encryption_passphrase="correct horse",
    )


@pytest.fixture()
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture()
def s3_client() -> FakeS3Client:
    return FakeS3Client(
        {
            "docs": {
                "reports/q1.pdf": payload(70000),
                "readme.txt": b"hello",
                "empty.bin": b"",
            },
        }
    )
