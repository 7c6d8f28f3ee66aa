"""
Shared fixtures: an in-memory stand-in for the boto3 S3 client.
"""

import io
import shutil
from datetime import datetime, timedelta, timezone

import pytest
from botocore.exceptions import ClientError

from s3history.config import get_default_config
from s3history.infra.s3_client import S3Client

T0 = datetime(2023, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: int) -> datetime:
    """A timestamp ``seconds`` after T0."""
    return T0 + timedelta(seconds=seconds)


def client_error(operation: str, code: str = "AccessDenied") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} for test"}}, operation)


class FakeS3Backend:
    """
    Mimics the three boto3 S3 calls the replay uses.

    Versions are stored in put order. Listings follow S3's shapes:
    ListObjectVersions returns keys in lexical order, newest version first.
    """

    def __init__(self):
        self.versions = []
        self.truncated = False
        self.fail_list_objects = False
        self.fail_versions_for = set()
        self.fail_get_for = set()
        self.get_calls = []

    def put(self, bucket, key, body, when):
        version_id = f"v{len(self.versions) + 1}"
        if isinstance(body, str):
            body = body.encode()
        self.versions.append({
            "Bucket": bucket,
            "Key": key,
            "VersionId": version_id,
            "LastModified": when,
            "Body": body,
        })
        return version_id

    def list_objects_v2(self, Bucket):
        if self.fail_list_objects:
            raise client_error("ListObjectsV2", "NoSuchBucket")
        keys = []
        for v in self.versions:
            if v["Bucket"] == Bucket and v["Key"] not in keys:
                keys.append(v["Key"])
        return {
            "Contents": [{"Key": k} for k in sorted(keys)],
            "IsTruncated": self.truncated,
        }

    def list_object_versions(self, Bucket, Prefix):
        if Prefix in self.fail_versions_for:
            raise client_error("ListObjectVersions")
        matching = [v for v in self.versions if v["Bucket"] == Bucket and v["Key"].startswith(Prefix)]
        matching.sort(key=lambda v: (v["Key"], -self.versions.index(v)))
        latest = {}
        for v in self.versions:
            latest[v["Key"]] = v["VersionId"]
        return {
            "Versions": [
                {
                    "Key": v["Key"],
                    "VersionId": v["VersionId"],
                    "LastModified": v["LastModified"],
                    "IsLatest": latest[v["Key"]] == v["VersionId"],
                }
                for v in matching
            ]
        }

    def get_object(self, Bucket, Key, VersionId):
        self.get_calls.append((Bucket, Key, VersionId))
        if VersionId in self.fail_get_for:
            raise client_error("GetObject", "NoSuchVersion")
        for v in self.versions:
            if v["Bucket"] == Bucket and v["Key"] == Key and v["VersionId"] == VersionId:
                return {"Body": io.BytesIO(v["Body"])}
        raise client_error("GetObject", "NoSuchKey")


@pytest.fixture
def backend():
    return FakeS3Backend()


@pytest.fixture
def s3(backend):
    return S3Client(backend)


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point HOME at an empty directory so no user config is picked up."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("S3HISTORY_CONFIG", raising=False)
    return home


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")
