"""
Downloads object versions into the working tree.
"""

import logging
import os

from ..domain.operation import FailurePolicy
from ..domain.version import VersionRecord
from ..exit_codes import MaterializeError, StorageError
from ..infra.s3_client import S3Client

logger = logging.getLogger(__name__)


class Materializer:
    """Writes the content of one object version to its local path."""

    policy = FailurePolicy.FATAL

    def __init__(self, s3: S3Client):
        self.s3 = s3

    def materialize(self, record: VersionRecord) -> str:
        """
        Fetch a version and write it to ``record.local_path``.

        Missing parent directories are created and an existing file is
        overwritten.

        Returns:
            The path written

        Raises:
            MaterializeError: If the fetch, directory creation or write fails
        """
        filename = record.local_path
        tree_root = os.path.abspath(os.path.join(record.repository_root, record.bucket))
        if os.path.commonpath([tree_root, filename]) != tree_root or filename == tree_root:
            raise MaterializeError(f"Key {record.key!r} resolves outside of {tree_root}")
        if os.path.relpath(filename, tree_root).split(os.sep)[0] == '.git':
            raise MaterializeError(f"Key {record.key!r} would overwrite the repository metadata")

        try:
            body = self.s3.get_object(record.bucket, record.key, record.version_id)
        except StorageError as e:
            raise MaterializeError(str(e)) from e

        dirname = os.path.dirname(filename)
        try:
            os.makedirs(dirname, mode=0o777, exist_ok=True)
        except OSError as e:
            raise MaterializeError(f"Couldn't create directory {dirname}: {e}") from e

        try:
            with open(filename, 'wb') as f:
                f.write(body)
        except OSError as e:
            raise MaterializeError(f"Couldn't write file {filename}: {e}") from e

        logger.debug(f"Wrote {record.bucket}:{record.key}@{record.version_id} to {filename}")
        return filename
