import logging
from dataclasses import dataclass
from typing import Any

from .destination import Caveat, DestinationError, EncryptionRestriction
from .errors import MigrationError, ScopeError, StoreConnectionError
from .logs import masked

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessScope:
    satellite: str
    api_key: Any
    encryption_access: Any
    serialized: str
    restricted: bool = False


class ScopeSession:
    """Open destination handles for one run; closes them on exit."""

    def __init__(self, network, project, bucket, unrestricted=None, restricted=None):
        self.network = network
        self.project = project
        self.bucket = bucket
        self.unrestricted = unrestricted
        self.restricted = restricted

    @property
    def exported_scope(self):
        """Serialized scope to hand to the user, or None when it was loaded."""
        if self.restricted is not None:
            return self.restricted.serialized
        if self.unrestricted is not None:
            return self.unrestricted.serialized
        return None

    def close(self):
        for handle in (self.bucket, self.project, self.network):
            if handle is None:
                continue
            try:
                handle.close()
            except DestinationError as e:
                logger.warning(f"Error while closing {type(handle).__name__}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False


class AccessScopeManager:
    def __init__(self, network, cfg, debug=False):
        self.network = network
        self.cfg = cfg
        self.debug = debug

    # ------------------ derivation ------------------
    def derive(self) -> AccessScope:
        cfg = self.cfg
        logger.info("Parsing the API key...")
        try:
            api_key = self.network.parse_api_key(cfg.api_key)
        except DestinationError as e:
            raise ScopeError('parse_api_key', cause=e) from e

        logger.info("Opening Project...")
        try:
            project = self.network.open_project(cfg.satellite, api_key)
        except DestinationError as e:
            raise StoreConnectionError('open_project', key=cfg.satellite, cause=e) from e

        try:
            if self.debug:
                logger.debug("Getting encryption key from pass phrase...")
            try:
                encryption_key = project.salted_key_from_passphrase(cfg.encryption_passphrase)
                access = self.network.new_encryption_access(encryption_key)
                serialized_access = self.network.serialize_encryption_access(access)
                # round trip check only; the parsed copy is not used
                self.network.parse_encryption_access(serialized_access)
            except DestinationError as e:
                raise ScopeError('derive_encryption_access', cause=e) from e
            if self.debug:
                logger.debug(f"Serialized access key\t: {masked(serialized_access)}")

            try:
                serialized = self.network.serialize_scope(cfg.satellite, api_key, access)
            except DestinationError as e:
                raise ScopeError('serialize_scope', cause=e) from e
        finally:
            project.close()

        return AccessScope(satellite=cfg.satellite, api_key=api_key,
                           encryption_access=access, serialized=serialized)

    def restrict(self, scope: AccessScope) -> AccessScope:
        """Narrow a freshly derived scope by the configured caveats and upload path."""
        if scope.restricted:
            raise ScopeError('restrict', message='scope is already restricted')
        cfg = self.cfg
        caveat = Caveat(
            disallow_reads=cfg.disallow_reads,
            disallow_writes=cfg.disallow_writes,
            disallow_deletes=cfg.disallow_deletes,
        )
        restriction = EncryptionRestriction(bucket=cfg.bucket, path_prefix=cfg.upload_path)
        logger.info(f"Restricting scope to {restriction.bucket}/{restriction.path_prefix} with {caveat}")
        try:
            api_key = self.network.restrict_api_key(scope.api_key, caveat)
            api_key, access = self.network.restrict_encryption_access(scope.encryption_access, api_key, restriction)
            serialized = self.network.serialize_scope(scope.satellite, api_key, access)
        except DestinationError as e:
            raise ScopeError('restrict', key=cfg.bucket, cause=e) from e
        return AccessScope(satellite=scope.satellite, api_key=api_key, encryption_access=access,
                           serialized=serialized, restricted=True)

    # ------------------ bucket ------------------
    def open_bucket(self, serialized_scope):
        cfg = self.cfg
        try:
            parsed = self.network.parse_scope(serialized_scope)
        except DestinationError as e:
            raise ScopeError('parse_scope', cause=e) from e

        satellite = parsed.satellite or cfg.satellite
        try:
            project = self.network.open_project(satellite, parsed.api_key)
        except DestinationError as e:
            raise StoreConnectionError('open_project', key=satellite, cause=e) from e

        logger.info(f"Opening Bucket\t\t: {cfg.bucket}")
        try:
            bucket = project.open_bucket(cfg.bucket, parsed.encryption_access)
        except DestinationError as e:
            logger.info(f"Could not open bucket {cfg.bucket}: {e}")
            logger.info("Trying to create new bucket....")
            try:
                project.create_bucket(cfg.bucket)
                logger.info(f"Created Bucket {cfg.bucket}")
                bucket = project.open_bucket(cfg.bucket, parsed.encryption_access)
            except DestinationError as create_err:
                project.close()
                raise StoreConnectionError('create_bucket', key=cfg.bucket, cause=create_err) from create_err
        return project, bucket

    def acquire(self, derive_fresh=False, restrict=False) -> ScopeSession:
        unrestricted = restricted = None
        try:
            if derive_fresh:
                unrestricted = self.derive()
                if restrict:
                    restricted = self.restrict(unrestricted)
                serialized = unrestricted.serialized
            else:
                if restrict:
                    logger.warning("Restriction needs a freshly derived scope ('key'); ignoring 'restrict'")
                serialized = self.cfg.serialized_scope

            # the bucket is always worked through the unrestricted scope
            project, bucket = self.open_bucket(serialized)
        except MigrationError:
            self.network.close()
            raise
        return ScopeSession(self.network, project, bucket, unrestricted=unrestricted, restricted=restricted)
