import json
import logging

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigLoadError
from .logs import masked

logger = logging.getLogger(__name__)

_TRUE = {'1', 't', 'T', 'TRUE', 'true', 'True'}


def parse_bool(value) -> bool:
    # strconv.ParseBool semantics; anything unparseable reads as false
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip() in _TRUE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='STORJ_MIGRATOR_')

    # config files
    ZENKO_CONFIG_FILE: str = './config/zenko_property.json'
    STORJ_CONFIG_FILE: str = './config/storj_config.json'
    # transfer
    CHUNK_SIZE: int = Field(32 * 1024, gt=0)
    # paths
    DEBUG_DIR: str = 'debug'
    LOG_FILE: str | None = None


class ZenkoConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    endpoint: str = Field('', validation_alias=AliasChoices('zenkoEndpoint', 'endpoint'))
    access_key_id: str = Field('', alias='accessKeyID')
    secret_access_key: str = Field('', alias='secretAccessKey')


class StorjConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field('', alias='apiKey')
    satellite: str = Field('', alias='satelliteURL')
    bucket: str = Field('', alias='bucketName')
    upload_path: str = Field('', alias='uploadPath')
    encryption_passphrase: str = Field('', alias='encryptionPassphrase')
    serialized_scope: str = Field('', alias='serializedScope')
    disallow_reads: bool = Field(False, alias='disallowReads')
    disallow_writes: bool = Field(False, alias='disallowWrites')
    disallow_deletes: bool = Field(False, alias='disallowDeletes')

    @field_validator('disallow_reads', 'disallow_writes', 'disallow_deletes', mode='before')
    @classmethod
    def _string_bool(cls, value):
        return parse_bool(value)


def load_config(path, model):
    """Read a JSON config file into ``model``.

    A missing file is fatal. Malformed content is tolerated: a warning is
    logged and every field keeps its empty default.
    """
    try:
        with open(path, 'rb') as f:
            raw = f.read()
    except OSError as e:
        raise ConfigLoadError('load_config', key=str(path), cause=e) from e

    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Malformed configuration in {path}, using defaults: {e}")
        data = {}
    if not isinstance(data, dict):
        logger.warning(f"Configuration in {path} is not a JSON object, using defaults")
        data = {}

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError('validate_config', key=str(path), cause=e) from e


def load_zenko_config(path) -> ZenkoConfig:
    cfg = load_config(path, ZenkoConfig)
    logger.info(f"Read Zenko configuration from the {path} file")
    logger.info(f"Zenko End Point\t: {cfg.endpoint}")
    return cfg


def load_storj_config(path) -> StorjConfig:
    cfg = load_config(path, StorjConfig)
    logger.info(f"Reading Storj configuration from file: {path}")
    logger.info(f"API Key\t\t\t: {masked(cfg.api_key)}")
    logger.info(f"Satellite\t\t: {cfg.satellite}")
    logger.info(f"Bucket\t\t\t: {cfg.bucket}")
    logger.info(f"Upload Path\t\t: {cfg.upload_path}")
    logger.info(f"Serialized Scope Key\t: {masked(cfg.serialized_scope)}")
    return cfg


settings = Settings()
