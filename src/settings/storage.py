"""Configuration store implementations.

This module provides the storage backends holding the single system
configuration record:
- InMemoryConfigStore: Keeps the record in memory (mainly for testing)
- EncryptedConfigStore: Persists the record on disk, encrypted with Fernet

A store only reads the current record and replaces it as a whole. Nothing
persisted yet means the default configuration.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import structlog
from cryptography.fernet import Fernet, InvalidToken

from .errors import ConfigStoreError
from .models import ConfigRecord

logger = structlog.get_logger()


class IConfigStore(ABC):
    """Interface for configuration persistence."""

    @abstractmethod
    async def load(self) -> ConfigRecord:
        """Read the current configuration.

        Returns:
            The persisted record, or the default record when none exists.
        """
        pass

    @abstractmethod
    async def save(self, record: ConfigRecord) -> None:
        """Replace the persisted configuration with ``record``.

        Raises:
            ConfigStoreError: If the record could not be written. The
                previously persisted record is left in place.
        """
        pass


class InMemoryConfigStore(IConfigStore):
    """In-memory configuration store.

    All changes are lost when the process terminates.
    """

    def __init__(self, record: Optional[ConfigRecord] = None):
        self._record = record
        self.logger = logger.bind(storage="memory")

    async def load(self) -> ConfigRecord:
        if self._record is None:
            self.logger.debug("config_not_found_using_defaults")
            return ConfigRecord()
        return self._record

    async def save(self, record: ConfigRecord) -> None:
        # Records are immutable, so keeping the reference is enough
        self._record = record
        self.logger.info("config_saved")


class EncryptedConfigStore(IConfigStore):
    """Encrypted on-disk configuration store.

    The record holds third-party account secrets, so it is written as a
    Fernet token rather than plain JSON.

    Security features:
    - The JSON document is encrypted with Fernet (AES-128-CBC + HMAC)
    - Files are created with restrictive permissions (0o600)
    - A generated key is saved next to the data with the same permissions
    - Writes go to a temporary file first and are moved in place atomically

    Attributes:
        storage_path: Directory holding the configuration file
        fernet: Fernet encryption instance
        logger: Structured logger instance with storage context
    """

    CONFIG_FILENAME = "config.enc"
    KEY_FILENAME = ".encryption_key"

    def __init__(self, storage_path: Union[str, Path], encryption_key: Optional[Union[str, bytes]] = None):
        """Initialize the encrypted store.

        Args:
            storage_path: Directory where the configuration is stored.
            encryption_key: Optional Fernet key. When omitted the key saved in
                the storage directory is used, or a new one is generated and
                saved there.
        """
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.logger = logger.bind(storage="encrypted", path=str(self.storage_path))

        if encryption_key:
            self.fernet = Fernet(
                encryption_key.encode() if isinstance(encryption_key, str) else encryption_key
            )
        else:
            self.fernet = Fernet(self._load_or_create_key())

    @property
    def config_path(self) -> Path:
        return self.storage_path / self.CONFIG_FILENAME

    def _load_or_create_key(self) -> bytes:
        key_path = self.storage_path / self.KEY_FILENAME
        if key_path.exists():
            return key_path.read_bytes().strip()

        key = Fernet.generate_key()
        key_path.write_bytes(key)
        os.chmod(key_path, 0o600)
        self.logger.info("encryption_key_saved")
        return key

    async def load(self) -> ConfigRecord:
        if not self.config_path.exists():
            self.logger.debug("config_file_not_found_using_defaults")
            return ConfigRecord()

        try:
            decrypted = self.fernet.decrypt(self.config_path.read_bytes())
        except InvalidToken:
            self.logger.error("config_decrypt_error", path=str(self.config_path))
            raise ConfigStoreError(f"Cannot decrypt {self.config_path}, wrong encryption key?")

        try:
            data = json.loads(decrypted.decode())
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            record = ConfigRecord.from_dict(data)
        except ValueError as e:
            self.logger.error("config_load_error", error=str(e), exc_info=True)
            raise ConfigStoreError(f"Corrupted configuration in {self.config_path}") from e

        self.logger.debug("config_loaded")
        return record

    async def save(self, record: ConfigRecord) -> None:
        token = self.fernet.encrypt(json.dumps(record.to_dict()).encode())

        fd, tmp_name = tempfile.mkstemp(dir=self.storage_path, prefix=".config-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(token)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.config_path)
        except OSError as e:
            self.logger.error("config_save_error", error=str(e), exc_info=True)
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise ConfigStoreError(f"Cannot write {self.config_path}") from e

        self.logger.info("config_saved_encrypted", path=str(self.config_path))
