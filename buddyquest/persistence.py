"""
Persistence layer for the BuddyQuest learning engine.

Each learner has three documents, saved and loaded independently:
- question_bank: banked questions with usage statistics
- progress: difficulty tiers, rolling windows and lifetime counters
- quests: quest runtime state

Documents are versioned JSON blobs held in a BlobStore. Writes replace a
whole document atomically. A document that cannot be decoded is logged
and replaced by a fresh default instead of interrupting the session.

Stores:
- DynamoDbBlobStore: one DynamoDB item per profile (partition key "id"),
  one binary attribute per document
- FileBlobStore: one JSON file per profile and document
- MemoryBlobStore: in-process, for tests and previews
"""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import boto3
from boto3.dynamodb.types import Binary

from buddyquest.config import DYNAMODB_TABLE_NAME
from buddyquest.errors import CorruptPersistenceError
from buddyquest.models import (
    BANK_FORMAT_VERSION,
    PROGRESS_FORMAT_VERSION,
    DifficultyState,
    QuestionBankData,
)
from buddyquest.questions import SUBJECT_DISPLAY_NAMES
from buddyquest.quests import QUEST_FORMAT_VERSION, QuestRuntimeState

logger = logging.getLogger(__name__)

# Document names, used as DynamoDB attributes and file name parts
ATTR_QUESTION_BANK = "question_bank"
ATTR_PROGRESS = "progress"
ATTR_QUESTS = "quests"

PARTITION_KEY = "id"


class BlobStore(Protocol):
    """Key-value storage of one document per profile."""

    def load(self, profile_id: str) -> bytes | None: ...

    def save(self, profile_id: str, data: bytes) -> None: ...

    def delete(self, profile_id: str) -> None: ...


class MemoryBlobStore:
    """Dictionary-backed store."""

    def __init__(self):
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def load(self, profile_id: str) -> bytes | None:
        with self._lock:
            return self._blobs.get(profile_id)

    def save(self, profile_id: str, data: bytes) -> None:
        with self._lock:
            self._blobs[profile_id] = bytes(data)

    def delete(self, profile_id: str) -> None:
        with self._lock:
            self._blobs.pop(profile_id, None)


class FileBlobStore:
    """
    One file per profile in a directory.

    Files are written to a temporary file first and moved into place, so
    a reader sees either the old or the new document.
    """

    def __init__(self, directory: str | Path, document: str):
        self._directory = Path(directory)
        self._document = document

    def _path(self, profile_id: str) -> Path:
        if not profile_id or os.sep in profile_id or profile_id in (".", ".."):
            raise ValueError(f"Invalid profile id: {profile_id!r}")
        return self._directory / f"{profile_id}.{self._document}.json"

    def load(self, profile_id: str) -> bytes | None:
        path = self._path(profile_id)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def save(self, profile_id: str, data: bytes) -> None:
        path = self._path(profile_id)
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=self._directory, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def delete(self, profile_id: str) -> None:
        self._path(profile_id).unlink(missing_ok=True)


class DynamoDbBlobStore:
    """
    A document stored as one attribute of the profile's DynamoDB item.

    update_item only touches its own attribute, so the three documents of
    a profile never overwrite each other.
    """

    def __init__(self, table, attribute: str):
        """
        Args:
            table: A boto3 DynamoDB Table resource with partition key "id".
            attribute: Attribute holding this document.
        """
        self._table = table
        self._attribute = attribute

    @classmethod
    def from_table_name(
        cls,
        attribute: str,
        table_name: str = DYNAMODB_TABLE_NAME,
        **resource_kwargs,
    ) -> "DynamoDbBlobStore":
        """Create a store on a table, e.g. with endpoint_url for local testing."""
        dynamodb = boto3.resource("dynamodb", **resource_kwargs)
        return cls(dynamodb.Table(table_name), attribute)

    def load(self, profile_id: str) -> bytes | None:
        response = self._table.get_item(
            Key={PARTITION_KEY: profile_id},
            ProjectionExpression="#doc",
            ExpressionAttributeNames={"#doc": self._attribute},
        )
        item = response.get("Item")
        if not item or self._attribute not in item:
            return None
        value = item[self._attribute]
        if isinstance(value, Binary):
            return value.value
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def save(self, profile_id: str, data: bytes) -> None:
        self._table.update_item(
            Key={PARTITION_KEY: profile_id},
            UpdateExpression="SET #doc = :data",
            ExpressionAttributeNames={"#doc": self._attribute},
            ExpressionAttributeValues={":data": Binary(data)},
        )

    def delete(self, profile_id: str) -> None:
        self._table.update_item(
            Key={PARTITION_KEY: profile_id},
            UpdateExpression="REMOVE #doc",
            ExpressionAttributeNames={"#doc": self._attribute},
        )


# ============================================================================
# Format Migration
# ============================================================================

_SUBJECT_KEYS_BY_DISPLAY_NAME = {name: subject.value for subject, name in SUBJECT_DISPLAY_NAMES.items()}


def _rekey_subjects(mapping: dict) -> dict:
    return {_SUBJECT_KEYS_BY_DISPLAY_NAME.get(key, key): value for key, value in mapping.items()}


def _migrate_bank_v0(document: dict) -> dict:
    """Version 0 keyed subjects by display name ("Language Arts")."""
    document["questions"] = _rekey_subjects(document.get("questions", {}))
    document["last_replenish"] = _rekey_subjects(document.get("last_replenish", {}))
    for items in document["questions"].values():
        for item in items:
            question = item.get("question", {})
            if question.get("subject") in _SUBJECT_KEYS_BY_DISPLAY_NAME:
                question["subject"] = _SUBJECT_KEYS_BY_DISPLAY_NAME[question["subject"]]
    return document


def _migrate_progress_v0(document: dict) -> dict:
    for key in ("tiers", "windows", "completed", "correct", "rounds"):
        document[key] = _rekey_subjects(document.get(key, {}))
    return document


# Upgrade functions per document, keyed by the version they upgrade from
_MIGRATIONS: dict[str, dict[int, Callable[[dict], dict]]] = {
    ATTR_QUESTION_BANK: {0: _migrate_bank_v0},
    ATTR_PROGRESS: {0: _migrate_progress_v0},
    ATTR_QUESTS: {},
}

_CURRENT_VERSIONS: dict[str, int] = {
    ATTR_QUESTION_BANK: BANK_FORMAT_VERSION,
    ATTR_PROGRESS: PROGRESS_FORMAT_VERSION,
    ATTR_QUESTS: QUEST_FORMAT_VERSION,
}


def encode_document(document: dict) -> bytes:
    """Serialize a document dictionary."""
    return json.dumps(document, sort_keys=True, ensure_ascii=False).encode("utf-8")


def decode_document(raw: bytes, document_name: str) -> dict:
    """
    Parse a stored document and bring it up to the current version.

    Raises:
        CorruptPersistenceError: If the blob is not a JSON object or its
                                 version is unknown.
    """
    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptPersistenceError(f"{document_name} is not valid JSON") from e
    if not isinstance(document, dict):
        raise CorruptPersistenceError(f"{document_name} is not a JSON object")

    current = _CURRENT_VERSIONS[document_name]
    version = document.get("version", 0)
    if not isinstance(version, int) or version > current:
        raise CorruptPersistenceError(f"{document_name} has unsupported version {version!r}")

    migrations = _MIGRATIONS[document_name]
    while version < current:
        upgrade = migrations.get(version)
        if upgrade is not None:
            document = upgrade(document)
        version += 1
    document["version"] = current
    return document


def decode_model(raw: bytes, document_name: str, factory: Callable[[dict], object]):
    """
    Decode a stored document into its model.

    Raises:
        CorruptPersistenceError: If the document cannot be decoded or does
                                 not match the model (unknown subjects,
                                 tiers or payload types included).
    """
    document = decode_document(raw, document_name)
    try:
        return factory(document)
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise CorruptPersistenceError(f"{document_name} does not match its schema: {e}") from e


class ProfileStorage:
    """
    Loads and saves the three documents of one profile.

    This class provides a clean interface for the session, abstracting
    away the storage backend.
    """

    def __init__(
        self,
        profile_id: str,
        bank_store: BlobStore,
        progress_store: BlobStore,
        quest_store: BlobStore,
    ):
        self.profile_id = profile_id
        self._stores: dict[str, BlobStore] = {
            ATTR_QUESTION_BANK: bank_store,
            ATTR_PROGRESS: progress_store,
            ATTR_QUESTS: quest_store,
        }

    @classmethod
    def for_dynamodb(cls, profile_id: str, table=None, **resource_kwargs) -> "ProfileStorage":
        """
        Storage backed by a DynamoDB table.

        Args:
            profile_id: The learner profile.
            table: A boto3 Table resource. If None, DYNAMODB_TABLE_NAME is
                   opened with resource_kwargs.
        """
        if table is None:
            table = boto3.resource("dynamodb", **resource_kwargs).Table(DYNAMODB_TABLE_NAME)
        return cls(
            profile_id,
            DynamoDbBlobStore(table, ATTR_QUESTION_BANK),
            DynamoDbBlobStore(table, ATTR_PROGRESS),
            DynamoDbBlobStore(table, ATTR_QUESTS),
        )

    @classmethod
    def for_directory(cls, profile_id: str, directory: str | Path) -> "ProfileStorage":
        return cls(
            profile_id,
            FileBlobStore(directory, ATTR_QUESTION_BANK),
            FileBlobStore(directory, ATTR_PROGRESS),
            FileBlobStore(directory, ATTR_QUESTS),
        )

    @classmethod
    def in_memory(cls, profile_id: str) -> "ProfileStorage":
        return cls(profile_id, MemoryBlobStore(), MemoryBlobStore(), MemoryBlobStore())

    # ------------------------------------------------------------------
    # Generic load/save
    # ------------------------------------------------------------------

    def _load(self, document_name: str, factory):
        """
        Load and decode one document.

        Returns:
            The decoded model, or None if the document was never saved or
            could not be decoded.
        """
        raw = self._stores[document_name].load(self.profile_id)
        if raw is None:
            return None
        try:
            return decode_model(raw, document_name, factory)
        except CorruptPersistenceError:
            logger.error(
                f"Corrupt {document_name} document for profile {self.profile_id}, resetting",
                exc_info=True,
            )
        return None

    def _save(self, document_name: str, document: dict) -> None:
        self._stores[document_name].save(self.profile_id, encode_document(document))

    def has_document(self, document_name: str) -> bool:
        return self._stores[document_name].load(self.profile_id) is not None

    def is_new_profile(self) -> bool:
        """True if nothing has ever been saved for this profile."""
        return not any(self.has_document(name) for name in self._stores)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def load_bank(self) -> QuestionBankData:
        return self._load(ATTR_QUESTION_BANK, QuestionBankData.from_dict) or QuestionBankData()

    def save_bank(self, bank: QuestionBankData) -> None:
        self._save(ATTR_QUESTION_BANK, bank.to_dict())

    def load_progress(self) -> DifficultyState:
        return self._load(ATTR_PROGRESS, DifficultyState.from_dict) or DifficultyState()

    def save_progress(self, state: DifficultyState) -> None:
        self._save(ATTR_PROGRESS, state.to_dict())

    def load_quests(self) -> QuestRuntimeState | None:
        """
        Load the quest state.

        Returns:
            None if the profile has no (readable) quest document, so the
            caller can rebuild it from the player's history.
        """
        return self._load(ATTR_QUESTS, QuestRuntimeState.from_dict)

    def save_quests(self, state: QuestRuntimeState) -> None:
        self._save(ATTR_QUESTS, state.to_dict())

    def delete_profile(self) -> None:
        """Remove all documents of the profile."""
        for store in self._stores.values():
            store.delete(self.profile_id)
        logger.info(f"Deleted profile {self.profile_id}")
