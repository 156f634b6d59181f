import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.enums import AnalysisStatus, RecordStoreBackend
from app.core.ids import record_key
from app.db import crud

EMPTY_FEEDBACK = ""


class SubmissionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    resume_path: str = Field(alias="resumePath")
    image_path: str = Field(alias="imagePath")
    company_name: str = Field(alias="companyName")
    job_title: str = Field(alias="jobTitle")
    job_description: str = Field(alias="jobDescription")
    feedback: Any = EMPTY_FEEDBACK
    analysis_status: AnalysisStatus = Field(default=AnalysisStatus.PENDING, alias="analysisStatus")

    @model_validator(mode="before")
    @classmethod
    def _infer_status(cls, data: Any) -> Any:
        # Records written before analysisStatus existed: empty feedback means pending.
        if isinstance(data, dict) and "analysisStatus" not in data and "analysis_status" not in data:
            feedback = data.get("feedback", EMPTY_FEEDBACK)
            data = {
                **data,
                "analysisStatus": AnalysisStatus.PENDING if feedback == EMPTY_FEEDBACK else AnalysisStatus.COMPLETE,
            }
        return data

    @property
    def is_pending(self) -> bool:
        return self.analysis_status == AnalysisStatus.PENDING

    def with_feedback(self, feedback: Any) -> "SubmissionRecord":
        return self.model_copy(update={"feedback": feedback, "analysis_status": AnalysisStatus.COMPLETE})

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "SubmissionRecord":
        return cls.model_validate_json(raw)


class RecordStore(ABC):
    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def keys(self, prefix: str, limit: int | None = None) -> list[str]:
        """Keys under ``prefix``, sorted ascending, at most ``limit`` of them."""
        raise NotImplementedError


class InMemoryRecordStore(RecordStore):
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def keys(self, prefix: str, limit: int | None = None) -> list[str]:
        return sorted(key for key in self._values if key.startswith(f"{prefix}:"))[:limit]


class RedisRecordStore(RecordStore):
    def __init__(self, client) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisRecordStore":
        from redis import asyncio as redis_asyncio

        return cls(redis_asyncio.from_url(url, decode_responses=True))

    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def keys(self, prefix: str, limit: int | None = None) -> list[str]:
        return sorted([key async for key in self.client.scan_iter(match=f"{prefix}:*")])[:limit]


class SqlRecordStore(RecordStore):
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def keys(self, prefix: str, limit: int | None = None) -> list[str]:
        return await asyncio.to_thread(self._keys_sync, prefix, limit)

    def _set_sync(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            crud.set_record_value(db, key=key, value=value)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _get_sync(self, key: str) -> str | None:
        db = self.session_factory()
        try:
            entry = crud.get_record_entry(db, key)
            return entry.value if entry else None
        finally:
            db.close()

    def _keys_sync(self, prefix: str, limit: int | None) -> list[str]:
        db = self.session_factory()
        try:
            return crud.list_record_keys(db, prefix=prefix, limit=limit)
        finally:
            db.close()


async def save_record(store: RecordStore, prefix: str, record: SubmissionRecord) -> str:
    key = record_key(prefix, record.id)
    await store.set(key, record.to_json())
    return key


async def load_record(store: RecordStore, prefix: str, submission_id: str) -> SubmissionRecord | None:
    raw = await store.get(record_key(prefix, submission_id))
    if raw is None:
        return None
    return SubmissionRecord.from_json(raw)


def build_record_store(settings: Settings) -> RecordStore:
    backend = (settings.record_store or "memory").strip().lower()

    if backend == RecordStoreBackend.MEMORY.value:
        return InMemoryRecordStore()
    if backend == RecordStoreBackend.REDIS.value:
        return RedisRecordStore.from_url(settings.redis_url)
    if backend == RecordStoreBackend.SQL.value:
        from app.db.session import build_session_factory

        return SqlRecordStore(build_session_factory(settings.database_url))
    raise ValueError("Unsupported RECORD_STORE. Supported values: memory, redis, sql.")
