"""FastAPI dependencies (overridden in tests)."""

import httpx

from pmtools.config import get_settings
from pmtools.store.json_file import JsonFileDocumentRepository
from pmtools.store.repositories import DocumentRepository


def get_repository() -> DocumentRepository:
    """Document repository rooted at ``settings.data_dir``."""
    return JsonFileDocumentRepository(get_settings().data_dir)


def get_upstream_client() -> httpx.AsyncClient | None:
    """httpx client for the upstream LLM call; None lets the caller create one."""
    return None
