"""
Document Sources
================

Providers of course document snapshots for the RAG pipeline.

Every source returns plain rows ``{id, title, subject, content,
created_at}``; normalisation into ``CourseDocument`` happens in the
indexing layer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union, runtime_checkable

import requests

from exam_rag.core.exceptions import DocumentSourceError

logger = logging.getLogger(__name__)

DOCUMENT_COLUMNS = ("id", "title", "subject", "content", "created_at")


@runtime_checkable
class DocumentSource(Protocol):
    """Anything that can list the current course documents."""

    async def list_documents(self) -> List[Dict[str, Any]]:
        ...


class StaticDocumentSource:
    """Fixed in-memory document list."""

    def __init__(self, documents: Optional[Sequence[Dict[str, Any]]] = None):
        self.documents = list(documents or [])

    async def list_documents(self) -> List[Dict[str, Any]]:
        return list(self.documents)


class JsonFileDocumentSource:
    """
    Reads documents from a JSON file.

    The file holds either a list of document objects or an object with a
    ``documents`` list. It is re-read on every call so edits are picked up
    on the next refresh.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise DocumentSourceError(f"Documents file not found: {self.path}", source=str(self.path))
        except (OSError, json.JSONDecodeError) as e:
            raise DocumentSourceError(f"Cannot read documents file: {e}", source=str(self.path))

        if isinstance(data, dict):
            data = data.get("documents", [])
        if not isinstance(data, list):
            raise DocumentSourceError(
                "Documents file must contain a list of documents",
                source=str(self.path),
                details={"type": type(data).__name__},
            )

        logger.info(f"[documents] Loaded {len(data)} documents from {self.path}")
        return data

    async def list_documents(self) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._read)


class SupabaseDocumentSource:
    """
    Reads the documents table through the Supabase REST (PostgREST) API.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "documents",
        timeout: int = 30
    ):
        """
        Initialize the Supabase source.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            api_key: Service role or anon key
            table: Table holding the uploaded documents
            timeout: Request timeout in seconds
        """
        if not url or not api_key:
            raise DocumentSourceError("Supabase URL and key are required", source="supabase")

        self.url = url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.url}/rest/v1/{self.table}"

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def _fetch(self) -> List[Dict[str, Any]]:
        params = {
            "select": ",".join(DOCUMENT_COLUMNS),
            "order": "created_at.desc",
        }

        try:
            response = requests.get(
                self.endpoint,
                headers=self._headers(),
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"[documents] Supabase request failed: {e}")
            raise DocumentSourceError(f"Supabase request failed: {e}", source="supabase")

        if response.status_code != 200:
            logger.error(f"[documents] Supabase error: {response.status_code} - {response.text}")
            raise DocumentSourceError(
                f"Supabase error: {response.status_code}",
                source="supabase",
                details={"status_code": response.status_code},
            )

        try:
            rows = response.json()
        except ValueError as e:
            raise DocumentSourceError(f"Invalid JSON from Supabase: {e}", source="supabase")

        if not isinstance(rows, list):
            raise DocumentSourceError("Unexpected Supabase response shape", source="supabase")

        logger.info(f"[documents] Fetched {len(rows)} documents from Supabase table '{self.table}'")
        return rows

    async def list_documents(self) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._fetch)
