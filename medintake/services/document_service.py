# medintake/services/document_service.py
"""
Document store collaborator: accepts one uploaded artifact reference per
named slot. Size and type checks belong to the storage backend, not here.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from medintake.core.exceptions import AcquisitionFailure, acquisition_failure

logger = logging.getLogger(__name__)


class DocumentStore(ABC):

    @abstractmethod
    async def accept(self, session_id: str, slot: str, reference: str) -> None:
        """
        Raises:
            AcquisitionFailure: If the upload cannot be accepted
        """
        pass


class InMemoryDocumentStore(DocumentStore):

    def __init__(self):
        self._documents: Dict[Tuple[str, str], str] = {}

    async def accept(self, session_id: str, slot: str, reference: str) -> None:
        if not reference or not reference.strip():
            raise acquisition_failure(
                f"Empty upload for '{slot}'",
                reason=AcquisitionFailure.UNAVAILABLE,
                source="documents"
            )
        self._documents[(session_id, slot)] = reference
        logger.info(f"Accepted document '{slot}' for session {session_id}")

    def get(self, session_id: str, slot: str) -> Optional[str]:
        return self._documents.get((session_id, slot))

    def __len__(self) -> int:
        return len(self._documents)
