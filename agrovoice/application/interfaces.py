from abc import ABC, abstractmethod
from typing import List, Optional

from agrovoice.domain.models import Report


class ReportStoreInterface(ABC):
    """Persistence contract for reports keyed by (user_id, report_id)"""

    @abstractmethod
    async def create(self, user_id: str, report: Report) -> Report:
        """Persist a new report and return it with its store-assigned id."""
        ...

    @abstractmethod
    async def get(self, user_id: str, report_id: str) -> Optional[Report]:
        ...

    @abstractmethod
    async def list_for_user(
        self,
        user_id: str,
        *,
        parcelle_id: Optional[str] = None,
        limit: int = 50,
    ) -> List[Report]:
        ...

    @abstractmethod
    async def patch_audio(
        self,
        user_id: str,
        report_id: str,
        *,
        audio_url: str,
        darija_script: str,
    ) -> None:
        """Overwrite only the audio fields of an existing report."""
        ...


class ArtifactStoreInterface(ABC):
    """Binary object storage with canonical public URLs"""

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def upload(
        self,
        object_path: str,
        data: bytes,
        *,
        content_type: str,
    ) -> str:
        """Store ``data`` publicly under ``object_path`` and return its URL."""
        ...

    @abstractmethod
    def public_url(self, object_path: str) -> str:
        ...
