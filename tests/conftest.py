"""Shared fakes for the report and narration tests.

External providers are replaced at the client seam: boto3 clients by small
recording objects, ElevenLabs by an ``httpx.MockTransport`` and OpenAI by an
object exposing ``chat.completions.create``.
"""

from __future__ import annotations

import base64
import itertools
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys
from types import SimpleNamespace
from typing import Any, List, Optional
from uuid import uuid4

import httpx
import pytest
from pydantic import SecretStr

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from agrovoice.application.interfaces import ReportStoreInterface  # noqa: E402
from agrovoice.config.settings import settings  # noqa: E402
from agrovoice.domain.models import Report  # noqa: E402
from agrovoice.pipelines.errors import ReportNotFoundError  # noqa: E402
from agrovoice.pipelines.narration import (  # noqa: E402
    CLOSING_BLESSING,
    DEFAULT_ADDRESSEE,
    AudioSynthesizer,
    NarrationOrchestrator,
    ScriptTranslator,
    opening_greeting,
)
from agrovoice.services.elevenlabs import ElevenLabsClient  # noqa: E402
from agrovoice.services.llm_client import BedrockLlmClient  # noqa: E402
from agrovoice.services.openai_client import OpenAIJsonClient  # noqa: E402
from agrovoice.services.storage import S3ArtifactStore  # noqa: E402

TEST_BUCKET = "test-bucket"
FAKE_MP3 = b"ID3\x04\x00fake-mp3-payload"
DARIJA_SCRIPT = (
    f"{opening_greeting(DEFAULT_ADDRESSEE)}. "
    "على حساب تقرير اليوم ديال P1، كاين تنبيه خطير. "
    "خاصك تدير irrigation بكري فالصباح وتراقب الأمراض. "
    f"{CLOSING_BLESSING}"
)


class InMemoryReportStore(ReportStoreInterface):
    """Dictionary-backed report store keyed by (user_id, report_id)."""

    def __init__(self) -> None:
        self.reports: dict[tuple[str, str], Report] = {}
        self.patches: list[dict[str, Any]] = []
        self._ticks = itertools.count()

    async def create(self, user_id: str, report: Report) -> Report:
        report_id = str(uuid4())
        generated_at = datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(
            minutes=next(self._ticks)
        )
        stored = report.model_copy(
            update={"id": report_id, "user_id": user_id, "generated_at": generated_at}
        )
        self.reports[(user_id, report_id)] = stored
        return stored

    async def get(self, user_id: str, report_id: str) -> Optional[Report]:
        return self.reports.get((user_id, report_id))

    async def list_for_user(
        self,
        user_id: str,
        *,
        parcelle_id: Optional[str] = None,
        limit: int = 50,
    ) -> List[Report]:
        matches = [
            report
            for (owner, _), report in self.reports.items()
            if owner == user_id and (parcelle_id is None or report.parcelle_id == parcelle_id)
        ]
        matches.sort(key=lambda report: report.generated_at, reverse=True)
        return matches[:limit]

    async def patch_audio(
        self,
        user_id: str,
        report_id: str,
        *,
        audio_url: str,
        darija_script: str,
    ) -> None:
        key = (user_id, report_id)
        if key not in self.reports:
            raise ReportNotFoundError(f"Report {report_id} not found")
        self.patches.append({"audio_url": audio_url, "darija_script": darija_script})
        self.reports[key] = self.reports[key].model_copy(
            update={"audio_url": audio_url, "darija_script": darija_script}
        )


class RecordingS3Client:
    """Stands in for a boto3 S3 client and remembers every put."""

    def __init__(self) -> None:
        self.objects: dict[str, dict[str, Any]] = {}

    def put_object(self, **kwargs: Any) -> dict[str, Any]:
        self.objects[kwargs["Key"]] = kwargs
        return {"ETag": '"etag"'}


class FakeBedrockRuntime:
    """Stands in for a boto3 bedrock-runtime client."""

    def __init__(self, text: str = DARIJA_SCRIPT) -> None:
        self.text = text
        self.requests: list[dict[str, Any]] = []

    def converse(self, **request: Any) -> dict[str, Any]:
        self.requests.append(request)
        return {"output": {"message": {"content": [{"text": f"  {self.text}\n"}]}}}


class FakeChatCompletions:
    def __init__(self, content: Optional[str]) -> None:
        self.content = content
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeAsyncOpenAI:
    def __init__(self, content: Optional[str]) -> None:
        self.chat = SimpleNamespace(completions=FakeChatCompletions(content))

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.chat.completions.calls


class TtsRecorder:
    """httpx transport handler emulating the ElevenLabs API."""

    def __init__(self, *, status_code: int = 200, body: bytes = FAKE_MP3) -> None:
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/voices"):
            return httpx.Response(
                200,
                json={
                    "voices": [
                        {"voice_id": "voice-1", "name": "Rachel", "category": "premade", "labels": None},
                        {"name": "no id"},
                    ]
                },
            )
        return httpx.Response(self.status_code, content=self.body)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests if request.method == "POST"]


def bedrock_client(runtime: Optional[FakeBedrockRuntime] = None, *, configured: bool = True) -> BedrockLlmClient:
    api_key = None
    if configured:
        api_key = SecretStr(base64.b64encode(b"AKIATEST:secretvalue").decode())
    config = settings.bedrock.model_copy(update={"api_key": api_key})
    return BedrockLlmClient(config, client=runtime or FakeBedrockRuntime())


def elevenlabs_client(
    recorder: TtsRecorder,
    *,
    configured: bool = True,
    voice_id: Optional[str] = None,
) -> ElevenLabsClient:
    config = settings.elevenlabs.model_copy(
        update={
            "api_key": SecretStr("test-key") if configured else None,
            "voice_id": voice_id,
            "model_id": None,
        }
    )
    return ElevenLabsClient(config, transport=httpx.MockTransport(recorder))


def openai_client(content: Optional[str], *, configured: bool = True) -> tuple[OpenAIJsonClient, FakeAsyncOpenAI]:
    fake = FakeAsyncOpenAI(content)
    if not configured:
        config = settings.openai.model_copy(update={"api_key": None})
        return OpenAIJsonClient(config), fake
    return OpenAIJsonClient(settings.openai, client=fake), fake


@pytest.fixture
def report_store() -> InMemoryReportStore:
    return InMemoryReportStore()


@pytest.fixture
def s3_client() -> RecordingS3Client:
    return RecordingS3Client()


@pytest.fixture
def artifact_store(s3_client: RecordingS3Client) -> S3ArtifactStore:
    return S3ArtifactStore(s3_client, bucket=TEST_BUCKET, public_host="s3.amazonaws.com")


@pytest.fixture
def tts_recorder() -> TtsRecorder:
    return TtsRecorder()


@pytest.fixture
def bedrock_runtime() -> FakeBedrockRuntime:
    return FakeBedrockRuntime()


@pytest.fixture
def orchestrator(
    report_store: InMemoryReportStore,
    artifact_store: S3ArtifactStore,
    tts_recorder: TtsRecorder,
    bedrock_runtime: FakeBedrockRuntime,
) -> NarrationOrchestrator:
    clock = itertools.count(1_700_000_000_000, 1_000)
    return NarrationOrchestrator(
        ScriptTranslator(bedrock_client(bedrock_runtime)),
        AudioSynthesizer(elevenlabs_client(tts_recorder), artifact_store),
        report_store,
        clock=lambda: next(clock),
    )
