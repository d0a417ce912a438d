"""Tests for the narration pipeline and the /reports/narration endpoint."""

from __future__ import annotations

import asyncio
import itertools
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from agrovoice.controllers.dependencies import get_narration_orchestrator
from agrovoice.domain.models import Report
from agrovoice.main import app
from agrovoice.pipelines.errors import (
    ConfigurationError,
    ReportNotFoundError,
    UpstreamError,
    ValidationError,
)
from agrovoice.pipelines.narration import (
    CLOSING_BLESSING,
    DEFAULT_ADDRESSEE,
    VOICE_SETTINGS,
    AudioSynthesizer,
    LiveNarration,
    NarrationInput,
    NarrationOrchestrator,
    NarrationTrigger,
    ScriptTranslator,
    opening_greeting,
)

from agrovoice.pipelines.report import ReportAssembler, ReportRequest
from agrovoice.services.storage import S3ArtifactStore

from conftest import (
    DARIJA_SCRIPT,
    FAKE_MP3,
    TEST_BUCKET,
    InMemoryReportStore,
    TtsRecorder,
    bedrock_client,
    elevenlabs_client,
)

NARRATION_INPUT = NarrationInput(
    parcelle_name="P1",
    status="alerte",
    summary="Risque élevé de mildiou après les pluies.",
    recommendations=["Appliquer un fongicide cuprique", "Drainer les zones basses"],
    weather={"temperature": 22, "humidity": 91, "precipitation": 14},
)


def _seed_report(store, user_id: str = "farmer-1") -> Report:
    report = Report(
        parcelle_id="P1",
        parcelle_name="P1",
        status="alerte",
        summary=NARRATION_INPUT.summary,
        recommendations=list(NARRATION_INPUT.recommendations),
    )
    return asyncio.run(store.create(user_id, report))


def _trigger(report_id: str, user_id: str = "farmer-1") -> NarrationTrigger:
    return NarrationTrigger(user_id=user_id, report_id=report_id, content=NARRATION_INPUT)


def test_narration_uploads_audio_and_patches_report(
    orchestrator, report_store, s3_client, tts_recorder, bedrock_runtime
):
    stored = _seed_report(report_store)

    result = asyncio.run(orchestrator.narrate(_trigger(stored.id)))

    expected_key = f"audio-reports/report_{stored.id}_1700000000000.mp3"
    assert result.object_path == expected_key
    assert result.audio_url == f"https://s3.amazonaws.com/{TEST_BUCKET}/{expected_key}"
    assert result.darija_script == DARIJA_SCRIPT
    assert opening_greeting(DEFAULT_ADDRESSEE) in result.darija_script
    assert CLOSING_BLESSING in result.darija_script

    uploaded = s3_client.objects[expected_key]
    assert uploaded["Body"] == FAKE_MP3
    assert uploaded["ContentType"] == "audio/mpeg"
    assert uploaded["ACL"] == "public-read"

    tts_payload = tts_recorder.payloads[0]
    assert tts_payload["text"] == DARIJA_SCRIPT
    assert tts_payload["model_id"] == "eleven_multilingual_v2"
    assert tts_payload["voice_settings"] == dict(VOICE_SETTINGS)
    assert tts_recorder.requests[0].url.path == "/v1/text-to-speech/21m00Tcm4TlvDq8ikWAM"
    assert tts_recorder.requests[0].headers["xi-api-key"] == "test-key"

    prompt = bedrock_runtime.requests[0]["messages"][0]["content"][0]["text"]
    assert "تنبيه خطير" in prompt
    assert opening_greeting(DEFAULT_ADDRESSEE) in prompt
    assert CLOSING_BLESSING in prompt
    assert "Appliquer un fongicide cuprique" in prompt

    patched = report_store.reports[("farmer-1", stored.id)]
    assert patched.audio_url == result.audio_url
    assert patched.darija_script == DARIJA_SCRIPT
    assert patched.is_narrated


def test_repeated_narration_keeps_both_objects_and_latest_wins(
    orchestrator, report_store, s3_client
):
    stored = _seed_report(report_store)

    first = asyncio.run(orchestrator.narrate(_trigger(stored.id)))
    second = asyncio.run(orchestrator.narrate(_trigger(stored.id)))

    assert first.object_path != second.object_path
    assert set(s3_client.objects) == {first.object_path, second.object_path}
    assert report_store.reports[("farmer-1", stored.id)].audio_url == second.audio_url


def test_tts_failure_leaves_report_untouched(report_store, artifact_store, s3_client):
    stored = _seed_report(report_store)
    recorder = TtsRecorder(status_code=401, body=b'{"detail": "invalid api key"}')
    orchestrator = NarrationOrchestrator(
        ScriptTranslator(bedrock_client()),
        AudioSynthesizer(elevenlabs_client(recorder), artifact_store),
        report_store,
    )

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(orchestrator.narrate(_trigger(stored.id)))

    assert excinfo.value.upstream_status == 401
    assert "invalid api key" in excinfo.value.body
    assert s3_client.objects == {}
    assert report_store.patches == []
    assert report_store.reports[("farmer-1", stored.id)].audio_url is None


@pytest.mark.parametrize("broken", ["tts", "bucket"])
def test_missing_audio_configuration_fails_before_any_network_call(
    broken, report_store, s3_client, bedrock_runtime
):
    stored = _seed_report(report_store)
    recorder = TtsRecorder()
    bucket = "" if broken == "bucket" else TEST_BUCKET
    orchestrator = NarrationOrchestrator(
        ScriptTranslator(bedrock_client(bedrock_runtime)),
        AudioSynthesizer(
            elevenlabs_client(recorder, configured=broken != "tts"),
            S3ArtifactStore(s3_client, bucket=bucket, public_host="s3.amazonaws.com"),
        ),
        report_store,
    )

    with pytest.raises(ConfigurationError):
        asyncio.run(orchestrator.narrate(_trigger(stored.id)))

    assert bedrock_runtime.requests == []
    assert recorder.requests == []
    assert s3_client.objects == {}
    assert report_store.patches == []


def test_missing_script_credentials_short_circuit(report_store, artifact_store, monkeypatch):
    monkeypatch.setattr("agrovoice.services.llm_client.static_credentials", lambda: None)
    monkeypatch.setattr(
        "agrovoice.services.llm_client.default_credentials_available", lambda: False
    )
    stored = _seed_report(report_store)
    runtime_calls = []
    recorder = TtsRecorder()

    class ExplodingRuntime:
        def converse(self, **request):
            runtime_calls.append(request)
            raise AssertionError("converse should not be called")

    translator = ScriptTranslator(bedrock_client(ExplodingRuntime(), configured=False))
    orchestrator = NarrationOrchestrator(
        translator,
        AudioSynthesizer(elevenlabs_client(recorder), artifact_store),
        report_store,
    )

    with pytest.raises(ConfigurationError):
        asyncio.run(orchestrator.narrate(_trigger(stored.id)))

    assert runtime_calls == []
    assert recorder.requests == []


def test_script_client_uses_default_credential_chain(monkeypatch, bedrock_runtime):
    monkeypatch.setattr("agrovoice.services.llm_client.static_credentials", lambda: None)
    monkeypatch.setattr(
        "agrovoice.services.llm_client.default_credentials_available", lambda: True
    )

    translator = ScriptTranslator(bedrock_client(bedrock_runtime, configured=False))
    script = asyncio.run(translator.translate(NARRATION_INPUT))

    assert script == DARIJA_SCRIPT
    assert len(bedrock_runtime.requests) == 1


def test_unknown_report_fails_before_any_network_call(
    orchestrator, report_store, s3_client, tts_recorder, bedrock_runtime
):
    with pytest.raises(ReportNotFoundError):
        asyncio.run(orchestrator.narrate(_trigger(str(uuid4()))))

    assert bedrock_runtime.requests == []
    assert tts_recorder.requests == []
    assert s3_client.objects == {}
    assert report_store.patches == []


def test_report_deleted_mid_run_is_not_found(artifact_store, s3_client, tts_recorder):
    class VanishingStore(InMemoryReportStore):
        async def get(self, user_id, report_id):
            report = await super().get(user_id, report_id)
            self.reports.clear()
            return report

    store = VanishingStore()
    stored = _seed_report(store)
    orchestrator = NarrationOrchestrator(
        ScriptTranslator(bedrock_client()),
        AudioSynthesizer(elevenlabs_client(tts_recorder), artifact_store),
        store,
    )

    with pytest.raises(ReportNotFoundError):
        asyncio.run(orchestrator.narrate(_trigger(stored.id)))

    assert len(s3_client.objects) == 1
    assert store.patches == []


@pytest.mark.parametrize(
    "report_id",
    ["", "missing-report", "../other/report", f"{uuid4()}/x", "{" + str(uuid4()) + "}"],
)
def test_malformed_report_id_is_rejected(report_id, orchestrator, tts_recorder, bedrock_runtime):
    with pytest.raises(ValidationError):
        asyncio.run(orchestrator.narrate(_trigger(report_id, user_id="farmer-1")))

    assert bedrock_runtime.requests == []
    assert tts_recorder.requests == []


def test_synthesizer_prefers_configured_voice(artifact_store):
    recorder = TtsRecorder()
    synthesizer = AudioSynthesizer(
        elevenlabs_client(recorder, voice_id="custom-voice"), artifact_store
    )

    result = asyncio.run(synthesizer.synthesize("  مرحبا  ", filename="manual.mp3"))

    assert result.voice_id == "custom-voice"
    assert result.object_path == "audio-reports/manual.mp3"
    assert result.size_bytes == len(FAKE_MP3)
    assert recorder.payloads[0]["text"] == "مرحبا"


def test_synthesizer_rejects_empty_text(artifact_store):
    recorder = TtsRecorder()
    synthesizer = AudioSynthesizer(elevenlabs_client(recorder), artifact_store)

    with pytest.raises(ValidationError):
        asyncio.run(synthesizer.synthesize("   ", filename="empty.mp3"))

    assert recorder.requests == []


@pytest.fixture
def narration_client(orchestrator):
    app.dependency_overrides[get_narration_orchestrator] = lambda: orchestrator

    yield TestClient(app)

    app.dependency_overrides.clear()


def _narration_body(report_id: str) -> dict:
    return {
        "userId": "farmer-1",
        "reportId": report_id,
        "parcelleName": "P1",
        "status": "alerte",
        "summary": NARRATION_INPUT.summary,
        "recommendations": list(NARRATION_INPUT.recommendations),
        "weather": dict(NARRATION_INPUT.weather),
    }


def test_narration_endpoint_success(narration_client, report_store):
    stored = _seed_report(report_store)

    response = narration_client.post("/reports/narration", json=_narration_body(stored.id))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["audioUrl"].startswith(f"https://s3.amazonaws.com/{TEST_BUCKET}/audio-reports/report_{stored.id}_")
    assert body["darijaScript"] == DARIJA_SCRIPT[:100] + "..."
    assert "error" not in body


def test_narration_endpoint_reports_invalid_body(narration_client, tts_recorder):
    body = _narration_body("r-1")
    body["status"] = "unknown"

    response = narration_client.post("/reports/narration", json=body)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert tts_recorder.requests == []


def test_narration_endpoint_reports_missing_report(narration_client, tts_recorder):
    report_id = str(uuid4())

    response = narration_client.post("/reports/narration", json=_narration_body(report_id))

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert report_id in body["error"]
    assert tts_recorder.requests == []


def test_narration_endpoint_rejects_malformed_json(narration_client, bedrock_runtime):
    response = narration_client.post(
        "/reports/narration",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Request body must be valid JSON"}
    assert bedrock_runtime.requests == []


def test_narration_endpoint_unclassified_failure(report_store, artifact_store):
    class BrokenTranslator(ScriptTranslator):
        async def translate(self, narration_input):
            raise RuntimeError("boom")

    stored = _seed_report(report_store)
    clock = itertools.count(1)
    app.dependency_overrides[get_narration_orchestrator] = lambda: NarrationOrchestrator(
        BrokenTranslator(bedrock_client()),
        AudioSynthesizer(elevenlabs_client(TtsRecorder()), artifact_store),
        report_store,
        clock=lambda: next(clock),
    )
    try:
        response = TestClient(app).post("/reports/narration", json=_narration_body(stored.id))
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to generate audio"}


def test_assembler_narrates_in_line_with_live_capability(
    artifact_store, s3_client, tts_recorder, bedrock_runtime
):
    narration = LiveNarration(
        ScriptTranslator(bedrock_client(bedrock_runtime)),
        AudioSynthesizer(elevenlabs_client(tts_recorder), artifact_store),
    )
    request = ReportRequest(
        parcelle={"id": "P1", "name": "Verger Sud"},
        weather={"temperature": 22},
        soil={"ph": 7.1},
        elevation=300,
    )
    parsed = {"status": "alerte", "summary": "Risque de mildiou.", "recommendations": ["Traiter"]}

    report = asyncio.run(ReportAssembler(narration).assemble(parsed, request))

    [object_path] = s3_client.objects
    assert object_path.startswith("audio-reports/report_manual_")
    assert object_path.endswith(".mp3")
    assert report.audio_url == f"https://s3.amazonaws.com/{TEST_BUCKET}/{object_path}"
    assert report.darija_script == DARIJA_SCRIPT
    assert "Verger Sud" in bedrock_runtime.requests[0]["messages"][0]["content"][0]["text"]


def test_list_voices_endpoint():
    from agrovoice.services.elevenlabs import get_elevenlabs_client

    recorder = TtsRecorder()
    app.dependency_overrides[get_elevenlabs_client] = lambda: elevenlabs_client(recorder)
    try:
        response = TestClient(app).get("/narration/voices")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json() == [
        {"voice_id": "voice-1", "name": "Rachel", "category": "premade", "labels": {}}
    ]
