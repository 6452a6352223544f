"""HTTP-level tests for the video routes."""
import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from video.errors import ProviderError
from video.minimax import MiniMaxProvider
from video.mock import MockProvider
from video.storage import VideoStorage


@pytest.fixture
def storage(settings):
    def handler(request):
        return httpx.Response(200, content=b"downloaded-video")
    return VideoStorage(settings.storage_dir, transport=httpx.MockTransport(handler))


@pytest.fixture
def client(settings, recording_provider, storage):
    app = create_app(settings, provider=recording_provider, storage=storage)
    with TestClient(app) as test_client:
        yield test_client


def test_text_to_video_requires_prompt(client, recording_provider):
    response = client.post("/video/text-to-video", json={"style": "anime"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["message"] == "Prompt is required"
    assert recording_provider.calls == []


def test_text_to_video_returns_job(client, recording_provider):
    response = client.post(
        "/video/text-to-video",
        json={"prompt": "a fox", "userId": "u1", "fps": "abc", "resolution": "480p"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "jobId": "job-text", "estimatedTime": "30s"}
    resolved = recording_provider.calls[0][4]
    assert resolved.fps == 24
    assert resolved.resolution == "480p"


def test_text_to_video_provider_failure_is_500(client, recording_provider):
    recording_provider.error = ProviderError("MiniMax API Error (401): invalid key", status=401)

    response = client.post("/video/text-to-video", json={"prompt": "a fox"})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to generate video",
        "message": "MiniMax API Error (401): invalid key",
    }


def test_image_to_video_requires_image(client, recording_provider):
    response = client.post("/video/image-to-video", data={"prompt": "move"})

    assert response.status_code == 400
    assert response.json()["message"] == "Image file is required"
    assert recording_provider.calls == []


def test_image_to_video_rejects_non_images(client, recording_provider):
    response = client.post(
        "/video/image-to-video",
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"
    assert recording_provider.calls == []


def test_image_to_video_rejects_large_images(client, recording_provider):
    response = client.post(
        "/video/image-to-video",
        files={"image": ("big.png", b"x" * 2048, "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Image file too large"


def test_image_to_video_passes_bytes_and_settings(client, recording_provider):
    response = client.post(
        "/video/image-to-video",
        files={"image": ("pet.jpg", b"jpeg-data", "image/jpeg")},
        data={"prompt": "wag tail", "style": "cartoon", "userId": "u1", "quality": "low", "format": "webm"},
    )

    assert response.status_code == 200
    assert response.json()["jobId"] == "job-image"
    kind, image, mime_type, prompt, style, resolved = recording_provider.calls[0]
    assert (image, mime_type, prompt, style) == (b"jpeg-data", "image/jpeg", "wag tail", "cartoon")
    assert resolved.quality == "low"
    assert resolved.format == "webm"


def test_status_saves_completed_video_and_serves_it(client, recording_provider):
    recording_provider.status_payload = {
        "job_id": "job-9",
        "status": "completed",
        "result": {"video_url": "https://cdn.provider.test/job-9.mp4"},
    }

    response = client.get("/video/status/job-9", params={"userId": "u1"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["localVideoUrl"] == "/api/videos/u1/job-9.mp4"

    served = client.get(body["localVideoUrl"])
    assert served.status_code == 200
    assert served.content == b"downloaded-video"


def test_status_failure_is_500(client, recording_provider):
    recording_provider.error = ProviderError("MiniMax API Error (404): job not found", status=404)

    response = client.get("/video/status/missing")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to check video status"
    assert response.json()["message"] == "MiniMax API Error (404): job not found"


def test_list_user_videos(client, settings):
    assert client.get("/video/user/nobody").json() == []

    user_dir = settings.storage_dir / "u1"
    user_dir.mkdir(parents=True)
    (user_dir / "a.mp4").write_bytes(b"1234")

    videos = client.get("/video/user/u1").json()
    assert len(videos) == 1
    assert videos[0]["filename"] == "a.mp4"
    assert videos[0]["url"] == "/api/videos/u1/a.mp4"
    assert videos[0]["size"] == 4
    assert "createdAt" in videos[0]


def test_delete_video(client, settings):
    target = settings.storage_dir / "u1" / "a.mp4"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"x")

    response = client.delete("/video/u1/a.mp4")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Video deleted successfully"}
    assert not target.exists()

    again = client.delete("/video/u1/a.mp4")
    assert again.status_code == 404
    assert again.json()["success"] is False


def test_health_reports_provider(client):
    assert client.get("/health").json()["provider"] == "recording"


def test_mock_provider_end_to_end(settings, storage):
    app = create_app(settings, provider=MockProvider(video_url="https://cdn.provider.test/sample.mp4"), storage=storage)
    with TestClient(app) as test_client:
        job_id = test_client.post("/video/text-to-video", json={"prompt": "demo"}).json()["jobId"]

        first = test_client.get(f"/video/status/{job_id}").json()
        assert first["status"] == "processing"

        second = test_client.get(f"/video/status/{job_id}").json()
        assert second["status"] == "completed"
        assert second["localVideoUrl"] == f"/api/videos/{job_id}.mp4"

        listed = test_client.get("/video/user/anyone").json()
        assert listed == []


def test_numeric_estimated_time_is_reported_as_text(settings, storage):
    def handler(request):
        return httpx.Response(200, json={"job_id": "j", "estimated_time": 120})

    provider = MiniMaxProvider(settings, transport=httpx.MockTransport(handler))
    app = create_app(settings, provider=provider, storage=storage)
    with TestClient(app) as test_client:
        response = test_client.post("/video/text-to-video", json={"prompt": "a fox"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "jobId": "j", "estimatedTime": "120"}
