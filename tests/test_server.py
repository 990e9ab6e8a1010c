"""Tests for the byte-serving responses and the HTTP application."""

import os

import httpx
import pytest

from carolus.config import Settings
from carolus.data.movies import MovieStore
from carolus.io.local import PartialFile
from carolus.server import responses
from carolus.server.app import create_app
from carolus.server.responses import guess_media_type, serve_partial

VIDEO = bytes(range(250)) * 4   # 1000 bytes


@pytest.fixture
def video_path(tmp_path):
    path = tmp_path / "Big Buck Bunny.mp4"
    path.write_bytes(VIDEO)
    return path


@pytest.fixture
def store(tmp_path):
    return MovieStore(tmp_path / "carolus.db")


@pytest.fixture
def movie(store, video_path):
    return store.create_movie("Big Buck Bunny", str(video_path))


@pytest.fixture
def app(tmp_path, store):
    return create_app(Settings(database=tmp_path / "carolus.db", chunk_size=64, page_size=2), store)


@pytest.fixture
def opened(monkeypatch):
    """Record every PartialFile the responder opens."""
    handles = []
    original = PartialFile.open

    def recording_open(path):
        pf = original(path)
        handles.append(pf)
        return pf

    monkeypatch.setattr(responses.PartialFile, "open", recording_open)
    return handles


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


async def _get_video(app, movie_id, range_value=None, method="GET"):
    headers = {"Range": range_value} if range_value is not None else {}
    async with _client(app) as client:
        return await client.request(method, f"/api/movies/{movie_id}/video", headers=headers)


class TestRangeScenarios:
    """Test the documented request / response pairs against a 1000 byte file."""

    @pytest.mark.asyncio
    async def test_no_range(self, app, movie):
        response = await _get_video(app, movie.id)

        assert response.status_code == 200
        assert response.headers["accept-ranges"] == "bytes"
        assert response.headers["content-length"] == "1000"
        assert "content-range" not in response.headers
        assert response.headers["content-type"] == "video/mp4"
        assert response.content == VIDEO

    @pytest.mark.asyncio
    async def test_scenario_a_explicit(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=500-999")

        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 500-999/1000"
        assert response.headers["content-length"] == "500"
        assert response.headers["accept-ranges"] == "bytes"
        assert response.content == VIDEO[500:1000]

    @pytest.mark.asyncio
    async def test_scenario_b_start_past_eof(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=1500-")

        assert response.status_code == 416
        assert response.headers["content-range"] == "bytes */1000"
        assert response.headers["accept-ranges"] == "bytes"
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_scenario_c_suffix_length(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=-200")

        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 800-999/1000"
        assert response.headers["content-length"] == "200"
        assert response.content == VIDEO[800:]

    @pytest.mark.asyncio
    async def test_scenario_d_oversize_suffix_length(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=-5000")

        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 0-999/1000"
        assert response.headers["content-length"] == "1000"
        assert response.content == VIDEO

    @pytest.mark.asyncio
    async def test_scenario_e_unparseable(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=abc")

        assert response.status_code == 416
        assert response.headers["content-range"] == "bytes */1000"
        assert response.headers["accept-ranges"] == "bytes"

    @pytest.mark.asyncio
    async def test_end_clamped(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=990-5000")

        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 990-999/1000"
        assert response.content == VIDEO[990:]

    @pytest.mark.asyncio
    async def test_multi_range_serves_first_only(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=0-99,200-299")

        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 0-99/1000"
        assert response.content == VIDEO[:100]

    @pytest.mark.asyncio
    async def test_head(self, app, movie):
        response = await _get_video(app, movie.id, "bytes=100-199", method="HEAD")

        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 100-199/1000"
        assert response.headers["content-length"] == "100"
        assert response.content == b""


class TestServePartial:
    """Test file handle ownership in the response assembler."""

    @pytest.mark.asyncio
    async def test_drained_body_closes_file(self, video_path, opened):
        response = serve_partial(video_path, "bytes=10-19", chunk_size=4)
        assert response.status_code == 206

        body = b"".join([chunk async for chunk in response.body_iterator])

        assert body == VIDEO[10:20]
        assert opened[0].closed

    def test_unsatisfiable_closes_file(self, video_path, opened):
        response = serve_partial(video_path, "bytes=5000-")

        assert response.status_code == 416
        assert opened[0].closed

    def test_huge_start_is_unsatisfiable(self, video_path, opened):
        """Test that a start position thousands of digits long is a 416, not a crash."""
        response = serve_partial(video_path, "bytes=" + "9" * 5000 + "-")

        assert response.status_code == 416
        assert response.headers["content-range"] == "bytes */1000"
        assert opened[0].closed

    @pytest.mark.asyncio
    async def test_huge_end_serves_to_end_of_file(self, video_path, opened):
        response = serve_partial(video_path, "bytes=990-" + "9" * 5000)
        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 990-999/1000"

        body = b"".join([chunk async for chunk in response.body_iterator])
        assert body == VIDEO[990:]

    def test_metadata_unavailable(self, video_path, opened, monkeypatch):
        """Test that a failed fstat gives a 416 with no Content-Range and releases the file."""
        def failing_fstat(fd):
            raise OSError("stat failed")

        monkeypatch.setattr(os, "fstat", failing_fstat)
        response = serve_partial(video_path, None)

        assert response.status_code == 416
        assert "content-range" not in response.headers
        assert response.headers["accept-ranges"] == "bytes"
        assert opened[0].closed

    def test_head_closes_file(self, video_path, opened):
        response = serve_partial(video_path, None, method="HEAD")

        assert response.status_code == 200
        assert response.headers["content-length"] == "1000"
        assert opened[0].closed

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.mkv"
        path.write_bytes(b"")

        assert serve_partial(path, None).status_code == 200
        response = serve_partial(path, "bytes=0-")
        assert response.status_code == 416
        assert response.headers["content-range"] == "bytes */0"

    def test_missing_file_raises(self, tmp_path):
        """Test that a missing file is the caller's problem."""
        with pytest.raises(FileNotFoundError):
            serve_partial(tmp_path / "gone.mp4", "bytes=0-1")

    def test_media_type(self):
        assert guess_media_type("movie.mp4") == "video/mp4"
        assert guess_media_type("movie.unknownext") == "application/octet-stream"


class TestMovieRoutes:
    """Test the catalogue routes."""

    @pytest.mark.asyncio
    async def test_get_movie(self, app, movie):
        async with _client(app) as client:
            response = await client.get(f"/api/movies/{movie.id}")

        assert response.status_code == 200
        payload = response.json()
        assert payload["id"] == movie.id
        assert payload["title"] == "Big Buck Bunny"
        assert "file_path" not in payload

    @pytest.mark.asyncio
    async def test_unknown_movie(self, app):
        async with _client(app) as client:
            assert (await client.get("/api/movies/42")).status_code == 404
            assert (await client.get("/api/movies/42/video")).status_code == 404

    @pytest.mark.asyncio
    async def test_missing_video_file(self, app, movie, video_path):
        os.remove(video_path)

        response = await _get_video(app, movie.id, "bytes=0-1")

        assert response.status_code == 404
        assert "unavailable" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_pagination(self, app, store, tmp_path):
        for name in ("a", "b", "c"):
            store.create_movie(name, str(tmp_path / f"{name}.mp4"))

        async with _client(app) as client:
            first = (await client.get("/api/movies")).json()
            second = (await client.get("/api/movies", params={"page": 1})).json()
            everything = (await client.get("/api/movies", params={"count": 10})).json()
            bad = await client.get("/api/movies", params={"page": -1})

        assert [m["title"] for m in first] == ["a", "b"]
        assert [m["title"] for m in second] == ["c"]
        assert len(everything) == 3
        assert bad.status_code == 422
