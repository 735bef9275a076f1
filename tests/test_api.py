"""End-to-end tests for the HTTP request boundary."""

import importlib
import os

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from src.config import ExecutionSettings

from .conftest import requires_gcc


def no_subprocess(*args, **kwargs):
    raise AssertionError("subprocess must not be spawned")


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


def post_run(client, code, language, files=None):
    body = {"code": code, "language": language}
    if files is not None:
        body["files"] = files
    return client.post("/api/run", json=body)


class TestValidation:
    @pytest.mark.parametrize("language", ["python", "html", "cobol", ""])
    @pytest.mark.parametrize("code", ["", "   ", "\n\t\n"])
    def test_empty_code(self, client, code, language):
        response = post_run(client, code, language)

        assert response.status_code == 400
        assert response.json() == {"mode": "text", "output": "No code to run."}

    def test_unsupported_language(self, client, temp_root, monkeypatch):
        monkeypatch.setattr("asyncio.create_subprocess_exec", no_subprocess)

        response = post_run(client, "DISPLAY 'HI'.", "cobol")

        assert response.status_code == 400
        data = response.json()
        assert data["mode"] == "text"
        assert data["output"].startswith("Unsupported language. Supported:")
        assert "Python" in data["output"]
        assert os.listdir(temp_root) == []

    def test_malformed_body(self, client):
        response = client.post(
            "/api/run", content=b"not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["mode"] == "text"

    def test_wrong_field_type(self, client):
        response = client.post("/api/run", json={"code": ["print(1)"], "language": "python"})
        assert response.status_code == 400


class TestLocalRuns:
    def test_python_success(self, client, temp_root):
        response = post_run(client, "print('hello api')", "Python")

        assert response.status_code == 200
        assert response.json() == {"mode": "text", "output": "hello api"}
        assert os.listdir(temp_root) == []

    def test_no_output(self, client):
        response = post_run(client, "pass", "py")
        assert response.json()["output"] == "No output"

    def test_runtime_failure_is_server_error(self, client, temp_root):
        response = post_run(client, "raise RuntimeError('kaboom')", "python")

        assert response.status_code == 500
        data = response.json()
        assert data["mode"] == "text"
        assert "kaboom" in data["output"]
        assert os.listdir(temp_root) == []

    def test_timeout_is_server_error(self, temp_root):
        client = TestClient(create_app(ExecutionSettings(temp_root=str(temp_root), timeout_seconds=1)))

        response = post_run(client, "while True:\n    pass", "python")

        assert response.status_code == 500
        assert "timed out" in response.json()["output"]
        assert os.listdir(temp_root) == []

    @requires_gcc
    def test_compile_error_is_server_error(self, client, temp_root):
        response = post_run(client, "int main( { return 0; }", "c")

        assert response.status_code == 500
        data = response.json()
        assert data["mode"] == "text"
        assert "error" in data["output"]
        assert os.listdir(temp_root) == []


class TestPreviews:
    def test_html_with_stylesheet(self, client, temp_root):
        files = [{"name": "style.css", "language": "css", "content": "h1{color:red}"}]
        response = post_run(client, "<h1>Hi</h1>", "html", files)

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "preview"
        assert "<h1>Hi</h1>" in data["previewHtml"]
        assert "<style>h1{color:red}</style>" in data["previewHtml"]
        assert data["output"] == "Rendered HTML preview."
        assert os.listdir(temp_root) == []

    def test_css(self, client):
        response = post_run(client, "body{background:#000}", "CSS")

        data = response.json()
        assert data["mode"] == "preview"
        assert "<style>body{background:#000}</style>" in data["previewHtml"]
        assert "<button>" in data["previewHtml"]
        assert 'class="card"' in data["previewHtml"]

    def test_react(self, client):
        response = post_run(client, "function App() { return <p>hi</p>; }", "jsx")

        data = response.json()
        assert data["mode"] == "preview"
        assert "text/babel" in data["previewHtml"]
        assert "mount automatically" in data["output"]


class TestRemoteRuns:
    def _client(self, remote_settings, handler):
        app = create_app(remote_settings, remote_transport=httpx.MockTransport(handler))
        return TestClient(app)

    def test_python_runs_remotely(self, remote_settings, temp_root, monkeypatch):
        monkeypatch.setattr("asyncio.create_subprocess_exec", no_subprocess)
        client = self._client(
            remote_settings,
            lambda request: httpx.Response(200, json={"run": {"stdout": "hello api\n", "output": ""}}),
        )

        response = post_run(client, "print('hello api')", "python")

        assert response.status_code == 200
        assert response.json() == {"mode": "text", "output": "hello api"}
        assert os.listdir(temp_root) == []

    def test_remote_status_error(self, remote_settings):
        client = self._client(remote_settings, lambda request: httpx.Response(502, json={}))

        response = post_run(client, "print(1)", "python")

        assert response.status_code == 500
        assert "502" in response.json()["output"]

    def test_remote_compile_output(self, remote_settings):
        body = {"compile": {"stderr": "main.cpp:1: error: expected ';'"}, "run": {}}
        client = self._client(remote_settings, lambda request: httpx.Response(200, json=body))

        response = post_run(client, "int main() { return 0 }", "cpp")
        assert "expected ';'" in response.json()["output"]


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["executionMode"] == "local"


def test_import_does_not_read_environment(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "xml")
    monkeypatch.setenv("EXECUTION_MODE", "cluster")
    import app as app_module

    importlib.reload(app_module)

    assert not hasattr(app_module, "app")
