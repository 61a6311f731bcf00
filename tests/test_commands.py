from pathlib import Path

from fastapi.testclient import TestClient

from promptis.dependencies import get_chat_channel


def test_run_without_directory_reports_error(app) -> None:
    client = TestClient(app)

    response = client.post("/commands/run-prompt-files")

    assert response.status_code == 200
    body = response.json()
    assert body["notifications"] == [
        {"level": "error", "message": "Prompt directory is not set"}
    ]
    assert body["report"]["files"] == []


def test_select_directory_then_run(app, prompts_dir: Path) -> None:
    client = TestClient(app)

    selected = client.post("/commands/select-prompt-directory", json={"path": str(prompts_dir)})
    assert selected.status_code == 200
    assert selected.json()["notifications"][0]["message"] == f"Selected folder: {prompts_dir}"

    response = client.post("/commands/run-prompt-files")

    body = response.json()
    messages = [n["message"] for n in body["notifications"]]
    assert messages[0] == f"Found 3 files in {prompts_dir}"
    assert "Content of a.txt: hello" in messages
    assert "Content of c.txt: nested" in messages
    assert body["report"]["succeeded"] == 3
    assert body["report"]["files"][0]["file"]["full_path"].endswith(".txt")


def test_select_rejects_relative_and_missing_paths(app, tmp_path: Path) -> None:
    client = TestClient(app)

    relative = client.post("/commands/select-prompt-directory", json={"path": "prompts"})
    missing = client.post(
        "/commands/select-prompt-directory", json={"path": str(tmp_path / "missing")}
    )

    assert relative.status_code == 400
    assert missing.status_code == 400
    assert client.get("/commands/prompt-directory").json()["prompt_directory"] == ""


def test_directory_seeded_from_environment(monkeypatch, prompts_dir: Path) -> None:
    from promptis.config import get_settings
    from promptis.main import create_app

    monkeypatch.setenv("PROMPT_DIRECTORY", str(prompts_dir))
    get_settings.cache_clear()

    client = TestClient(create_app())

    assert client.get("/commands/prompt-directory").json()["prompt_directory"] == str(
        prompts_dir
    )


def test_run_submits_through_channel(app, prompts_dir: Path, fake_channel) -> None:
    app.dependency_overrides[get_chat_channel] = lambda: fake_channel
    client = TestClient(app)
    client.post("/commands/select-prompt-directory", json={"path": str(prompts_dir)})

    body = client.post("/commands/run-prompt-files").json()

    messages = [n["message"] for n in body["notifications"]]
    assert "Response for a.txt: reply to hello" in messages
    assert len(fake_channel.calls) == 1


def test_healthz(app) -> None:
    client = TestClient(app)

    assert client.get("/healthz").json() == {"status": "ok"}
