import io
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

import content
import server


def make_article(title: str, date: str, author: str = "Staff", summary: str = None) -> dict:
    article = {"title": {"text": title}, "author": author, "date": date}
    if summary is not None:
        article["summary"] = {"content": summary}
    return article


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def png_bytes(size=(200, 100), color="white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def data_dir(tmp_path):
    (tmp_path / "current_issue_number.txt").write_text("2\n", encoding="utf-8")

    write_json(tmp_path / "issue1" / "articles.json", {
        "news": [
            make_article("Library reopens", "2024-01-01", author="Ada", summary="The library is open again."),
            make_article("Budget vote", "2024-01-02", author="Grace"),
        ],
        "sports": [
            make_article("Rowing team wins", "2024-01-03", author="Linus"),
        ],
    })

    write_json(tmp_path / "issue2" / "articles.json", {
        "news": [make_article(f"Campus story {i}", f"2024-02-{i + 1:02d}") for i in range(25)],
        "sports": [
            make_article("Football final", "2024-02-10T18:30:00Z", summary="A late goal decided it."),
            {"title": {"text": "Undated match report"}, "author": "Staff"},
        ],
    })
    write_json(tmp_path / "issue2" / "connections.json", {"groups": [["red", "blue", "green", "yellow"]]})
    (tmp_path / "issue2" / "crossword.json").write_text("{not json", encoding="utf-8")

    (tmp_path / "issue3").mkdir()

    images_dir = tmp_path / "images"
    images_dir.mkdir()
    (images_dir / "cover.png").write_bytes(png_bytes())
    (images_dir / "broken.png").write_bytes(b"not an image")

    return tmp_path


@pytest.fixture()
def store(data_dir):
    return content.ContentStore(data_dir)


@pytest.fixture()
def client(store):
    with TestClient(server.create_app(store)) as test_client:
        yield test_client
