"""test_server.py
Test the FastAPI editor endpoints end to end with a fake collaborator.
"""
import time

import pytest
from fastapi.testclient import TestClient

from api import server
from canvas_cv.editor_session import EditorSession
from canvas_cv.store.id_generator import IdGenerator
from canvas_cv.store.resume_store import ResumeStore
from canvas_cv.test_helpers.fake_generative_service import FakeGenerativeTextService


@pytest.fixture
def fake():
    return FakeGenerativeTextService(rewrite_result="Polished text.")


@pytest.fixture
def client(monkeypatch, fake):
    editor_session = EditorSession(
        store=ResumeStore(id_generator=IdGenerator(session_token="api")),
        service=fake,
        debounce_seconds=0.01,
    )
    monkeypatch.setattr(server, "editor_session", editor_session)
    with TestClient(server.app) as test_client:
        yield test_client
    editor_session.close()


class TestDocument:
    def test_get_resume(self, client):
        body = client.get("/resume").json()
        assert [b["id"] for b in body["blocks"]] == ["header-1", "summary-1", "exp-1", "skills-1", "edu-1"]
        assert body["theme"] == "modern"

    def test_get_resume_text(self, client):
        assert "TechFlow Inc." in client.get("/resume/text").json()["text"]

    def test_view_highlights_new_block_once(self, client):
        new_id = client.post("/blocks", json={"type": "skills"}).json()["id"]
        assert client.get("/resume/view").json()["highlightBlockId"] == new_id
        assert client.get("/resume/view").json()["highlightBlockId"] is None

    def test_view_reports_heatmap_counts(self, client):
        assert client.get("/resume/view").json()["heatmapStats"] is None
        client.post("/settings/heatmap/toggle")
        stats = client.get("/resume/view").json()["heatmapStats"]
        assert stats["metricCount"] > 0
        assert stats["actionVerbCount"] > 0


class TestBlocks:
    def test_add_block(self, client):
        response = client.post("/blocks", json={"type": "summary"})
        assert response.status_code == 200
        assert response.json()["data"]["content"] == "Add your professional summary here."
        assert client.get("/resume").json()["lastAddedBlockId"] == response.json()["id"]

    def test_add_unknown_block_type(self, client):
        assert client.post("/blocks", json={"type": "portfolio"}).status_code == 422

    def test_remove_block(self, client):
        assert client.delete("/blocks/skills-1").json() == {"removed": True}
        assert client.delete("/blocks/skills-1").json() == {"removed": False}
        assert len(client.get("/resume").json()["blocks"]) == 4

    def test_update_block_data(self, client):
        body = client.patch("/blocks/header-1/data", json={"fullName": "Sam Lee"}).json()
        assert body["data"]["fullName"] == "Sam Lee"
        assert body["data"]["email"] == "alex.j@example.com"

    def test_update_block_data_errors(self, client):
        assert client.patch("/blocks/header-1/data", json={"shoeSize": "9"}).status_code == 422
        assert client.patch("/blocks/nope/data", json={"content": "x"}).status_code == 404

    @pytest.mark.parametrize("partial", [{"content": 123}, {"content": None}])
    def test_update_block_data_rejects_non_text(self, client, partial):
        assert client.patch("/blocks/summary-1/data", json=partial).status_code == 422
        assert client.get("/resume/text").status_code == 200

    def test_update_block_data_rejects_null_items(self, client):
        assert client.patch("/blocks/skills-1/data", json={"items": None}).status_code == 422
        assert len(client.get("/resume").json()["blocks"][3]["data"]["items"]) == 6

    def test_rename_and_hide(self, client):
        body = client.patch("/blocks/skills-1", json={"title": "Toolbox", "isVisible": False}).json()
        assert body["title"] == "Toolbox"
        assert body["isVisible"] is False

    def test_reorder(self, client):
        body = client.post("/blocks/reorder", json={"activeId": "edu-1", "overId": "summary-1"}).json()
        assert body["blockIds"][:3] == ["header-1", "edu-1", "summary-1"]

    def test_activate(self, client):
        client.post("/blocks/exp-1/activate")
        assert client.get("/resume").json()["activeBlockId"] == "exp-1"

    def test_edit_field(self, client):
        response = client.post("/blocks/exp-1/fields", json={"fieldPath": "items[1].company", "value": "Acme"})
        assert response.status_code == 200
        items = response.json()["block"]["data"]["items"]
        assert items[1]["company"] == "Acme"
        assert items[0]["company"] == "TechFlow Inc."

    @pytest.mark.parametrize("path, status", [("items[x].role", 422), ("items[9].role", 404), ("nope", 404)])
    def test_edit_field_errors(self, client, path, status):
        assert client.post("/blocks/exp-1/fields", json={"fieldPath": path, "value": "x"}).status_code == status

    def test_edit_refused_in_heatmap_mode(self, client):
        client.post("/settings/heatmap/toggle")
        response = client.post("/blocks/summary-1/fields", json={"fieldPath": "content", "value": "x"})
        assert response.status_code == 409

    def test_items(self, client):
        item_id = client.post("/blocks/exp-1/items").json()["itemId"]
        items = client.get("/resume").json()["blocks"][2]["data"]["items"]
        assert items[0]["id"] == item_id

        client.delete("/blocks/exp-1/items/0")
        items = client.get("/resume").json()["blocks"][2]["data"]["items"]
        assert [i["id"] for i in items] == ["job-1", "job-2"]

        assert client.post("/blocks/summary-1/items").status_code == 422
        assert client.delete("/blocks/exp-1/items/9").status_code == 404


class TestSettings:
    def test_theme(self, client):
        assert client.put("/settings/theme", json={"theme": "serif"}).json() == {"theme": "serif"}
        assert client.put("/settings/theme", json={"theme": "neon"}).status_code == 422

    def test_style(self, client):
        assert client.patch("/settings/style", json={"fontSize": "lg"}).json()["fontSize"] == "lg"
        assert client.patch("/settings/style", json={"fontSize": "huge"}).status_code == 422

    def test_toggles(self, client):
        assert client.post("/settings/heatmap/toggle").json() == {"isHeatmapVisible": True}
        assert client.post("/settings/suggestions/toggle").json() == {"isAISuggestionsEnabled": False}


class TestAnalysis:
    def test_requires_job_description(self, client, fake):
        assert client.post("/ats/analyze").status_code == 400
        assert fake.calls["analyze"] == []

    def test_analyze(self, client):
        client.put("/job-description", json={"jobDescription": "Designer with Figma"})
        body = client.post("/ats/analyze").json()
        assert body["outcome"] == "success"
        assert body["analysis"]["score"] == 64
        assert body["scoreBand"] == "fair"

        keywords = client.get("/ats/keywords").json()
        assert "Figma" in keywords["matched"]

    def test_failed_analysis(self, client, fake):
        fake.analysis = "no json"
        client.put("/job-description", json={"jobDescription": "Designer"})
        body = client.post("/ats/analyze").json()
        assert body["outcome"] == "failed"
        assert body["analysis"] is None


class TestSuggestions:
    def test_suggestion_roundtrip(self, client, fake):
        client.post(
            "/blocks/exp-1/fields",
            json={"fieldPath": "items[0].description", "value": "• Led a team of engineers across"},
        )
        state = {}
        for _ in range(50):
            state = client.get("/suggestions/exp-1/0").json()
            if state["state"] == "shown":
                break
            time.sleep(0.02)
        assert state == {"state": "shown", "suggestion": fake.completion}

        assert client.post("/suggestions/exp-1/0/accept").json() == {"accepted": True}
        description = client.get("/resume").json()["blocks"][2]["data"]["items"][0]["description"]
        assert description == f"• Led a team of engineers across {fake.completion}"

    def test_dismiss_without_suggestion(self, client):
        assert client.post("/suggestions/exp-1/0/dismiss").json() == {"dismissed": False}


class TestRewrite:
    def test_full_flow(self, client, fake):
        opened = client.post("/rewrite/open", json={"blockId": "summary-1", "fieldPath": "content"}).json()
        assert opened["isOpen"] is True
        assert opened["contextInstruction"] is not None

        generated = client.post("/rewrite/generate", json={"preset": "Make Concise"}).json()
        assert generated["candidate"] == "Polished text."

        client.post("/rewrite/apply")
        assert client.get("/resume").json()["blocks"][1]["data"]["content"] == "Polished text."
        assert client.get("/rewrite").json()["isOpen"] is False

    def test_generate_errors(self, client):
        assert client.post("/rewrite/generate", json={}).status_code == 409
        client.post("/rewrite/open", json={"blockId": "summary-1", "fieldPath": "content"})
        assert client.post("/rewrite/generate", json={"preset": "Make Funny"}).status_code == 422
        assert client.post("/rewrite/generate", json={"prompt": "  "}).status_code == 422

    def test_failed_rewrite_shows_error(self, client, fake):
        fake.rewrite_error = True
        client.post("/rewrite/open", json={"blockId": "exp-1", "fieldPath": "items[0].description"})
        body = client.post("/rewrite/generate", json={}).json()
        assert body["error"] == "Failed to generate content."
        assert body["candidate"] is None
        assert client.post("/rewrite/apply").status_code == 409

    def test_cancel(self, client):
        before = client.get("/resume").json()
        client.post("/rewrite/open", json={"blockId": "summary-1", "fieldPath": "content"})
        client.post("/rewrite/generate", json={"prompt": "Shorter"})
        client.post("/rewrite/cancel")
        assert client.get("/resume").json() == before

    def test_open_unknown_field(self, client):
        assert client.post("/rewrite/open", json={"blockId": "summary-1", "fieldPath": "nope"}).status_code == 404
        assert client.post("/rewrite/open", json={"blockId": "nope", "fieldPath": "content"}).status_code == 404


def test_draft_summary(client, fake):
    assert client.post("/summary/draft").json() == {"summary": fake.summary}
