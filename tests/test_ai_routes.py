"""
Tests for the /ai endpoints.

The provider is never contacted: client._build_client is patched to an
httpx.AsyncClient over MockTransport that returns canned model output.
"""

import json
from unittest.mock import patch

import httpx
import pytest

from app.ai.providers import client as provider_client
from app.core.config import settings
from app.models.activity_log import ActivityLogEntry
from app.models.ai_settings import UserAISettings
from app.models.bin import Bin


# ---------------------------------------------------------------------------
# FIXTURES & HELPERS
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def no_env_ai_config():
    """Keep a developer's .env AI_* values out of these tests."""
    with patch.object(settings, "AI_PROVIDER", ""), \
         patch.object(settings, "AI_API_KEY", ""), \
         patch.object(settings, "AI_MODEL", ""), \
         patch.object(settings, "AI_ENDPOINT_URL", ""), \
         patch.object(settings, "AI_ENCRYPTION_KEY", ""):
        yield


@pytest.fixture
def ai_settings(db, test_user) -> UserAISettings:
    row = UserAISettings(
        user_id=test_user.id,
        provider="anthropic",
        api_key="sk-ant-test-1234",
        model="claude-3-5-haiku-latest",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def anthropic_reply(payload) -> dict:
    return {"content": [{"type": "text", "text": json.dumps(payload)}]}


def fake_provider(payload=None, status_code=200, seen=None):
    """Patch for client._build_client answering every request the same way."""
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if status_code != 200:
            return httpx.Response(status_code, text="provider says no")
        return httpx.Response(200, json=anthropic_reply(payload))

    def factory(timeout):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), timeout=timeout)

    return patch.object(provider_client, "_build_client", factory)


REMOVE_HAMMER = {
    "actions": [{"type": "remove_items", "bin_id": "T1", "bin_name": "Tools", "items": ["Hammer"]}],
    "interpretation": "Remove hammer from Tools",
}


# ---------------------------------------------------------------------------
# POST /ai/command
# ---------------------------------------------------------------------------

class TestParseCommand:
    """Tests for POST /ai/command."""

    def test_returns_actions_without_executing(self, client, db, location, auth_headers, ai_settings, tools_bin):
        seen = []
        with fake_provider(REMOVE_HAMMER, seen=seen):
            response = client.post(
                "/ai/command",
                json={"locationId": location.id, "text": "remove hammer from Tools bin"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        body = response.json()
        assert body["interpretation"] == "Remove hammer from Tools"
        assert body["actions"][0]["type"] == "remove_items"
        assert body["actions"][0]["items"] == ["Hammer"]

        db.expire_all()
        assert db.get(Bin, "T1").item_names == ["Hammer"]

        sent = json.loads(seen[0].content)
        assert sent["model"] == "claude-3-5-haiku-latest"
        assert sent["temperature"] == settings.AI_COMMAND_TEMPERATURE
        assert '"id": "T1"' in sent["messages"][0]["content"]
        assert seen[0].headers["x-api-key"] == "sk-ant-test-1234"

    def test_hallucinated_bin_dropped(self, client, location, auth_headers, ai_settings, tools_bin):
        payload = {
            "actions": [{"type": "delete_bin", "bin_id": "MADEUP"}],
            "interpretation": "Delete the shed bin",
        }
        with fake_provider(payload):
            response = client.post(
                "/ai/command",
                json={"locationId": location.id, "text": "delete the shed bin"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert response.json() == {"actions": [], "interpretation": "Delete the shed bin"}

    def test_custom_prompt_and_sampling_used(self, client, db, location, auth_headers, ai_settings, tools_bin):
        ai_settings.command_prompt = "Only ever touch the Tools bin."
        ai_settings.temperature = 0.7
        ai_settings.max_tokens = 500
        db.commit()

        seen = []
        with fake_provider(REMOVE_HAMMER, seen=seen):
            client.post(
                "/ai/command",
                json={"locationId": location.id, "text": "remove hammer"},
                headers=auth_headers,
            )

        sent = json.loads(seen[0].content)
        assert sent["system"].startswith("Only ever touch the Tools bin.")
        assert "- add_items:" in sent["system"]
        assert sent["temperature"] == 0.7
        assert sent["max_tokens"] == 500

    def test_no_settings(self, client, location, auth_headers):
        response = client.post(
            "/ai/command",
            json={"locationId": location.id, "text": "remove hammer"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["detail"] == {
            "error": "VALIDATION_ERROR",
            "message": "AI is not configured. Add a provider in AI settings.",
        }

    def test_env_fallback(self, client, location, auth_headers, tools_bin):
        seen = []
        with patch.object(settings, "AI_PROVIDER", "openai"), \
             patch.object(settings, "AI_API_KEY", "sk-env"), \
             patch.object(settings, "AI_MODEL", "gpt-4o-mini"):
            def handler(request):
                seen.append(request)
                return httpx.Response(200, json={
                    "choices": [{"message": {"content": json.dumps(REMOVE_HAMMER)}}]
                })

            def factory(timeout):
                return httpx.AsyncClient(transport=httpx.MockTransport(handler), timeout=timeout)

            with patch.object(provider_client, "_build_client", factory):
                response = client.post(
                    "/ai/command",
                    json={"locationId": location.id, "text": "remove hammer"},
                    headers=auth_headers,
                )

        assert response.status_code == 200
        assert seen[0].headers["Authorization"] == "Bearer sk-env"

    @pytest.mark.parametrize("status_code,http_status,code", [
        (401, 422, "INVALID_KEY"),
        (404, 422, "MODEL_NOT_FOUND"),
        (429, 429, "RATE_LIMITED"),
        (500, 502, "PROVIDER_ERROR"),
    ])
    def test_provider_errors(self, client, location, auth_headers, ai_settings, status_code, http_status, code):
        with fake_provider(status_code=status_code):
            response = client.post(
                "/ai/command",
                json={"locationId": location.id, "text": "remove hammer"},
                headers=auth_headers,
            )

        assert response.status_code == http_status
        assert response.json()["detail"]["error"] == code

    def test_unparseable_model_output(self, client, location, auth_headers, ai_settings):
        def factory(timeout):
            return httpx.AsyncClient(
                transport=httpx.MockTransport(
                    lambda request: httpx.Response(
                        200, json={"content": [{"type": "text", "text": "I cannot help with that"}]}
                    )
                ),
                timeout=timeout,
            )

        with patch.object(provider_client, "_build_client", factory):
            response = client.post(
                "/ai/command",
                json={"locationId": location.id, "text": "remove hammer"},
                headers=auth_headers,
            )

        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "INVALID_RESPONSE"

    @pytest.mark.parametrize("text", ["", "   ", "x" * 5001])
    def test_text_validation(self, client, location, auth_headers, ai_settings, text):
        response = client.post(
            "/ai/command",
            json={"locationId": location.id, "text": text},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "VALIDATION_ERROR"

    def test_non_member(self, client, location, other_auth_headers):
        response = client.post(
            "/ai/command",
            json={"locationId": location.id, "text": "remove hammer"},
            headers=other_auth_headers,
        )
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# POST /ai/execute
# ---------------------------------------------------------------------------

class TestExecuteCommand:
    """Tests for POST /ai/execute."""

    def test_remove_hammer_end_to_end(self, client, db, location, test_user, auth_headers, ai_settings, tools_bin):
        with fake_provider(REMOVE_HAMMER):
            response = client.post(
                "/ai/execute",
                json={"locationId": location.id, "text": "remove hammer from Tools bin"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        body = response.json()
        assert body["interpretation"] == "Remove hammer from Tools"
        assert body["errors"] == []
        assert len(body["executed"]) == 1
        assert body["executed"][0]["success"] is True
        assert body["executed"][0]["bin_id"] == "T1"

        db.expire_all()
        assert db.get(Bin, "T1").item_names == []

        entry = db.query(ActivityLogEntry).one()
        assert entry.action == "update"
        assert entry.entity_type == "bin"
        assert entry.entity_id == "T1"
        assert entry.user_id == test_user.id
        assert entry.changes == {"items_removed": {"old": ["Hammer"], "new": None}}

    def test_move_between_bins(self, client, db, location, auth_headers, ai_settings, tools_bin, garage_bin):
        payload = {
            "actions": [
                {"type": "remove_items", "bin_id": "T1", "bin_name": "Tools", "items": ["Hammer"]},
                {"type": "add_items", "bin_id": "G1", "bin_name": "Garage Shelf", "items": ["Hammer"]},
            ],
            "interpretation": "Move hammer from Tools to Garage Shelf",
        }
        with fake_provider(payload):
            response = client.post(
                "/ai/execute",
                json={"locationId": location.id, "text": "move hammer to the garage shelf"},
                headers=auth_headers,
            )

        assert [r["type"] for r in response.json()["executed"]] == ["remove_items", "add_items"]
        db.expire_all()
        assert db.get(Bin, "G1").item_names == ["Tape", "Rope", "Hammer"]

    def test_no_actions(self, client, db, location, auth_headers, ai_settings, tools_bin):
        payload = {"actions": [], "interpretation": "Which bin do you mean?"}
        with fake_provider(payload):
            response = client.post(
                "/ai/execute",
                json={"locationId": location.id, "text": "remove it"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert response.json() == {
            "executed": [],
            "interpretation": "Which bin do you mean?",
            "errors": [],
        }
        assert db.query(ActivityLogEntry).count() == 0


# ---------------------------------------------------------------------------
# POST /ai/query
# ---------------------------------------------------------------------------

class TestQueryInventory:
    """Tests for POST /ai/query."""

    def test_answer_and_matches(self, client, location, auth_headers, ai_settings, tools_bin, trashed_bin):
        payload = {
            "answer": "Your hammer is in the Tools bin.",
            "matches": [
                {"bin_id": "T1", "name": "Tools", "items": ["Hammer"], "relevance": "contains hammer"},
                {"bin_id": "X1", "name": "Old Cables", "relevance": "trash"},
                {"bin_id": "NOPE", "name": "Ghost"},
            ],
        }
        with fake_provider(payload):
            response = client.post(
                "/ai/query",
                json={"locationId": location.id, "question": "where is my hammer?"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "Your hammer is in the Tools bin."
        assert [m["bin_id"] for m in body["matches"]] == ["T1"]
        assert body["matches"][0]["relevance"] == "contains hammer"

    def test_missing_answer_defaults(self, client, location, auth_headers, ai_settings):
        with fake_provider({"matches": []}):
            response = client.post(
                "/ai/query",
                json={"locationId": location.id, "question": "anything?"},
                headers=auth_headers,
            )

        assert response.json() == {"answer": "Unable to process query", "matches": []}


# ---------------------------------------------------------------------------
# POST /ai/test
# ---------------------------------------------------------------------------

class TestConnectionEndpoint:
    """Tests for POST /ai/test."""

    def test_success(self, client, auth_headers):
        with fake_provider({"ok": True}):
            response = client.post(
                "/ai/test",
                json={"provider": "anthropic", "apiKey": "sk-ant-new", "model": "claude-3-5-haiku-latest"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_masked_key_uses_stored_key(self, client, auth_headers, ai_settings):
        seen = []
        with fake_provider({"ok": True}, seen=seen):
            client.post(
                "/ai/test",
                json={"provider": "anthropic", "apiKey": "****1234", "model": "claude-3-5-haiku-latest"},
                headers=auth_headers,
            )

        assert seen[0].headers["x-api-key"] == "sk-ant-test-1234"

    def test_masked_key_without_stored_settings(self, client, auth_headers):
        response = client.post(
            "/ai/test",
            json={"provider": "openai", "apiKey": "****abcd", "model": "gpt-4o-mini"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "No saved key found. Please enter your API key."

    def test_bad_key(self, client, auth_headers):
        with fake_provider(status_code=401):
            response = client.post(
                "/ai/test",
                json={"provider": "anthropic", "apiKey": "wrong", "model": "claude-3-5-haiku-latest"},
                headers=auth_headers,
            )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "INVALID_KEY"

    def test_private_endpoint_blocked(self, client, auth_headers):
        seen = []
        with fake_provider({"ok": True}, seen=seen):
            response = client.post(
                "/ai/test",
                json={
                    "provider": "openai-compatible",
                    "apiKey": "k",
                    "model": "llama3",
                    "endpointUrl": "http://127.0.0.1:11434/v1",
                },
                headers=auth_headers,
            )

        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "NETWORK_ERROR"
        assert seen == []

    def test_unknown_provider(self, client, auth_headers):
        response = client.post(
            "/ai/test",
            json={"provider": "cohere", "apiKey": "k", "model": "m"},
            headers=auth_headers,
        )
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# /ai/settings
# ---------------------------------------------------------------------------

class TestSettingsEndpoints:
    """Tests for GET/PUT/DELETE /ai/settings."""

    SETTINGS_BODY = {
        "provider": "openai",
        "apiKey": "sk-abcdef123456",
        "model": "gpt-4o-mini",
        "temperature": 0.4,
        "maxTokens": 1500,
        "requestTimeout": 30,
    }

    def test_get_without_settings(self, client, auth_headers):
        response = client.get("/ai/settings", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() is None

    def test_get_env_fallback(self, client, auth_headers):
        with patch.object(settings, "AI_PROVIDER", "gemini"), \
             patch.object(settings, "AI_API_KEY", "g-key-9876"), \
             patch.object(settings, "AI_MODEL", "gemini-1.5-flash"):
            response = client.get("/ai/settings", headers=auth_headers)

        body = response.json()
        assert body["source"] == "env"
        assert body["apiKey"] == "****9876"

    def test_put_then_get_masks_key(self, client, auth_headers):
        put = client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)

        assert put.status_code == 200
        assert put.json()["apiKey"] == "****3456"

        body = client.get("/ai/settings", headers=auth_headers).json()
        assert body["provider"] == "openai"
        assert body["apiKey"] == "****3456"
        assert body["maxTokens"] == 1500
        assert body["requestTimeout"] == 30
        assert body["source"] == "user"

    def test_put_masked_key_keeps_stored_key(self, client, db, test_user, auth_headers):
        client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)

        response = client.put(
            "/ai/settings",
            json={**self.SETTINGS_BODY, "apiKey": "****3456", "model": "gpt-4o"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        db.expire_all()
        row = db.query(UserAISettings).filter_by(user_id=test_user.id).one()
        assert row.api_key == "sk-abcdef123456"
        assert row.model == "gpt-4o"

    def test_put_masked_key_without_stored(self, client, auth_headers):
        response = client.put(
            "/ai/settings",
            json={**self.SETTINGS_BODY, "apiKey": "****3456"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.parametrize("field,value", [
        ("temperature", 2.5),
        ("maxTokens", 50),
        ("maxTokens", 20000),
        ("topP", 1.5),
        ("requestTimeout", 5),
        ("commandPrompt", "x" * 10001),
    ])
    def test_range_errors(self, client, auth_headers, field, value):
        response = client.put(
            "/ai/settings",
            json={**self.SETTINGS_BODY, field: value},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "VALIDATION_ERROR"

    def test_delete(self, client, auth_headers):
        client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)

        response = client.delete("/ai/settings", headers=auth_headers)

        assert response.json() == {"deleted": True}
        assert client.get("/ai/settings", headers=auth_headers).json() is None

    def test_settings_are_per_user(self, client, auth_headers, other_auth_headers):
        client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)
        assert client.get("/ai/settings", headers=other_auth_headers).json() is None

    def test_switching_provider_keeps_previous_key(self, client, db, test_user, auth_headers):
        client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)
        response = client.put(
            "/ai/settings",
            json={"provider": "anthropic", "apiKey": "sk-ant-test-1234", "model": "claude-3-5-haiku-latest"},
            headers=auth_headers,
        )

        body = response.json()
        assert body["provider"] == "anthropic"
        assert body["providerConfigs"] == {
            "openai": {"apiKey": "****3456", "model": "gpt-4o-mini", "endpointUrl": None},
            "anthropic": {"apiKey": "****1234", "model": "claude-3-5-haiku-latest", "endpointUrl": None},
        }

        db.expire_all()
        rows = {r.provider: r for r in db.query(UserAISettings).filter_by(user_id=test_user.id)}
        assert rows["openai"].is_active is False
        assert rows["anthropic"].is_active is True
        assert rows["openai"].api_key == "sk-abcdef123456"

    def test_switching_back_with_masked_key(self, client, db, test_user, auth_headers):
        client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)
        client.put(
            "/ai/settings",
            json={"provider": "anthropic", "apiKey": "sk-ant-test-1234", "model": "claude-3-5-haiku-latest"},
            headers=auth_headers,
        )

        response = client.put(
            "/ai/settings",
            json={**self.SETTINGS_BODY, "apiKey": "****3456"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert client.get("/ai/settings", headers=auth_headers).json()["provider"] == "openai"
        db.expire_all()
        active = db.query(UserAISettings).filter_by(user_id=test_user.id, is_active=True).one()
        assert active.provider == "openai"
        assert active.api_key == "sk-abcdef123456"

    def test_requests_use_active_provider(self, client, location, auth_headers, tools_bin):
        client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)
        client.put(
            "/ai/settings",
            json={"provider": "anthropic", "apiKey": "sk-ant-test-1234", "model": "claude-3-5-haiku-latest"},
            headers=auth_headers,
        )

        seen = []
        with fake_provider(REMOVE_HAMMER, seen=seen):
            client.post(
                "/ai/command",
                json={"locationId": location.id, "text": "remove hammer"},
                headers=auth_headers,
            )

        assert seen[0].url.host == "api.anthropic.com"
        assert seen[0].headers["x-api-key"] == "sk-ant-test-1234"

    def test_delete_removes_every_provider(self, client, db, test_user, auth_headers):
        client.put("/ai/settings", json=self.SETTINGS_BODY, headers=auth_headers)
        client.put(
            "/ai/settings",
            json={"provider": "anthropic", "apiKey": "sk-ant-test-1234", "model": "claude-3-5-haiku-latest"},
            headers=auth_headers,
        )

        client.delete("/ai/settings", headers=auth_headers)

        db.expire_all()
        assert db.query(UserAISettings).filter_by(user_id=test_user.id).count() == 0

    def test_key_encrypted_at_rest(self, client, db, test_user, location, auth_headers, tools_bin):
        with patch.object(settings, "AI_ENCRYPTION_KEY", "server-secret"):
            client.put(
                "/ai/settings",
                json={"provider": "anthropic", "apiKey": "sk-ant-test-1234", "model": "claude-3-5-haiku-latest"},
                headers=auth_headers,
            )

            db.expire_all()
            row = db.query(UserAISettings).filter_by(user_id=test_user.id).one()
            assert row.api_key.startswith("enc:")
            assert "sk-ant-test-1234" not in row.api_key

            assert client.get("/ai/settings", headers=auth_headers).json()["apiKey"] == "****1234"

            seen = []
            with fake_provider(REMOVE_HAMMER, seen=seen):
                client.post(
                    "/ai/command",
                    json={"locationId": location.id, "text": "remove hammer"},
                    headers=auth_headers,
                )
                client.post(
                    "/ai/test",
                    json={"provider": "anthropic", "apiKey": "****1234", "model": "claude-3-5-haiku-latest"},
                    headers=auth_headers,
                )

        assert [r.headers["x-api-key"] for r in seen] == ["sk-ant-test-1234", "sk-ant-test-1234"]

    def test_structure_prompt_saved(self, client, auth_headers):
        client.put(
            "/ai/settings",
            json={**self.SETTINGS_BODY, "structurePrompt": "  List tools only.  "},
            headers=auth_headers,
        )

        assert client.get("/ai/settings", headers=auth_headers).json()["structurePrompt"] == "List tools only."


# ---------------------------------------------------------------------------
# POST /ai/structure-text
# ---------------------------------------------------------------------------

class TestStructureText:
    """Tests for POST /ai/structure-text."""

    def test_returns_items(self, client, auth_headers, ai_settings):
        seen = []
        payload = {"items": [" Phillips screwdriver ", "", 42, "Socks"]}
        with fake_provider(payload, seen=seen):
            response = client.post(
                "/ai/structure-text",
                json={
                    "text": "um a phillips screwdriver and like socks",
                    "mode": "items",
                    "context": {"binName": "Tools", "existingItems": ["Hammer"]},
                },
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert response.json() == {"items": ["Phillips screwdriver", "Socks"]}

        sent = json.loads(seen[0].content)
        assert sent["messages"] == [{"role": "user", "content": "um a phillips screwdriver and like socks"}]
        assert sent["temperature"] == settings.AI_STRUCTURE_TEMPERATURE
        assert sent["max_tokens"] == settings.AI_STRUCTURE_MAX_TOKENS
        assert 'Bin name: "Tools"' in sent["system"]
        assert '["Hammer"]' in sent["system"]

    def test_uses_structure_prompt(self, client, db, auth_headers, ai_settings):
        ai_settings.structure_prompt = "Only list kitchen utensils."
        db.commit()

        seen = []
        with fake_provider({"items": ["Whisk"]}, seen=seen):
            client.post("/ai/structure-text", json={"text": "a whisk"}, headers=auth_headers)

        system = json.loads(seen[0].content)["system"]
        assert system.startswith("Only list kitchen utensils.")
        assert '"items"' in system

    def test_missing_items_field(self, client, auth_headers, ai_settings):
        with fake_provider({"things": ["Whisk"]}):
            response = client.post("/ai/structure-text", json={"text": "a whisk"}, headers=auth_headers)

        assert response.json() == {"items": []}

    def test_no_settings(self, client, auth_headers):
        response = client.post("/ai/structure-text", json={"text": "a whisk"}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "VALIDATION_ERROR"

    def test_provider_error(self, client, auth_headers, ai_settings):
        with fake_provider(status_code=429):
            response = client.post("/ai/structure-text", json={"text": "a whisk"}, headers=auth_headers)

        assert response.status_code == 429
        assert response.json()["detail"]["error"] == "RATE_LIMITED"

    def test_blank_text(self, client, auth_headers, ai_settings):
        response = client.post("/ai/structure-text", json={"text": "   "}, headers=auth_headers)

        assert response.status_code == 422

    def test_requires_auth(self, client):
        response = client.post("/ai/structure-text", json={"text": "a whisk"})

        assert response.status_code in (401, 403)


# ---------------------------------------------------------------------------
# GET /ai/default-prompts
# ---------------------------------------------------------------------------

class TestDefaultPrompts:
    """Tests for GET /ai/default-prompts."""

    def test_public_and_complete(self, client):
        response = client.get("/ai/default-prompts")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"command", "query", "structure"}
        assert body["command"].startswith("You are an inventory management assistant.")
        assert body["structure"].startswith("You are an inventory item extractor.")
