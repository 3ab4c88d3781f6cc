"""API tests for /v1/generations."""

from app.utils.errors import ProviderTimeout


class TestCreateGeneration:
    """POST /v1/generations and the type shortcuts."""

    def test_requires_auth(self, client):
        response = client.post("/v1/generations", json={"type": "text", "prompt": "Hi"})
        assert response.status_code == 401

    def test_text_generation_with_persona(self, client, auth_headers, fake_provider):
        client.post(
            "/v1/persona",
            json={"industry": "Tech", "target_audience": "Devs", "brand_tone": "Casual"},
            headers=auth_headers,
        )
        fake_provider.text = "Ship it, friends."

        response = client.post(
            "/v1/generations",
            json={"type": "text", "prompt": "Write a tagline", "model": "gpt-4"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        record = body["data"]
        assert record["status"] == "completed"
        assert record["result"] == "Ship it, friends."
        assert record["prompt"] == "Write a tagline"
        sent_prompt = fake_provider.calls[0][1]
        for value in ("Tech", "Devs", "Casual"):
            assert value in sent_prompt

    def test_default_model_applied(self, client, auth_headers):
        response = client.post(
            "/v1/generations",
            json={"type": "image", "prompt": "A cat"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["model"] == "dall-e-3"

    def test_image_shortcut(self, client, auth_headers, fake_provider):
        response = client.post(
            "/v1/generations/image",
            json={"prompt": "A cat", "model": "dall-e-2"},
            headers=auth_headers,
        )
        record = response.json()["data"]
        assert response.status_code == 201
        assert record["type"] == "image"
        assert record["result"] == fake_provider.image_url

    def test_text_shortcut(self, client, auth_headers):
        response = client.post("/v1/generations/text", json={"prompt": "A poem"}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["data"]["type"] == "text"

    def test_empty_prompt_is_400_and_nothing_stored(self, client, auth_headers):
        response = client.post(
            "/v1/generations",
            json={"type": "text", "prompt": ""},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

        listing = client.get("/v1/generations", headers=auth_headers).json()["data"]
        assert listing["total"] == 0

    def test_model_not_allowed_for_type_is_400(self, client, auth_headers):
        response = client.post(
            "/v1/generations",
            json={"type": "image", "prompt": "A cat", "model": "gpt-4"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "dall-e-3" in response.json()["detail"]

    def test_unknown_type_is_400(self, client, auth_headers):
        response = client.post(
            "/v1/generations",
            json={"type": "video", "prompt": "A clip"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_provider_timeout_returns_failed_record(self, client, auth_headers, fake_provider):
        fake_provider.error = ProviderTimeout("The image provider did not respond within 60 seconds.")

        response = client.post(
            "/v1/generations",
            json={"type": "image", "prompt": "A cat"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        record = response.json()["data"]
        assert record["status"] == "failed"
        assert record["result"] is None
        assert record["error_message"] == "The image provider did not respond within 60 seconds."

        stored = client.get(f"/v1/generations/{record['id']}", headers=auth_headers).json()["data"]
        assert stored["status"] == "failed"


class TestReadGenerations:
    """Listing, stats, read and delete."""

    def _create(self, client, headers, generation_type, prompt):
        response = client.post(
            "/v1/generations",
            json={"type": generation_type, "prompt": prompt},
            headers=headers,
        )
        return response.json()["data"]

    def test_list_newest_first_and_filtered(self, client, auth_headers):
        first = self._create(client, auth_headers, "image", "A cat")
        second = self._create(client, auth_headers, "text", "A poem")

        listing = client.get("/v1/generations", headers=auth_headers).json()["data"]
        assert [g["id"] for g in listing["generations"]] == [second["id"], first["id"]]

        images = client.get("/v1/generations?type=image", headers=auth_headers).json()["data"]
        assert [g["id"] for g in images["generations"]] == [first["id"]]

    def test_invalid_type_filter_is_400(self, client, auth_headers):
        response = client.get("/v1/generations?type=video", headers=auth_headers)
        assert response.status_code == 400

    def test_stats(self, client, auth_headers, fake_provider):
        self._create(client, auth_headers, "image", "A cat")
        self._create(client, auth_headers, "text", "A poem")
        fake_provider.error = ProviderTimeout("timed out")
        self._create(client, auth_headers, "text", "Another poem")

        stats = client.get("/v1/generations/stats?recent_limit=2", headers=auth_headers).json()["data"]

        assert stats["total"] == 3
        assert stats["by_type"] == {"image": 1, "text": 2}
        assert stats["by_status"]["failed"] == 1
        assert len(stats["recent"]) == 2
        assert stats["recent"][0]["prompt"] == "Another poem"

    def test_models_catalog(self, client):
        catalog = client.get("/v1/generations/models").json()["data"]
        assert catalog["defaults"] == {"image": "dall-e-3", "text": "gpt-4"}
        assert "dall-e-2" in catalog["allowed"]["image"]

    def test_other_users_generation_is_404(self, client, register_user):
        owner = register_user()
        stranger = register_user()
        record = self._create(client, owner, "text", "Private")

        assert client.get(f"/v1/generations/{record['id']}", headers=stranger).status_code == 404
        assert client.delete(f"/v1/generations/{record['id']}", headers=stranger).status_code == 404
        assert client.get(f"/v1/generations/{record['id']}", headers=owner).status_code == 200

        stranger_list = client.get("/v1/generations", headers=stranger).json()["data"]
        assert stranger_list["total"] == 0

    def test_delete_twice(self, client, auth_headers):
        record = self._create(client, auth_headers, "text", "Short-lived")

        first = client.delete(f"/v1/generations/{record['id']}", headers=auth_headers)
        second = client.delete(f"/v1/generations/{record['id']}", headers=auth_headers)

        assert first.status_code == 200
        assert first.json()["data"]["deleted"] is True
        assert second.status_code == 404
