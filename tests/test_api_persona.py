"""API tests for /v1/persona."""

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"


def upload(client, headers, name="me.png", content_type="image/png", data=PNG_BYTES):
    return client.post(
        "/v1/persona/images",
        files={"file": (name, data, content_type)},
        headers=headers,
    )


class TestPersonaProfile:

    def test_missing_persona_is_404(self, client, auth_headers):
        response = client.get("/v1/persona", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_save_and_read(self, client, auth_headers):
        saved = client.post(
            "/v1/persona",
            json={"bio": "Founder", "industry": "Tech"},
            headers=auth_headers,
        )
        assert saved.status_code == 200

        persona = client.get("/v1/persona", headers=auth_headers).json()["data"]
        assert persona["bio"] == "Founder"
        assert persona["industry"] == "Tech"
        assert persona["brand_tone"] == ""
        assert persona["images"] == []

    def test_save_replaces_all_fields(self, client, auth_headers):
        client.post("/v1/persona", json={"bio": "Founder", "brand_tone": "Casual"}, headers=auth_headers)
        client.post("/v1/persona", json={"industry": "Retail"}, headers=auth_headers)

        persona = client.get("/v1/persona", headers=auth_headers).json()["data"]
        assert persona["industry"] == "Retail"
        assert persona["bio"] == ""
        assert persona["brand_tone"] == ""

    def test_requires_auth(self, client):
        assert client.get("/v1/persona").status_code == 401


class TestPersonaImages:

    def test_upload_list_and_serve(self, client, auth_headers):
        response = upload(client, auth_headers)
        assert response.status_code == 201
        image = response.json()["data"]
        assert image["content_type"] == "image/png"

        images = client.get("/v1/persona/images", headers=auth_headers).json()["data"]
        assert [i["id"] for i in images["images"]] == [image["id"]]

        served = client.get(image["url"])
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    def test_delete_one_of_two(self, client, auth_headers):
        client.post("/v1/persona", json={"industry": "Tech"}, headers=auth_headers)
        keep = upload(client, auth_headers, name="a.png").json()["data"]
        drop = upload(client, auth_headers, name="b.png").json()["data"]

        response = client.delete(f"/v1/persona/images/{drop['id']}", headers=auth_headers)
        assert response.status_code == 200

        persona = client.get("/v1/persona", headers=auth_headers).json()["data"]
        assert [i["id"] for i in persona["images"]] == [keep["id"]]
        assert client.get(drop["url"]).status_code == 404

    def test_delete_first_of_two_keeps_second_url(self, client, auth_headers):
        first = upload(client, auth_headers, name="a.png").json()["data"]
        second = upload(client, auth_headers, name="b.png").json()["data"]

        response = client.delete(f"/v1/persona/images/{first['id']}", headers=auth_headers)
        assert response.status_code == 200

        images = client.get("/v1/persona/images", headers=auth_headers).json()["data"]
        assert [i["url"] for i in images["images"]] == [second["url"]]
        assert client.get(second["url"]).status_code == 200
        assert client.get(first["url"]).status_code == 404

    def test_delete_other_users_image_is_404(self, client, register_user):
        owner = register_user()
        stranger = register_user()
        image = upload(client, owner).json()["data"]

        response = client.delete(f"/v1/persona/images/{image['id']}", headers=stranger)

        assert response.status_code == 404
        images = client.get("/v1/persona/images", headers=owner).json()["data"]
        assert images["total"] == 1

    def test_rejects_non_image_upload(self, client, auth_headers):
        response = upload(client, auth_headers, name="notes.txt", content_type="text/plain", data=b"hello")
        assert response.status_code == 400
