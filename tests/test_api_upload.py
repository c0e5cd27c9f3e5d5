"""Tests for photo upload endpoints."""
import io

from familytree import storage


class TestUpload:
    def test_upload(self, auth_client, upload_dir):
        resp = auth_client.post(
            "/api/upload",
            files={"file": ("portrait.png", io.BytesIO(b"\x89PNG fake"), "image/png")},
        )
        assert resp.status_code == 201
        url = resp.json()["url"]
        assert url.startswith("/uploads/")
        assert url.endswith(".png")
        assert len(list(upload_dir.iterdir())) == 1

    def test_serves_uploaded_file(self, auth_client, upload_dir):
        url = auth_client.post(
            "/api/upload",
            files={"file": ("a.jpg", io.BytesIO(b"jpeg bytes"), "image/jpeg")},
        ).json()["url"]
        resp = auth_client.get(url)
        assert resp.status_code == 200
        assert resp.content == b"jpeg bytes"

    def test_no_file(self, auth_client, upload_dir):
        resp = auth_client.post("/api/upload", data={"other": "x"})
        assert resp.status_code == 400

    def test_empty_file(self, auth_client, upload_dir):
        resp = auth_client.post(
            "/api/upload", files={"file": ("a.jpg", io.BytesIO(b""), "image/jpeg")},
        )
        assert resp.status_code == 400

    def test_requires_auth(self, client, upload_dir):
        resp = client.post(
            "/api/upload", files={"file": ("a.jpg", io.BytesIO(b"x"), "image/jpeg")},
        )
        assert resp.status_code == 401

    def test_missing_upload(self, client, upload_dir):
        assert client.get("/uploads/nope.jpg").status_code == 404

    def test_upload_then_attach(self, auth_client, upload_dir):
        url = auth_client.post(
            "/api/upload", files={"file": ("a.jpg", io.BytesIO(b"x"), "image/jpeg")},
        ).json()["url"]
        member = auth_client.post("/api/members", json={
            "firstName": "Ada", "lastName": "Lovelace", "photoUrl": url,
        }).json()
        assert member["photo_url"] == url

    def test_rejects_html(self, auth_client, upload_dir):
        resp = auth_client.post(
            "/api/upload",
            files={"file": ("x.html", io.BytesIO(b"<script>alert(1)</script>"), "text/html")},
        )
        assert resp.status_code == 400
        assert "image" in resp.json()["detail"]
        assert not upload_dir.exists() or not list(upload_dir.iterdir())

    def test_too_large(self, auth_client, upload_dir, monkeypatch):
        monkeypatch.setattr(storage, "MAX_UPLOAD_BYTES", 8)
        resp = auth_client.post(
            "/api/upload", files={"file": ("a.png", io.BytesIO(b"0123456789"), "image/png")},
        )
        assert resp.status_code == 400
        assert "too large" in resp.json()["detail"]

    def test_served_with_nosniff(self, auth_client, upload_dir):
        url = auth_client.post(
            "/api/upload", files={"file": ("a.png", io.BytesIO(b"png"), "image/png")},
        ).json()["url"]
        resp = auth_client.get(url)
        assert resp.headers["content-type"] == "image/png"
        assert resp.headers["x-content-type-options"] == "nosniff"

    def test_stray_html_not_served(self, client, upload_dir):
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / "page.html").write_text("<script></script>")
        assert client.get("/uploads/page.html").status_code == 404
