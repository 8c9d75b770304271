"""Tests for listing, reading and deleting stored images."""

from datetime import datetime

from imghost.services import storage


def _parse(timestamp: str) -> datetime:
    return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))


class TestListImages:
    def test_empty(self, client):
        response = client.get("/api/images")

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_every_upload_newest_first(self, client, upload_png):
        uploaded = {upload_png(f"img{i}.png", size=100 + i)["filename"] for i in range(3)}

        records = client.get("/api/images").json()

        assert {record["filename"] for record in records} == uploaded
        timestamps = [_parse(record["uploadedAt"]) for record in records]
        assert timestamps == sorted(timestamps, reverse=True)
        for record in records:
            assert record["url"] == f"http://testserver/uploads/{record['filename']}"

    def test_directory_error_returns_500(self, client, monkeypatch):
        def boom(path):
            raise PermissionError("denied")

        monkeypatch.setattr(storage.os, "scandir", boom)

        response = client.get("/api/images")

        assert response.status_code == 500
        assert response.json() == {"error": "Could not read images"}


class TestGetImage:
    def test_metadata(self, client, upload_png):
        file = upload_png(size=512)

        response = client.get(f"/api/image/{file['filename']}")

        assert response.status_code == 200
        assert response.json()["size"] == 512

    def test_missing(self, client):
        response = client.get("/api/image/1700000000000-1.png")

        assert response.status_code == 404
        assert "not found" in response.json()["error"]


class TestDeleteImage:
    def test_delete_removes_from_listing(self, client, upload_png, upload_dir):
        file = upload_png()

        response = client.delete(f"/api/image/{file['filename']}")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["filename"] == file["filename"]
        assert not (upload_dir / file["filename"]).exists()
        assert client.get("/api/images").json() == []
        assert client.get(file["url"]).status_code == 404

    def test_delete_missing_leaves_directory_unchanged(self, client, upload_png, upload_dir):
        file = upload_png()

        response = client.delete("/api/image/1700000000000-1.png")

        assert response.status_code == 404
        assert response.json() == {"error": "Image not found: 1700000000000-1.png"}
        assert [path.name for path in upload_dir.iterdir()] == [file["filename"]]

    def test_delete_rejects_non_image_name(self, client, upload_dir):
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / "keep.txt").write_text("keep")

        response = client.delete("/api/image/keep.txt")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid filename"}
        assert (upload_dir / "keep.txt").exists()

    def test_delete_directory_with_image_name_is_not_found(self, client, upload_dir):
        (upload_dir / "1-1.png").mkdir(parents=True, exist_ok=True)

        assert client.get("/api/image/1-1.png").status_code == 404
        response = client.delete("/api/image/1-1.png")

        assert response.status_code == 404
        assert response.json() == {"error": "Image not found: 1-1.png"}
        assert (upload_dir / "1-1.png").is_dir()

    def test_delete_rejects_hidden_name(self, client):
        response = client.delete("/api/image/.secret.png")

        assert response.status_code == 400


class TestScenario:
    def test_upload_list_delete_cycle(self, client):
        upload = client.post("/api/upload", files={"image": ("cat.png", b"\x89PNG" + b"\x00" * 2044, "image/png")})
        file = upload.json()["file"]
        assert file["filename"].endswith(".png")
        assert file["size"] == 2048
        assert file["mimetype"] == "image/png"

        assert file["filename"] in [record["filename"] for record in client.get("/api/images").json()]
        assert client.delete(f"/api/image/{file['filename']}").json()["success"] is True
        assert file["filename"] not in [record["filename"] for record in client.get("/api/images").json()]
