"""Integration tests for image upload endpoints."""

from httpx import AsyncClient


class TestUploads:
    """Tests for /api/fileupload."""

    async def test_upload_and_delete(self, client: AsyncClient, file_storage):
        """Test an uploaded image can be deleted by its file name."""
        response = await client.post(
            "/api/fileupload/upload",
            files={"file": ("photo.jpg", b"jpegdata", "image/jpeg")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["originalName"] == "photo.jpg"
        assert data["size"] == 8
        assert data["url"] == f"/uploads/books/{data['fileName']}"
        assert (file_storage.root / "books" / data["fileName"]).exists()

        deleted = await client.delete(f"/api/fileupload/delete/{data['fileName']}")
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "File deleted successfully"
        assert not (file_storage.root / "books" / data["fileName"]).exists()

    async def test_upload_rejects_non_image(self, client: AsyncClient):
        """Test a non-image upload is a 400."""
        response = await client.post(
            "/api/fileupload/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]

    async def test_upload_rejects_empty_file(self, client: AsyncClient):
        response = await client.post(
            "/api/fileupload/upload",
            files={"file": ("empty.png", b"", "image/png")},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "No file uploaded."

    async def test_delete_missing_file(self, client: AsyncClient):
        """Test deleting an unknown file is a 404."""
        response = await client.delete("/api/fileupload/delete/missing.png")

        assert response.status_code == 404
        assert response.json()["detail"] == "File not found"
