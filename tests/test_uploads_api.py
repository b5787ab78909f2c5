import utils


class FakeS3Client:
    def __init__(self):
        self.calls = []

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        self.calls.append((operation, Params, ExpiresIn))
        return f"https://signed.example.com/{Params['Key']}"


def test_presign_without_s3_config(client, make_user, auth_headers, monkeypatch):
    monkeypatch.setattr(utils, "S3_CLIENT", None)
    user = make_user()

    response = client.post(
        "/api/uploads/presign",
        json={"filename": "photo.png", "contentType": "image/png"},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "S3 not configured"


def test_presign_post_image(client, make_user, auth_headers, monkeypatch):
    fake = FakeS3Client()
    monkeypatch.setattr(utils, "S3_CLIENT", fake)
    monkeypatch.setattr(utils, "S3_BUCKET_NAME", "alumni-bucket")
    monkeypatch.setattr(utils, "AWS_REGION", "ap-south-1")
    user = make_user()

    response = client.post(
        "/api/uploads/presign",
        json={"filename": "Photo.PNG", "contentType": "image/png"},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["key"].startswith(f"posts/{user.id}/")
    assert body["key"].endswith(".png")
    assert body["publicUrl"] == f"https://alumni-bucket.s3.ap-south-1.amazonaws.com/{body['key']}"
    assert body["uploadUrl"].startswith("https://signed.example.com/")
    assert fake.calls[0][1]["ContentType"] == "image/png"


def test_presign_rejects_non_images(client, make_user, auth_headers, monkeypatch):
    monkeypatch.setattr(utils, "S3_CLIENT", FakeS3Client())
    monkeypatch.setattr(utils, "S3_BUCKET_NAME", "alumni-bucket")
    monkeypatch.setattr(utils, "AWS_REGION", "ap-south-1")
    user = make_user()

    response = client.post(
        "/api/uploads/presign",
        json={"filename": "notes.pdf", "contentType": "application/pdf"},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid file type"
