import os
import uuid
from pathlib import Path
from typing import Dict
from fastapi import HTTPException, status
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
import boto3
from botocore.config import Config

AWS_REGION = os.environ.get("AWS_REGION")
S3_BUCKET_NAME = os.environ.get("S3_BUCKET_NAME")
S3_ACCESS_KEY = os.environ.get("S3_ACCESS_KEY") or os.environ.get("AWS_ACCESS_KEY_ID")
S3_SECRET_KEY = os.environ.get("S3_SECRET_KEY") or os.environ.get("AWS_SECRET_ACCESS_KEY")

S3_CLIENT = None
if AWS_REGION and S3_BUCKET_NAME and S3_ACCESS_KEY and S3_SECRET_KEY:
    S3_CLIENT = boto3.client(
        "s3",
        region_name=AWS_REGION,
        aws_access_key_id=S3_ACCESS_KEY,
        aws_secret_access_key=S3_SECRET_KEY,
        config=Config(signature_version="s3v4", s3={"addressing_style": "virtual"}),
    )

POST_IMAGE_PREFIX = "posts"
PRESIGN_EXPIRES_SECONDS = 600


def dialect_insert(db: Session, model):
    """Return an INSERT construct that supports ON CONFLICT for the session's dialect."""
    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(model)
    if dialect_name == "sqlite":
        return sqlite.insert(model)
    raise RuntimeError(f"Upserts are not supported on the {dialect_name} dialect")


def public_s3_url(key: str) -> str:
    return f"https://{S3_BUCKET_NAME}.s3.{AWS_REGION}.amazonaws.com/{key}"


def presign_post_image_upload(user_id: str, filename: str, content_type: str) -> Dict[str, str]:
    if not S3_CLIENT or not S3_BUCKET_NAME or not AWS_REGION:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="S3 not configured")
    content_type = (content_type or "").strip().lower()
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file type")

    key = f"{POST_IMAGE_PREFIX}/{user_id}/{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
    try:
        upload_url = S3_CLIENT.generate_presigned_url(
            "put_object",
            Params={"Bucket": S3_BUCKET_NAME, "Key": key, "ContentType": content_type},
            ExpiresIn=PRESIGN_EXPIRES_SECONDS,
        )
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create presigned URL") from exc

    return {
        "upload_url": upload_url,
        "public_url": public_s3_url(key),
        "key": key,
        "content_type": content_type,
    }
