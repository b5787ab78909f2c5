from fastapi import APIRouter, Depends

from models import User
from schemas import PresignRequest, PresignResponse
from security import require_user
from utils import presign_post_image_upload

router = APIRouter()


@router.post("/uploads/presign", response_model=PresignResponse)
def presign_post_image(
    payload: PresignRequest,
    user: User = Depends(require_user),
):
    return presign_post_image_upload(user.id, payload.filename, payload.content_type)
