"""Image upload endpoints."""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from monlyking.core.security import get_current_user
from monlyking.core.storage import save_upload
from monlyking.models.user import User
from monlyking.services.chat import room_key

router = APIRouter()


@router.post("/listing-images", status_code=status.HTTP_201_CREATED)
async def upload_listing_image(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
):
    url = await save_upload(file, f"listing-images/{user.id}")
    return {"url": url}


@router.post("/chat-images/{other_user_id}", status_code=status.HTTP_201_CREATED)
async def upload_chat_image(
    other_user_id: int,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
):
    """Store an image to attach to a chat message."""
    if other_user_id == user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot send message to yourself",
        )
    url = await save_upload(file, f"chat-images/{room_key(user.id, other_user_id)}")
    return {"url": url}
