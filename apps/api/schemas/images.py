from datetime import datetime

from pydantic import BaseModel


class ImageRecord(BaseModel):
    id: str
    url: str
    public_id: str
    created_at: str

    @classmethod
    def from_row(cls, row: dict) -> "ImageRecord":
        created_at = row["created_at"]
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        return cls(
            id=str(row["id"]),
            url=row["url"],
            public_id=row["public_id"],
            created_at=created_at,
        )


class UploadResponse(BaseModel):
    msg: str
    uploaded: ImageRecord


class ImageList(BaseModel):
    images: list[ImageRecord]
