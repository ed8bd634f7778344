from pydantic import BaseModel


class AnalyzeResponse(BaseModel):
    result: str
    image: str


class DownloadRequest(BaseModel):
    result: str
    image: str | None = None
