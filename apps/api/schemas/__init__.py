from schemas.analysis import AnalyzeResponse, DownloadRequest
from schemas.images import ImageRecord, UploadResponse, ImageList
