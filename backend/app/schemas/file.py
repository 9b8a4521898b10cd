from pydantic import BaseModel


class FileUploadResponse(BaseModel):
    file_id: str
    file_name: str
    file_download_uri: str
    file_type: str
    size: int
