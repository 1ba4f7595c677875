from pydantic import BaseModel


class UploadResult(BaseModel):
    filename: str
    url: str
    size: int
    message: str


class ErrorResult(BaseModel):
    message: str
