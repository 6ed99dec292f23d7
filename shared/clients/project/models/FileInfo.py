from pydantic import BaseModel, ConfigDict


class FileInfo(BaseModel):
    """Metadata of an uploaded project file, as returned by the file metadata store."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    type: str | None = None
