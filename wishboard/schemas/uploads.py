from pydantic import BaseModel, Field


class UploadOut(BaseModel):
    url: str = Field(description="Publicly dereferenceable URL of the stored file.")
    pathname: str = Field(description="Storage key inside the bucket.", examples=["memories/1735689600000-1a2b3c4d.jpg"])
