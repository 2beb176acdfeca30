from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FileUpload(BaseModel):
    """A client-submitted document. Shape checks live in services.file_validator."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    mime_type: str = Field("", validation_alias=AliasChoices("type", "mimeType", "mime_type"))
    size_bytes: int = Field(0, validation_alias=AliasChoices("size", "sizeBytes", "size_bytes"))
    data: str = Field("", description="Base64 encoded PDF, optionally as a data URL")


class AnalyzeProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_description: FileUpload = Field(default_factory=FileUpload, alias="jobDescription")
    cv: FileUpload = Field(default_factory=FileUpload)
