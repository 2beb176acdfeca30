from pydantic import BaseModel, ConfigDict, Field


class Alignment(BaseModel):
    score: int = Field(0, ge=0, le=100)
    explanation: str = ""


class AnalysisResult(BaseModel):
    strengths: list[str] = []
    weaknesses: list[str] = []
    alignment: Alignment = Alignment()
    recommendations: list[str] = []


class AnalyzeProfileResponse(BaseModel):
    success: bool = True
    analysis: AnalysisResult


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: str
    service: str = "profile-analyzer"


class AIConnectionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    connected: bool
    timestamp: str
    api_url: str = Field(alias="apiUrl")
