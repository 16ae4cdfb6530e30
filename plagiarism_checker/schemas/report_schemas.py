from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Union
from datetime import datetime

# ---- Results ----

class Source(BaseModel):
    uri: str = Field(min_length=1)
    title: str


class OnlineMatchedSentence(BaseModel):
    sentence: str


class ComparisonResult(BaseModel):
    """Pairwise result: two uploaded documents compared with each other."""
    kind: Literal["pairwise"] = "pairwise"
    file1: str
    file2: str
    similarity: float = Field(ge=0, le=100)  # percent
    matched_sentences: List[str] = Field(default_factory=list)


class OnlineComparisonResult(BaseModel):
    """Online result: one document compared against web sources."""
    kind: Literal["online"] = "online"
    file1: str
    similarity: float = Field(ge=0, le=100)  # percent
    matched_sentences: List[OnlineMatchedSentence] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)


AnalysisResult = Annotated[
    Union[ComparisonResult, OnlineComparisonResult],
    Field(discriminator="kind"),
]

# ---- Report ----

class ReportSummary(BaseModel):
    totalResults: int
    averageSimilarity: float   # arithmetic mean, rounded to 1 decimal
    highestSimilarity: float   # rounded to 1 decimal
    flaggedResults: int     # results in the "high" band
    similarityLevel: str    # "high" | "medium" | "low", of the average


class PlagiarismReport(BaseModel):
    id: str
    name: str = "Plagiarism Check"
    mode: Literal["pairwise", "online", "text"]
    uploadDate: datetime
    processingTime: str
    status: str = "completed"
    results: List[AnalysisResult] = Field(default_factory=list)
    summary: ReportSummary


class ExportRequest(BaseModel):
    results: List[AnalysisResult] = Field(default_factory=list)
