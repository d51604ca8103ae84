"""Shared type definitions for agents."""
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Evaluation(BaseModel):
    score: float  # 0..10
    feedback: str = ""


class SampleAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    original_answer: str = Field(default="", alias="originalAnswer")
    improved_answer: str = Field(default="", alias="improvedAnswer")


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    overall_score: float = Field(alias="overallScore")
    percentage_score: int = Field(alias="percentageScore")
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    sample_answers: List[SampleAnswer] = Field(default_factory=list, alias="sampleAnswers")
    suggested_topics: List[str] = Field(default_factory=list, alias="suggestedTopics")
