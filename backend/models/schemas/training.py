"""Training programs suggested for closing skill gaps."""

from pydantic import BaseModel, Field


class TrainingProgram(BaseModel):
    name: str
    institution: str = ""
    cost: str = "Contact for pricing"
    duration: str = "Varies"
    url: str = ""
    relevant_skills: list[str] = Field(default_factory=list)
