from pydantic import BaseModel, Field


class CreateSeekerRequest(BaseModel):
    name: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=320)
    cv_text: str = Field(..., min_length=1, max_length=50000, description="Plain text CV content")


class CreateJobPostingRequest(BaseModel):
    occupation_uri: str = Field(..., min_length=1, description="ESCO occupation URI")
    company: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=320)


class MatchRequest(BaseModel):
    seeker_profile_id: str = Field(..., min_length=1)
    job_posting_id: str = Field(..., min_length=1)


class TransitionRequest(BaseModel):
    seeker_profile_id: str = Field(..., min_length=1)
    occupation_uri: str = Field(..., min_length=1, description="Target ESCO occupation URI")


class TrainingProgramsRequest(BaseModel):
    missing_skills: list[str] = Field(..., description="Skill titles the seeker lacks")
    target_occupation: str = Field(..., min_length=1)
