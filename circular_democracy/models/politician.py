from pydantic import BaseModel, field_validator


class Politician(BaseModel):
    id: int
    name: str
    email: str
    additional_emails: list[str] = []
    active: bool = True

    @field_validator("additional_emails", mode="before")
    @classmethod
    def _null_aliases(cls, value):
        # additional_emails is a nullable text[] column
        return [] if value is None else value


class PoliticianResponse(BaseModel):
    id: int
    name: str
    email: str
    party: str | None = None
    country: str | None = None
    region: str | None = None
    position: str | None = None
    active: bool

    model_config = {"from_attributes": True}
