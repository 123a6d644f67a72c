from pydantic import BaseModel


class ReplyTemplateCreate(BaseModel):
    politician_id: int
    campaign_id: int
    name: str
    subject: str
    body: str


class ReplyTemplateResponse(BaseModel):
    id: int
    politician_id: int
    campaign_id: int
    name: str
    subject: str
    body: str
    active: bool

    model_config = {"from_attributes": True}
