from pydantic import AliasChoices, BaseModel, Field, field_validator


class ResolveMarketRequest(BaseModel):
    market_id: str = Field(..., validation_alias=AliasChoices("market_id", "marketId"))
    outcome: str

    @field_validator("market_id", "outcome")
    @classmethod
    def non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ResolveMarketResponse(BaseModel):
    market_id: str
    outcome: str
    winning_side: str
    updated_agents: int
