"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class VoteResult(BaseModel):
    """Counts returned after a vote toggle."""

    message: str
    upvotes: int
    downvotes: int
    vote_score: int
    my_vote: int = Field(..., description="1 for upvote, -1 for downvote, 0 after a retraction")

    model_config = ConfigDict(from_attributes=True)
