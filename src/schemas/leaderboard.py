from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    """Read-only cumulative score of a player."""
    user_id: str
    username: str
    score: int
