from pydantic import BaseModel


class ScoreResult(BaseModel):
    score: int
    time_bonus: int
