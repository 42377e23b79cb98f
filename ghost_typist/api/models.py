from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SessionState(StrEnum):
    idle = "idle"
    playing = "playing"
    game_over = "gameOver"


class HighScoreResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    high_score: int = Field(..., ge=0, alias="highScore")


class ErrorResponse(BaseModel):
    message: str


class TypedWordView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_word: str = Field(..., alias="targetWord")
    typed_text: str = Field(..., alias="typedText")
    letter_states: list[str] = Field(default_factory=list, alias="letterStates")


class SessionView(BaseModel):
    """Read-only snapshot handed to renderers.

    Field aliases are camelCase so a browser client can consume `model_dump(by_alias=True)`
    without a mapping layer.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    state: SessionState
    current_word: str = Field(..., alias="currentWord")
    current_score: int = Field(..., alias="currentScore")
    high_score: int = Field(..., alias="highScore")
    elapsed_seconds: int = Field(..., alias="gameTime")
    level: int = Field(..., alias="currentLevel")
    progress: float = Field(..., alias="progressValue")
    final_score: int = Field(..., alias="finalScore")
    decrease_rate: float = Field(..., alias="decreaseRate")
    typed_word: TypedWordView = Field(..., alias="typedWordState")
