"""
Provider-facing types.

- ProviderMessage: one entry of the message list sent upstream
- ProviderSuccess / ProviderFailure: the outcome of one provider call
- CompletionResponse: strict decoder for the part of an OpenAI-style
  chat-completion body the relay reads (first choice's message content)
"""
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ProviderMessage:
    role: Role
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ProviderSuccess:
    """Provider answered 2xx with usable text."""
    text: str
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class ProviderFailure:
    """
    Provider answered, but not with usable text.

    Attributes:
        http_status: Status code the provider returned
        raw_body: Response body verbatim, for diagnostics
        malformed: True when the status was 2xx but the body did not
            decode to a non-empty first-choice content
    """
    http_status: int
    raw_body: str
    malformed: bool = False
    ok: ClassVar[bool] = False


ProviderOutcome = Union[ProviderSuccess, ProviderFailure]


class CompletionMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str


class CompletionChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: CompletionMessage


class CompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    choices: List[CompletionChoice] = Field(..., min_length=1)

    @property
    def first_content(self) -> str:
        return self.choices[0].message.content
