# model/verdict.py
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from util.enums import BackendName


class VerdictStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"

    def __str__(self):
        return self.value


class VerdictResult(BaseModel):
    """
    Canonical per-rule outcome. Every field is always populated, whichever
    evaluator produced it; `source` tells the caller how far to trust it.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    rule: str
    status: VerdictStatus
    evidence: str
    reasoning: str
    confidence: int = Field(ge=0, le=100)
    source: BackendName
