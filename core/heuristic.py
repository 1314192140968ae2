# core/heuristic.py
import math
import re
from typing import List
from model.verdict import VerdictResult, VerdictStatus
from util.constants import (
    HEURISTIC_FAIL_CONFIDENCE,
    HEURISTIC_PASS_CONFIDENCE,
    NO_EVIDENCE,
)
from util.enums import BackendName
from util.functions import split_sentences

_WORD = re.compile(r"[a-z0-9]+")

MIN_KEYWORD_LENGTH = 5
MAX_KEYWORDS = 6
MATCH_RATIO = 0.4


def extract_keywords(rule: str) -> List[str]:
    """
    Content-bearing words of the rule: lowercase alphanumerics longer than
    four characters, first six only. Duplicates are kept.
    """
    words = _WORD.findall(rule.lower())
    return [w for w in words if len(w) >= MIN_KEYWORD_LENGTH][:MAX_KEYWORDS]


def required_matches(keyword_count: int) -> int:
    return max(1, math.ceil(keyword_count * MATCH_RATIO))


def _first_evidence(document: str, matches: List[str]) -> str:
    if not matches:
        return NO_EVIDENCE
    for sentence in split_sentences(document):
        lowered = sentence.lower()
        if any(k in lowered for k in matches):
            return sentence
    return NO_EVIDENCE


def evaluate(rule: str, document: str) -> VerdictResult:
    """
    Keyword-overlap verdict. Needs no backend and never raises; a rule with no
    usable keywords cannot be confirmed and always fails.
    """
    clean_rule = (rule or "").strip()
    text = (document or "").lower()
    keywords = extract_keywords(clean_rule)
    matches = [k for k in keywords if k in text]
    passed = len(matches) >= required_matches(len(keywords))

    if passed:
        reasoning = f"Heuristic match for keywords: {', '.join(matches)}."
    else:
        reasoning = "Keywords from the rule were not found in the document text."

    return VerdictResult(
        rule=clean_rule,
        status=VerdictStatus.PASS if passed else VerdictStatus.FAIL,
        evidence=_first_evidence(document or "", matches),
        reasoning=reasoning,
        confidence=HEURISTIC_PASS_CONFIDENCE if passed else HEURISTIC_FAIL_CONFIDENCE,
        source=BackendName.HEURISTIC,
    )
