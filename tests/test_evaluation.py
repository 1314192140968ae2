import asyncio
import json

import pytest

from conftest import PLAN_TEXT, make_registry
from core.entities import EvaluationContext
from core.evaluation import RuleEvaluator
from util.enums import BackendName
from util.errors import BackendError

PASS_JSON = json.dumps(
    {"status": "pass", "evidence": "Jane Doe", "reasoning": "Named owner.", "confidence": 81}
)


class FakeAdapter:
    def __init__(self, reply=PASS_JSON, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts = []

    async def invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        delay = self.delay(prompt) if callable(self.delay) else self.delay
        if delay:
            await asyncio.sleep(delay)
        if self.error is not None:
            raise self.error
        return self.reply


def _evaluator(adapters, default=None, **kwargs) -> RuleEvaluator:
    registry = make_registry(adapters.keys(), default=default)
    return RuleEvaluator(registry, adapter_factory=lambda cfg: adapters[cfg.name], **kwargs)


@pytest.mark.asyncio
async def test_backend_verdict_is_normalized_and_tagged():
    fake = FakeAdapter()
    evaluator = _evaluator({BackendName.OPENAI: fake})

    v = await evaluator.evaluate_rule("Names a responsible owner", PLAN_TEXT)

    assert v.source == "openai"
    assert v.status == "pass"
    assert v.confidence == 81
    assert v.rule == "Names a responsible owner"
    assert 'Rule: "Names a responsible owner"' in fake.prompts[0]
    assert PLAN_TEXT in fake.prompts[0]


@pytest.mark.asyncio
async def test_heuristic_request_skips_backends():
    fake = FakeAdapter()
    evaluator = _evaluator({BackendName.OPENAI: fake})

    v = await evaluator.evaluate_rule("Jane must be responsible", PLAN_TEXT, "heuristic")

    assert v.source == "heuristic"
    assert fake.prompts == []


@pytest.mark.asyncio
async def test_unconfigured_request_uses_default_backend():
    fake = FakeAdapter()
    evaluator = _evaluator({BackendName.MISTRAL: fake})

    v = await evaluator.evaluate_rule("Any rule at all", PLAN_TEXT, "groq")

    assert v.source == "mistral"
    assert len(fake.prompts) == 1


@pytest.mark.asyncio
async def test_nothing_configured_goes_straight_to_heuristic():
    evaluator = _evaluator({})
    v = await evaluator.evaluate_rule("Jane must be responsible", PLAN_TEXT, "openai")
    assert v.source == "heuristic"
    assert v.status == "pass"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [BackendError("openai", "status=500"), RuntimeError("boom"), ValueError("bad")],
)
async def test_backend_failure_returns_heuristic_fallback(error):
    evaluator = _evaluator({BackendName.OPENAI: FakeAdapter(error=error)})
    v = await evaluator.evaluate_rule("Jane must be responsible", PLAN_TEXT)
    assert v.source == "heuristic"
    assert v.confidence == 55


@pytest.mark.asyncio
async def test_slow_backend_times_out_to_heuristic():
    evaluator = _evaluator(
        {BackendName.GROQ: FakeAdapter(delay=1.0)}, timeout_seconds=0.05
    )
    v = await evaluator.evaluate_rule("Jane must be responsible", PLAN_TEXT)
    assert v.source == "heuristic"


@pytest.mark.asyncio
async def test_garbage_output_returns_fallback():
    evaluator = _evaluator({BackendName.OPENAI: FakeAdapter(reply="No idea, sorry.")})
    v = await evaluator.evaluate_rule("The document must mention a date", PLAN_TEXT)
    assert v.source == "heuristic"
    assert v.status == "fail"


@pytest.mark.asyncio
async def test_order_is_preserved_regardless_of_latency():
    latency = {"R1": 0.06, "R2": 0.03, "R3": 0.0}

    def delay(prompt: str) -> float:
        return next(d for rule, d in latency.items() if f'"{rule}"' in prompt)

    evaluator = _evaluator({BackendName.OPENAI: FakeAdapter(delay=delay)})
    results = await evaluator.evaluate_all(["R1", "R2", "R3"], PLAN_TEXT)

    assert [r.rule for r in results] == ["R1", "R2", "R3"]
    assert all(r.source == "openai" for r in results)


@pytest.mark.asyncio
async def test_all_backends_down_still_answers_every_rule():
    evaluator = _evaluator(
        {
            BackendName.OPENAI: FakeAdapter(error=BackendError("openai", "ConnectError")),
            BackendName.MISTRAL: FakeAdapter(error=BackendError("mistral", "status=503")),
        },
        default=BackendName.OPENAI,
    )
    rules = [f"Rule number {i} mentions delivery" for i in range(10)]

    results = await evaluator.evaluate_all(rules, PLAN_TEXT, "mistral")

    assert len(results) == 10
    assert [r.rule for r in results] == rules
    assert {r.source for r in results} == {"heuristic"}


@pytest.mark.asyncio
async def test_duplicate_rules_each_get_a_verdict():
    evaluator = _evaluator({})
    results = await evaluator.evaluate_all(["Same rule", "Same rule"], PLAN_TEXT)
    assert [r.rule for r in results] == ["Same rule", "Same rule"]


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    active = 0
    peak = 0

    class CountingAdapter(FakeAdapter):
        async def invoke(self, prompt: str) -> str:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return PASS_JSON

    evaluator = _evaluator({BackendName.OPENAI: CountingAdapter()}, concurrency=2)
    results = await evaluator.evaluate_all([f"rule {i}" for i in range(6)], PLAN_TEXT)

    assert len(results) == 6
    assert peak == 2


@pytest.mark.asyncio
async def test_unexpected_error_fails_the_whole_batch(monkeypatch):
    evaluator = _evaluator({})
    original = evaluator.evaluate_rule

    async def flaky(rule, document, requested=None):
        if rule == "explode":
            raise RuntimeError("unexpected")
        return await original(rule, document, requested)

    monkeypatch.setattr(evaluator, "evaluate_rule", flaky)
    with pytest.raises(RuntimeError):
        await evaluator.evaluate_all(["fine", "explode", "fine"], PLAN_TEXT)


@pytest.mark.asyncio
async def test_evaluate_context_uses_context_backend():
    fake = FakeAdapter()
    evaluator = _evaluator({BackendName.GROQ: fake})
    ctx = EvaluationContext(
        document=PLAN_TEXT, rules=("A rule", "B rule"), backend=BackendName.GROQ
    )

    results = await evaluator.evaluate_context(ctx)

    assert [r.source for r in results] == ["groq", "groq"]
    assert len(fake.prompts) == 2


@pytest.mark.asyncio
async def test_out_of_range_confidence_does_not_break_the_batch():
    reply = '{"status": "pass", "confidence": 1' + "0" * 400 + "}"
    evaluator = _evaluator({BackendName.OPENAI: FakeAdapter(reply=reply)})

    results = await evaluator.evaluate_all(["a rule", "b rule"], PLAN_TEXT)

    assert [r.rule for r in results] == ["a rule", "b rule"]
    assert [r.confidence for r in results] == [100, 100]
    assert {r.source for r in results} == {"openai"}
