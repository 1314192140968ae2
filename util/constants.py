class InternalURIs:
    API = "/api"
    HEALTH = "/health"
    CHECK = API + "/check"
    BACKENDS = API + "/backends"


NO_EVIDENCE = "No direct evidence found."
HEURISTIC_PASS_CONFIDENCE = 55
HEURISTIC_FAIL_CONFIDENCE = 35


class ExternalURIs:
    OPENAI_CHAT = "https://api.openai.com/v1/chat/completions"
    MISTRAL_CHAT = "https://api.mistral.ai/v1/chat/completions"
    GROQ_BASE = "https://api.groq.com/openai/v1"
