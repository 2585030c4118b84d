"""
Local-runner request parameter mapping.

Local-runner clients nest sampling settings under `options` and send a few
runner-only keys (keep_alive, raw, template...). OpenAI-style upstreams
reject unknown fields, so those are translated or dropped before the extra
parameters reach the payload builders.
"""

from typing import Any

# options.<key> -> top-level OpenAI parameter
OPTION_MAP = {
    "temperature": "temperature",
    "top_p": "top_p",
    "seed": "seed",
    "stop": "stop",
    "num_predict": "max_tokens",
    "frequency_penalty": "frequency_penalty",
    "presence_penalty": "presence_penalty",
}

RUNNER_ONLY_KEYS = frozenset(
    {
        "options",
        "keep_alive",
        "format",
        "raw",
        "template",
        "context",
        "images",
        "think",
        "suffix",
        "truncate",
    }
)


def ollama_params_to_openai(extra: dict[str, Any]) -> dict[str, Any]:
    """
    Translate local-runner extra parameters to OpenAI request parameters.

    Example:
        >>> ollama_params_to_openai({"options": {"num_predict": 64}, "keep_alive": "5m"})
        {'max_tokens': 64}
    """
    params = {key: value for key, value in extra.items() if key not in RUNNER_ONLY_KEYS}

    options = extra.get("options")
    if isinstance(options, dict):
        for source, target in OPTION_MAP.items():
            value = options.get(source)
            if value is None:
                continue
            # num_predict -1/-2 mean "no limit" on the runner
            if source == "num_predict" and (not isinstance(value, int) or value <= 0):
                continue
            params[target] = value

    if extra.get("format") == "json":
        params["response_format"] = {"type": "json_object"}

    return params
