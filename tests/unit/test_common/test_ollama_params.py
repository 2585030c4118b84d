"""
Local-runner Parameter Mapping Unit Tests
"""

from ollama_relay.common.ollama_params import ollama_params_to_openai


def test_options_are_hoisted_to_openai_parameters():
    params = ollama_params_to_openai(
        {"options": {"temperature": 0.2, "top_p": 0.9, "num_predict": 128, "stop": ["\n"], "num_ctx": 4096}}
    )
    assert params == {"temperature": 0.2, "top_p": 0.9, "max_tokens": 128, "stop": ["\n"]}


def test_runner_only_keys_are_dropped():
    params = ollama_params_to_openai({"keep_alive": "5m", "raw": True, "template": "x", "user": "abc"})
    assert params == {"user": "abc"}


def test_unlimited_num_predict_is_not_forwarded():
    assert ollama_params_to_openai({"options": {"num_predict": -1}}) == {}


def test_json_format_maps_to_response_format():
    assert ollama_params_to_openai({"format": "json"}) == {"response_format": {"type": "json_object"}}
