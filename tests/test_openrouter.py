import asyncio
import json

import httpx
import pytest

from badgeforge.engine.archetypes import Archetype
from badgeforge.engine.inference import ClassificationRequest, ClassifierUnavailable, SchemaInference
from badgeforge.services.openrouter import OpenRouterClassifier, build_prompt

REQUEST = ClassificationRequest(
    header_sample="Name,Org,Role",
    data_sample="Ada,ACME,Speaker",
    archetype_hint=Archetype.SCHOOL,
    custom_label_hints={"name": "Student Name"},
)


def reply(content, status_code=200):
    def handler(request):
        handler.body = json.loads(request.content)
        handler.headers = request.headers
        return httpx.Response(status_code, json={"choices": [{"message": {"content": content}}]})
    return handler


def classifier_for(handler, api_key="test-key"):
    return OpenRouterClassifier(
        api_key=api_key,
        api_url="https://openrouter.test/chat",
        model="test/model",
        transport=httpx.MockTransport(handler),
    )


def test_prompt_carries_context_and_hints():
    prompt = build_prompt(REQUEST)
    assert "SCHOOL ID template" in prompt
    assert '"Student Name" -> name' in prompt
    assert "Name,Org,Role\nAda,ACME,Speaker" in prompt


def test_classify_parses_fenced_reply():
    handler = reply('```json\n{"name": 0, "company": 1, "role": 2, "tracks": [], "extras": []}\n```')
    mapping = asyncio.run(classifier_for(handler).classify(REQUEST))

    assert mapping.index_of("name") == 0
    assert mapping.index_of("schoolId") == -1
    assert handler.body["model"] == "test/model"
    assert handler.body["temperature"] == 0.1
    assert handler.body["max_tokens"] == 500
    assert handler.headers["Authorization"] == "Bearer test-key"


@pytest.mark.parametrize("handler", [
    reply("not json at all"),
    reply(""),
    reply('{"name": 0}', status_code=429),
])
def test_bad_replies_become_unavailable(handler):
    with pytest.raises(ClassifierUnavailable):
        asyncio.run(classifier_for(handler).classify(REQUEST))


def test_transport_errors_become_unavailable():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(ClassifierUnavailable):
        asyncio.run(classifier_for(handler).classify(REQUEST))


def test_missing_key_is_unavailable():
    with pytest.raises(ClassifierUnavailable):
        asyncio.run(classifier_for(reply("{}"), api_key="").classify(REQUEST))


def test_inference_falls_back_when_provider_fails():
    raw = "1,R1,Ada,ACME,Speaker Pass\n2,R2,Bob,Initech,"
    inference = SchemaInference(classifier_for(reply("oops", status_code=500)))
    result = asyncio.run(inference.infer(raw))

    assert result.used_fallback is True
    assert [r.name for r in result.records] == ["Ada", "Bob"]
