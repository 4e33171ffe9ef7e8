from datetime import datetime, timezone

import pytest

from edassist.binder import WebJavaScriptDelegateBinder
from edassist.web_api import (
    AddMessageToConversationOptions,
    AgentEnvironment,
    AgentEnvironmentDescriptor,
    AgentEnvironmentHandle,
    AgentEnvironmentHash,
    AgentEnvironmentId,
    CodeExecutor,
    ConversationId,
    Message,
    MessageContent,
    MessageContentType,
    MessageRole,
    TextMessageContent,
    WebApi,
    WebApiError,
)


class FakeExecutor(CodeExecutor):
    def __init__(self):
        self.scripts = []

    def execute(self, code):
        self.scripts.append(code)
        return True


class FakeBinder(WebJavaScriptDelegateBinder):
    def __init__(self):
        self.bound_objects = {}

    def bind_object(self, name, obj, is_permanent=True):
        if name not in self.bound_objects:
            self.bound_objects[name] = (obj, is_permanent)

    def unbind_object(self, name, obj, is_permanent=True):
        bound = self.bound_objects.get(name)
        if bound is not None and bound[1] == is_permanent:
            del self.bound_objects[name]


@pytest.fixture
def parts():
    executor = FakeExecutor()
    binder = FakeBinder()
    api = WebApi(executor, binder)
    return api, executor, binder


def _only_handler_id(api):
    ids = api.result_delegate.handler_ids()
    assert len(ids) == 1
    return ids[0]


NO_HANDLER_CALL = (
    "\n"
    "try {\n"
    "  Promise.resolve(window.eda.test(%s)).then(\n"
    "    (result) => {\n"
    "      \n"
    "    },\n"
    "    (error) => {\n"
    "      \n"
    "    });\n"
    "} catch (error) {\n"
    "  \n"
    "}\n"
)


def test_format_function_call_no_args(parts):
    api, _, _ = parts
    assert api.format_function_call("test", "") == NO_HANDLER_CALL % ""


def test_format_function_call_with_args(parts):
    api, _, _ = parts
    assert api.format_function_call("test", "{foo: 'bar'}") == NO_HANDLER_CALL % "{foo: 'bar'}"


def test_format_result_and_error_handlers(parts):
    api, _, _ = parts
    on_result, on_error = api.format_result_and_error_handlers("foobar")
    assert on_result == (
        'window.ue.aiassistantresultdelegate.handleresult'
        '("foobar", JSON.stringify(result), false);'
    )
    assert on_error == (
        'window.ue.aiassistantresultdelegate.handleresult'
        '("foobar", JSON.stringify(error), true);'
    )


def test_format_handlers_without_id_are_empty(parts):
    api, _, _ = parts
    assert api.format_result_and_error_handlers("") == ("", "")


def test_format_function_call_with_result_handler(parts):
    api, _, _ = parts
    result = (
        'window.ue.aiassistantresultdelegate.handleresult'
        '("foobar", JSON.stringify(result), false);'
    )
    error = (
        'window.ue.aiassistantresultdelegate.handleresult'
        '("foobar", JSON.stringify(error), true);'
    )
    expected = (
        "\n"
        "try {\n"
        "  Promise.resolve(window.eda.test()).then(\n"
        "    (result) => {\n"
        f"      {result}\n"
        "    },\n"
        "    (error) => {\n"
        f"      {error}\n"
        "    });\n"
        "} catch (error) {\n"
        f"  {error}\n"
        "}\n"
    )
    assert api.format_function_call("test", "", "foobar") == expected


def test_create_conversation(parts):
    api, executor, _ = parts
    future = api.create_conversation()
    handler_id = _only_handler_id(api)
    assert len(executor.scripts) == 1
    assert executor.scripts[0] == api.format_function_call("createConversation", "", handler_id)
    assert not future.done()
    api.result_delegate.handle_result(handler_id, "", False)
    assert future.done()
    assert future.result() is None
    assert api.result_delegate.handler_ids() == []


def test_add_message_to_conversation(parts):
    api, executor, _ = parts
    options = AddMessageToConversationOptions(
        message=Message(
            message_role=MessageRole.USER,
            message_content=[
                MessageContent(MessageContentType.TEXT, TextMessageContent("Hello"))
            ],
        ),
        conversation_id=ConversationId("convo"),
    )
    api.add_message_to_conversation(options)
    expected_json = (
        '{"conversationId":{"id":"convo"},"message":{"messageRole":"user",'
        '"messageContent":[{"contentType":"text","content":{"text":"Hello"},'
        '"visibleToUser":true}]}}'
    )
    assert options.to_json(False) == expected_json
    assert len(executor.scripts) == 1
    assert f"window.eda.addMessageToConversation({expected_json})" in executor.scripts[0]


def test_add_agent_environment(parts):
    api, executor, _ = parts
    environment = AgentEnvironment(AgentEnvironmentDescriptor("UE", "5.7.0"))
    future = api.add_agent_environment(environment)
    assert len(executor.scripts) == 1
    assert (
        'window.eda.addAgentEnvironment({"descriptor":{"environmentName":"UE",'
        '"environmentVersion":"5.7.0"}})' in executor.scripts[0]
    )
    assert not future.done()
    handle = AgentEnvironmentHandle(
        AgentEnvironmentId("fakeId"), AgentEnvironmentHash(hash="fakeHash")
    )
    api.result_delegate.handle_result(_only_handler_id(api), handle.to_json(False), False)
    assert future.done()
    assert future.result() == handle
    assert future.result().to_json(False) == (
        '{"id":{"id":"fakeId"},"hash":{"algorithm":"","hash":"fakeHash"}}'
    )


def test_add_agent_environment_failed(parts):
    api, _, _ = parts
    future = api.add_agent_environment(AgentEnvironment())
    api.result_delegate.handle_result(_only_handler_id(api), "failed", True)
    assert future.done()
    with pytest.raises(WebApiError, match="^failed$"):
        future.result()


def test_add_agent_environment_unparsable_result(parts):
    api, _, _ = parts
    future = api.add_agent_environment(AgentEnvironment())
    api.result_delegate.handle_result(_only_handler_id(api), "not json", False)
    with pytest.raises(WebApiError) as info:
        future.result()
    assert str(info.value) == "Failed to parse: not json"


def test_set_agent_environment(parts):
    api, executor, _ = parts
    api.set_agent_environment(AgentEnvironmentId("fakeId"))
    assert len(executor.scripts) == 1
    assert 'window.eda.setAgentEnvironment({"id":"fakeId"})' in executor.scripts[0]


def test_update_global_locale(parts):
    api, executor, _ = parts
    api.update_global_locale("fr")
    assert len(executor.scripts) == 1
    assert 'window.eda.updateGlobalLocale("fr")' in executor.scripts[0]


def test_close_unbinds_and_cancels(parts):
    api, _, binder = parts
    assert list(binder.bound_objects) == ["aiassistantresultdelegate"]
    future = api.create_conversation()
    api.close()
    assert binder.bound_objects == {}
    with pytest.raises(WebApiError, match='"canceled"'):
        future.result()
    with pytest.raises(RuntimeError):
        api.execute_function("test")


def test_message_round_trip_with_date():
    message = Message(
        message_role=MessageRole.AGENT,
        message_content=[MessageContent(content=TextMessageContent("hi"), visible_to_user=False)],
        date=datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc),
    )
    text = message.to_json()
    assert text.startswith('{"date":"2024-01-02T03:04:05.678Z","messageRole":"agent"')
    loaded = Message().from_json(text)
    assert loaded == message


def test_message_content_defaults_visible_when_missing():
    content = MessageContent(content=None).from_json(
        '{"contentType":"text","content":{"text":"x"}}'
    )
    assert content.content == TextMessageContent("x")
    assert content.visible_to_user is True