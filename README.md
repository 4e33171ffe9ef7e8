# edassist

`edassist` connects a Python application to a developer assistant that runs
as JavaScript inside an embedded browser. It has no third-party dependencies.

You supply two objects:

- a **code executor**, a subclass of `edassist.web_api.CodeExecutor`, whose
  `execute(code)` runs a JavaScript snippet in the page;
- a **binder**, a subclass of `edassist.binder.WebJavaScriptDelegateBinder`,
  whose `bind_object(name, obj, is_permanent=True)` and
  `unbind_object(name, obj, is_permanent=True)` make a Python object callable
  from the page as `window.ue.<name>`.

The package handles the rest. It turns typed messages into JSON and builds the
JavaScript that calls `window.eda.<function>(...)`. When a result comes back,
it hands the result to the `concurrent.futures.Future` that is waiting for it.

## Installation

```
pip install edassist
```

To install the test dependencies as well:

```
pip install "edassist[test]"
```

## Modules

| Module | Contents |
| --- | --- |
| `edassist.enum_meta` | `EnumValueDescription`, `EnumMetadata`, `get_enum_value_description`, `get_enum_value_from_description` |
| `edassist.utility` | `get_url_as_regex_string` |
| `edassist.json_variant` | `JsonSerializable`, `VariantSerializer` |
| `edassist.binder` | `WebJavaScriptDelegateBinder`, `ScopedDelegateBinding` |
| `edassist.result_delegate` | `Result`, `ResultHandlerContext`, `WebJavaScriptResultDelegate` |
| `edassist.web_api` | `WebApi`, `CodeExecutor`, `WebApiError` and the message types |

### Enum descriptions

`EnumMetadata` takes `(value, description)` pairs or `EnumValueDescription`
objects, and keeps them in the order given.

- `len(metadata)` gives the number of entries.
- `values()` lists the values in order.
- `to_string(value)` returns the value's description, or `""` if the value has
  none.
- `from_string(text, default=None)` returns the value whose description matches
  `text` exactly (case-sensitive), or `default` if none matches.

The free functions `get_enum_value_description` and
`get_enum_value_from_description(descriptions, description, ignore_case=False)`
return `None` when nothing matches.

```python
from edassist.enum_meta import EnumMetadata

colours = EnumMetadata([("R", "red"), ("G", "green")])
colours.to_string("G")        # "green"
colours.from_string("red")    # "R"
colours.from_string("RED")    # None
```

### URL regexes

`get_url_as_regex_string(url)` escapes the characters `.*+?()[]{}^$|\` and
anchors the result with `^` and `$`:

```python
get_url_as_regex_string("https://just.a.test/foo/bar")
# '^https://just\\.a\\.test/foo/bar$'
```

### JSON objects and variants

Subclasses of `JsonSerializable` implement `to_dict()` and `load_dict(data)`.
The base class provides two more methods:

- `to_json(pretty=False)` writes compact JSON, or JSON indented with tabs.
- `from_json(text)` loads the object in place and returns it. It raises
  `ValueError` if the text is not a JSON object.

`VariantSerializer(type_field_name, variant_field_name, metadata, types)`
handles an object whose type is named by an enum field next to it.

- `save(type_value, variant, target)` writes the type string and the variant
  object into `target`. It writes nothing if the variant's class is not one of
  `types`.
- `load(source)` returns `(enum_value, variant)`. Either item is `None` when it
  cannot be read. If the type is known but the variant field is missing, it
  logs a warning.

### Binding

`ScopedDelegateBinding(binder, name, obj, is_permanent=True)` binds the object
when it is created. It unbinds the object on `close()` or when a `with` block
ends. Closing it a second time does nothing.

### Result routing

`WebJavaScriptResultDelegate` is bound under the name
`aiassistantresultdelegate`.

- `register_result_handler(handler)` returns a handler ID. The handler gets a
  `ResultHandlerContext` (`json`, `is_error`, `handler_id`). It stays
  registered until it returns `True`.
- `register_result_handler_for_future()` returns `(handler_id, future)`. The
  future completes with a `Result` on the first call.
- `handle_result(handler_id, result_json, is_error)` delivers a result. Unknown
  IDs are ignored.
- `format_javascript_handler(handler_id)` returns
  `window.ue.aiassistantresultdelegate.handleresult("<id>", JSON.stringify({0}), {1});`
  with the `{0}` and `{1}` placeholders left in.
- `handler_ids()` lists the IDs that are still registered.
- `unbind()` unbinds the delegate. Every pending future then completes with
  `Result('"canceled"', True)`.

### Web API

`WebApi(code_executor, binder)` creates a result delegate and binds it. It can
be used as a context manager; `close()` unbinds the delegate.

| Method | Calls | Returns |
| --- | --- | --- |
| `add_message_to_conversation(options)` | `addMessageToConversation` | `None` |
| `create_conversation()` | `createConversation` | `Future` of `None` |
| `add_agent_environment(env)` | `addAgentEnvironment` | `Future` of `AgentEnvironmentHandle` |
| `set_agent_environment(env_id)` | `setAgentEnvironment` | `None` |
| `update_global_locale(locale)` | `updateGlobalLocale` with `"<locale>"` | `None` |

If the page reports an error, the future raises `WebApiError`, and the error's
message is the error JSON. If the result cannot be parsed, the message is
`"Failed to parse: <json>"`.

The lower-level methods are public too:

- `format_function_call(function_name, arguments="", handler_id="")`
- `format_result_and_error_handlers(handler_id)`
- `execute_function(function_name, arguments="")`, which returns a `Future` of
  `Result`
- `execute_async_function(function_name, arguments, handler_id)`

Once the `WebApi` is closed, any call that needs the delegate raises
`RuntimeError`.

The message types are dataclasses: `Message`, `MessageContent`,
`TextMessageContent`, `ConversationId`, `AddMessageToConversationOptions`,
`AgentEnvironment`, `AgentEnvironmentDescriptor`, `AgentEnvironmentId`,
`AgentEnvironmentHash` and `AgentEnvironmentHandle`. They use the enums
`MessageRole` (`AGENT`, `USER`) and `MessageContentType` (`TEXT`).
`Message.date` is written as UTC, in the form `YYYY-MM-DDTHH:MM:SS.mmmZ`.

## Example

```python
from edassist.binder import WebJavaScriptDelegateBinder
from edassist.web_api import (
    AddMessageToConversationOptions, AgentEnvironment, CodeExecutor, MessageContent,
    MessageContentType, MessageRole, TextMessageContent, WebApi,
)


class BrowserExecutor(CodeExecutor):
    def execute(self, code):
        browser.run_javascript(code)        # your embedded browser


class BrowserBinder(WebJavaScriptDelegateBinder):
    def bind_object(self, name, obj, is_permanent=True):
        browser.bind(name, obj, is_permanent)

    def unbind_object(self, name, obj, is_permanent=True):
        browser.unbind(name, obj, is_permanent)


with WebApi(BrowserExecutor(), BrowserBinder()) as api:
    environment = AgentEnvironment()
    environment.descriptor.environment_name = "UE"
    environment.descriptor.environment_version = "5.7.0"
    future = api.add_agent_environment(environment)

    options = AddMessageToConversationOptions()
    options.message.message_role = MessageRole.USER
    options.message.message_content.append(
        MessageContent(MessageContentType.TEXT, TextMessageContent(text="Hello"))
    )
    api.add_message_to_conversation(options)
```

When the page calls back into the bound delegate, `future` completes. It then
holds an `AgentEnvironmentHandle`, or raises `WebApiError`.

## What it does not do

This package does not include a browser or a JavaScript engine. It does not
make network requests, and it does not store any data.

All calls into the page go through your `CodeExecutor`. Results come back only
when your binder's page calls `handle_result` on the bound delegate. Futures
are completed on whatever thread makes that call.

## Running the tests

```
pytest
```