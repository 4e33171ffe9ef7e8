"""Client for the assistant's JavaScript web API."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import TracebackType
from typing import Any, Mapping, Optional, Tuple, Type, TypeVar

from edassist.binder import WebJavaScriptDelegateBinder
from edassist.enum_meta import EnumMetadata
from edassist.json_variant import JsonSerializable, VariantSerializer
from edassist.result_delegate import Result, WebJavaScriptResultDelegate

R = TypeVar("R", bound=JsonSerializable)


class MessageRole(Enum):
    """Role of the author or source of a message."""

    AGENT = "agent"
    USER = "user"


MESSAGE_ROLE_METADATA: EnumMetadata[MessageRole] = EnumMetadata(
    [(MessageRole.AGENT, "agent"), (MessageRole.USER, "user")]
)


class MessageContentType(Enum):
    """Type of content held by a message."""

    TEXT = "text"


MESSAGE_CONTENT_TYPE_METADATA: EnumMetadata[MessageContentType] = EnumMetadata(
    [(MessageContentType.TEXT, "text")]
)


def _get_str(data: Mapping[str, Any], key: str, current: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else current


def _format_date(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _parse_date(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class TextMessageContent(JsonSerializable):
    """Text content of a message."""

    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text}

    def load_dict(self, data: Mapping[str, Any]) -> None:
        self.text = _get_str(data, "text", self.text)


_CONTENT_SERIALIZER: VariantSerializer[MessageContentType] = VariantSerializer(
    "contentType",
    "content",
    MESSAGE_CONTENT_TYPE_METADATA,
    {MessageContentType.TEXT: TextMessageContent},
)


@dataclass
class MessageContent(JsonSerializable):
    """A piece of content of a message, typed by ``content_type``."""

    content_type: MessageContentType = MessageContentType.TEXT
    content: Optional[JsonSerializable] = field(default_factory=TextMessageContent)
    visible_to_user: bool = True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        _CONTENT_SERIALIZER.save(self.content_type, self.content, data)
        data["visibleToUser"] = self.visible_to_user
        return data

    def load_dict(self, data: Mapping[str, Any]) -> None:
        content_type, content = _CONTENT_SERIALIZER.load(data)
        if content_type is not None:
            self.content_type = content_type
        if content is not None:
            self.content = content
        visible = data.get("visibleToUser", True)
        self.visible_to_user = visible if isinstance(visible, bool) else True


@dataclass
class Message(JsonSerializable):
    """A message within a conversation."""

    message_role: MessageRole = MessageRole.USER
    message_content: list[MessageContent] = field(default_factory=list)
    date: Optional[datetime] = None
    """Creation time (UTC), filled in by the server and ignored when sent."""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.date is not None:
            data["date"] = _format_date(self.date)
        data["messageRole"] = MESSAGE_ROLE_METADATA.to_string(self.message_role)
        data["messageContent"] = [content.to_dict() for content in self.message_content]
        return data

    def load_dict(self, data: Mapping[str, Any]) -> None:
        date = data.get("date")
        if isinstance(date, str):
            self.date = _parse_date(date)
        role = data.get("messageRole")
        if isinstance(role, str):
            self.message_role = MESSAGE_ROLE_METADATA.from_string(role, self.message_role)
        contents = data.get("messageContent")
        if isinstance(contents, list):
            loaded = []
            for item in contents:
                if isinstance(item, dict):
                    content = MessageContent()
                    content.load_dict(item)
                    loaded.append(content)
            self.message_content = loaded


@dataclass
class ConversationId(JsonSerializable):
    """ID of a conversation, generated by the assistant backend."""

    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id}

    def load_dict(self, data: Mapping[str, Any]) -> None:
        self.id = _get_str(data, "id", self.id)


@dataclass
class AddMessageToConversationOptions(JsonSerializable):
    """Argument of ``WebApi.add_message_to_conversation``."""

    message: Message = field(default_factory=Message)
    conversation_id: Optional[ConversationId] = None
    """Conversation to add to; the current one when None."""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.conversation_id is not None:
            data["conversationId"] = self.conversation_id.to_dict()
        data["message"] = self.message.to_dict()
        return data

    def load_dict(self, data: Mapping[str, Any]) -> None:
        conversation = data.get("conversationId")
        if isinstance(conversation, dict):
            self.conversation_id = ConversationId()
            self.conversation_id.load_dict(conversation)
        message = data.get("message")
        if isinstance(message, dict):
            self.message.load_dict(message)


@dataclass
class AgentEnvironmentDescriptor(JsonSerializable):
    """High level description of the environment the agent works in."""

    environment_name: str = ""
    environment_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "environmentName": self.environment_name,
            "environmentVersion": self.environment_version,
        }

    def load_dict(self, data: Mapping[str, Any]) -> None:
        self.environment_name = _get_str(data, "environmentName", self.environment_name)
        self.environment_version = _get_str(
            data, "environmentVersion", self.environment_version
        )


@dataclass
class AgentEnvironment(JsonSerializable):
    """Description of the agent's environment."""

    descriptor: AgentEnvironmentDescriptor = field(default_factory=AgentEnvironmentDescriptor)

    def to_dict(self) -> dict[str, Any]:
        return {"descriptor": self.descriptor.to_dict()}

    def load_dict(self, data: Mapping[str, Any]) -> None:
        descriptor = data.get("descriptor")
        if isinstance(descriptor, dict):
            self.descriptor.load_dict(descriptor)


@dataclass
class AgentEnvironmentId(JsonSerializable):
    """Permanent storage ID of an agent environment."""

    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id}

    def load_dict(self, data: Mapping[str, Any]) -> None:
        self.id = _get_str(data, "id", self.id)


@dataclass
class AgentEnvironmentHash(JsonSerializable):
    """Hash of an agent environment; SHA256 when no algorithm is given."""

    algorithm: str = ""
    hash: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"algorithm": self.algorithm, "hash": self.hash}

    def load_dict(self, data: Mapping[str, Any]) -> None:
        self.algorithm = _get_str(data, "algorithm", self.algorithm)
        self.hash = _get_str(data, "hash", self.hash)


@dataclass
class AgentEnvironmentHandle(JsonSerializable):
    """Handle to an agent environment."""

    id: AgentEnvironmentId = field(default_factory=AgentEnvironmentId)
    hash: AgentEnvironmentHash = field(default_factory=AgentEnvironmentHash)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id.to_dict(), "hash": self.hash.to_dict()}

    def load_dict(self, data: Mapping[str, Any]) -> None:
        handle_id = data.get("id")
        if isinstance(handle_id, dict):
            self.id.load_dict(handle_id)
        handle_hash = data.get("hash")
        if isinstance(handle_hash, dict):
            self.hash.load_dict(handle_hash)


class WebApiError(Exception):
    """A web API call failed; the message is the error JSON or a parse failure."""


class CodeExecutor(ABC):
    """Runs code in a JavaScript execution environment."""

    @abstractmethod
    def execute(self, code: str) -> Any:
        """Execute ``code``; the return value is not used by the web API."""


_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _format(template: str, values: Mapping[str, str]) -> str:
    return _PLACEHOLDER.sub(lambda match: values.get(match.group(1), match.group(0)), template)


class WebApi:
    """Calls functions of the assistant's web API through a code executor."""

    WEB_API_OBJECT_NAME = "window.eda"

    FUNCTION_CALL_TEMPLATE = (
        "\n"
        "try {\n"
        "  Promise.resolve({WebApiObjectName}.{FunctionName}({Arguments})).then(\n"
        "    (result) => {\n"
        "      {NotifyHandlerOfResult}\n"
        "    },\n"
        "    (error) => {\n"
        "      {NotifyHandlerOfError}\n"
        "    });\n"
        "} catch (error) {\n"
        "  {NotifyHandlerOfError}\n"
        "}\n"
    )

    def __init__(self, code_executor: CodeExecutor, binder: WebJavaScriptDelegateBinder) -> None:
        self.code_executor = code_executor
        self.binder = binder
        self.result_delegate: Optional[WebJavaScriptResultDelegate] = (
            WebJavaScriptResultDelegate()
        )
        self.result_delegate.bind(binder)

    def close(self) -> None:
        """Unbind the result delegate, canceling pending calls; later calls do nothing."""
        if self.result_delegate is not None:
            delegate, self.result_delegate = self.result_delegate, None
            delegate.unbind()

    def __enter__(self) -> WebApi:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def _delegate(self) -> WebJavaScriptResultDelegate:
        if self.result_delegate is None:
            raise RuntimeError("The web API has been closed.")
        return self.result_delegate

    def add_message_to_conversation(self, options: AddMessageToConversationOptions) -> None:
        """Add a message to a conversation."""
        self._execute_function_with_json_argument("addMessageToConversation", options)

    def create_conversation(self) -> Future[None]:
        """Create a new conversation."""
        return self._execute_parse_json("createConversation", None)

    def add_agent_environment(
        self, agent_environment: AgentEnvironment
    ) -> Future[AgentEnvironmentHandle]:
        """Add (or find) an agent environment for the current user and return its handle."""
        return self._execute_parse_json(
            "addAgentEnvironment", AgentEnvironmentHandle, agent_environment
        )

    def set_agent_environment(self, agent_environment_id: AgentEnvironmentId) -> None:
        """Set the agent environment of the conversational UI."""
        self._execute_function_with_json_argument("setAgentEnvironment", agent_environment_id)

    def update_global_locale(self, locale: str) -> None:
        """Set the locale used by the web UI."""
        self.execute_function("updateGlobalLocale", f'"{locale}"')

    def format_function_call(
        self, function_name: str, arguments: str = "", handler_id: str = ""
    ) -> str:
        """Return the script that calls ``function_name`` and reports to ``handler_id``."""
        on_result, on_error = self.format_result_and_error_handlers(handler_id)
        return _format(
            self.FUNCTION_CALL_TEMPLATE,
            {
                "WebApiObjectName": self.WEB_API_OBJECT_NAME,
                "FunctionName": function_name,
                "Arguments": arguments,
                "NotifyHandlerOfResult": on_result,
                "NotifyHandlerOfError": on_error,
            },
        )

    def format_result_and_error_handlers(self, handler_id: str) -> Tuple[str, str]:
        """Return the result and error handler snippets, empty when there is no handler."""
        if not handler_id:
            return "", ""
        handler_format = self._delegate().format_javascript_handler(handler_id)
        return (
            _format(handler_format, {"0": "result", "1": "false"}),
            _format(handler_format, {"0": "error", "1": "true"}),
        )

    def execute_function(self, function_name: str, arguments: str = "") -> Future[Result]:
        """Call a web API function and return a future of its JSON result."""
        handler_id, future = self._delegate().register_result_handler_for_future()
        self.execute_async_function(function_name, arguments, handler_id)
        return future

    def execute_async_function(self, function_name: str, arguments: str, handler_id: str) -> None:
        """Run the script that calls a function and reports to ``handler_id``."""
        self.code_executor.execute(self.format_function_call(function_name, arguments, handler_id))

    def _execute_function_with_json_argument(
        self, function_name: str, argument: JsonSerializable
    ) -> Future[Result]:
        return self.execute_function(function_name, argument.to_json(False))

    def _execute_parse_json(
        self,
        function_name: str,
        result_type: Optional[Type[R]],
        argument: Optional[JsonSerializable] = None,
    ) -> Future[Any]:
        outcome: Future[Any] = Future()

        def complete(source: Future[Result]) -> None:
            result = source.result()
            if result.is_error:
                outcome.set_exception(WebApiError(result.json))
            elif result_type is None:
                outcome.set_result(None)
            else:
                try:
                    parsed = result_type().from_json(result.json)
                except (ValueError, TypeError):
                    outcome.set_exception(WebApiError("Failed to parse: " + result.json))
                else:
                    outcome.set_result(parsed)

        if argument is None:
            source = self.execute_function(function_name)
        else:
            source = self._execute_function_with_json_argument(function_name, argument)
        source.add_done_callback(complete)
        return outcome