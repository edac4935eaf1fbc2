# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Resumable invocation entry point.

An operation moves through NotStarted, Running(step), Suspended(step, delay), back to
Running(step) and so on, until it ends in Success or Failed. Each call to ``invoke`` runs
the operation from the step recorded in the resume context until it finishes or has to
wait.
"""

from .backoff import Constant
from .progress import ErrorKind, OperationStatus, ProgressEvent, ResumeContext
from .request import ResourceHandlerRequest
from .session import HandlerConfig, HandlerSession
from dataclasses import dataclass, field
from enum import Enum
from loguru import logger
from pydantic import BaseModel, ValidationError
from typing import Any, Callable, Mapping, Optional, Type


class Action(str, Enum):
    """Lifecycle actions a resource kind can handle."""

    CREATE = 'CREATE'
    READ = 'READ'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'
    LIST = 'LIST'


# handler(session, request, progress) -> event; progress carries the parsed desired model
ActionHandler = Callable[[HandlerSession, ResourceHandlerRequest, ProgressEvent], ProgressEvent]

# used for kinds registered without a config of their own
DEFAULT_HANDLER_CONFIG = HandlerConfig(backoff=Constant(interval=5, timeout=60 * 60))


@dataclass(frozen=True)
class ResourceKind:
    """A resource type and the handlers implementing its actions.

    Attributes:
        type_name: CloudFormation type name, e.g. 'AWS::RDS::DBCluster'
        model_class: Pydantic model of the resource properties
        handlers: Handler per supported action
        config: Default backoff and clock for the kind
    """

    type_name: str
    model_class: Type[BaseModel]
    handlers: Mapping[Action, ActionHandler] = field(default_factory=dict)
    config: Optional[HandlerConfig] = None

    def supports(self, action: Action) -> bool:
        return action in self.handlers

    def parse_model(self, state: Optional[Mapping[str, Any]]) -> Optional[BaseModel]:
        if state is None:
            return None
        return self.model_class.model_validate(state)


def invoke(
    kind: ResourceKind,
    action: Action,
    request: ResourceHandlerRequest,
    context: Optional[ResumeContext],
    client: Any,
    config: Optional[HandlerConfig] = None,
) -> ProgressEvent:
    """Run one invocation of an operation.

    Args:
        kind: The resource kind
        action: The lifecycle action
        request: The operation request, identical across invocations of one operation
        context: The context returned by the previous invocation, None for the first one
        client: boto3 RDS client
        config: Overrides the kind's default configuration

    Returns:
        A SUSPENDED, SUCCESS or FAILED event. Never raises.
    """
    session = HandlerSession(client, config or kind.config or DEFAULT_HANDLER_CONFIG)
    context = (context or ResumeContext()).tick(session.now())

    handler = kind.handlers.get(action)
    if handler is None:
        message = f'{kind.type_name} does not support {action.value}'
        logger.error(message)
        return ProgressEvent.failed(ErrorKind.INVALID_REQUEST, message)

    try:
        model = kind.parse_model(request.desired_resource_state)
    except ValidationError as error:
        logger.error(f'Invalid {kind.type_name} model: {error}')
        return ProgressEvent.failed(ErrorKind.INVALID_REQUEST, str(error))

    logger.info(
        f'{action.value} {kind.type_name}: step={context.step} retries={context.retry_count} '
        f'elapsed={context.elapsed_seconds:.0f}s'
    )
    try:
        event = handler(session, request, ProgressEvent.progress(model, context))
    except Exception as error:
        logger.exception(f'{action.value} {kind.type_name} failed with unexpected error: {error}')
        return ProgressEvent.failed(ErrorKind.FATAL, str(error) or type(error).__name__)

    return _finalize(kind, action, event)


def _finalize(kind: ResourceKind, action: Action, event: ProgressEvent) -> ProgressEvent:
    if event.status == OperationStatus.IN_PROGRESS:
        event = ProgressEvent.success(model=event.resource_model)
    elif (
        event.status == OperationStatus.FAILED
        and event.error_kind == ErrorKind.ACCESS_DENIED_CONTINUE
    ):
        event = ProgressEvent.failed(ErrorKind.UNAUTHORIZED, event.message or 'Access denied')

    if event.status == OperationStatus.SUCCESS:
        logger.success(f'{action.value} {kind.type_name} succeeded')
    elif event.status == OperationStatus.SUSPENDED:
        logger.info(
            f'{action.value} {kind.type_name} suspended at {event.callback_context.step}, '
            f'resume in {event.callback_delay_seconds}s'
        )
    else:
        logger.error(
            f'{action.value} {kind.type_name} failed ({event.error_kind.value}): {event.message}'
        )
    return event
