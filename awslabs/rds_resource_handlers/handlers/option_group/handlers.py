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

"""Handlers for AWS::RDS::OptionGroup."""

from ...common.constants import MAX_OPTION_GROUP_NAME_LENGTH, SCRATCH_RESOURCE_ARN
from ...common.utils import generate_resource_identifier
from ...engine.backoff import Constant
from ...engine.chain import run_steps
from ...engine.error import DEFAULT_ERROR_RULE_SET
from ...engine.handler import Action, ResourceKind
from ...engine.progress import ErrorKind, ProgressEvent
from ...engine.request import ResourceHandlerRequest
from ...engine.session import HandlerConfig, HandlerSession
from ...engine.tagging import TagSet, add_extra_tags, create_with_tag_fallback, update_tags
from ..base import error_handler, read_tags, remember_arn
from . import translator
from .model import OptionConfiguration, OptionGroup
from typing import List, Optional


OPTION_GROUP_ERROR_RULE_SET = (
    DEFAULT_ERROR_RULE_SET.extend()
    .with_error_codes(ErrorKind.ALREADY_EXISTS, 'OptionGroupAlreadyExistsFault')
    .with_error_codes(ErrorKind.NOT_FOUND, 'OptionGroupNotFoundFault')
    .with_error_codes(ErrorKind.INVALID_REQUEST, 'OptionGroupQuotaExceededFault')
    .with_error_codes(ErrorKind.RETRYABLE, 'InvalidOptionGroupStateFault')
)

CREATE_OPTION_GROUP_ERROR_RULE_SET = OPTION_GROUP_ERROR_RULE_SET.extend().with_error_codes(
    ErrorKind.ACCESS_DENIED_CONTINUE, 'AccessDenied', 'AccessDeniedException'
)

DEFAULT_CONFIG = HandlerConfig(backoff=Constant(interval=5, timeout=30 * 60))


def _with_name(
    model: OptionGroup, request: ResourceHandlerRequest, previous: Optional[OptionGroup] = None
) -> OptionGroup:
    if model.option_group_name:
        return model
    if previous is not None and previous.option_group_name:
        name = previous.option_group_name
    else:
        name = generate_resource_identifier(
            request.stack_id,
            request.logical_resource_identifier,
            request.client_request_token,
            MAX_OPTION_GROUP_NAME_LENGTH,
        )
    return model.model_copy(update={'option_group_name': name})


def _create_group(
    session: HandlerSession, progress: ProgressEvent, tag_set: TagSet
) -> ProgressEvent:
    tags = tag_set.flatten()
    return (
        session.initiate(
            'rds::create-option-group', progress.resource_model, progress.callback_context
        )
        .translate(lambda m: translator.create_option_group_request(m, tags))
        .invoke(lambda client, request: client.create_option_group(**request))
        .handle_error(error_handler(CREATE_OPTION_GROUP_ERROR_RULE_SET))
        .done(lambda response, p: remember_arn(response['OptionGroup'].get('OptionGroupArn'), p))
        .progress()
    )


def _modify_options(
    session: HandlerSession,
    progress: ProgressEvent,
    to_include: List[OptionConfiguration],
    to_remove: List[str],
) -> ProgressEvent:
    if not to_include and not to_remove:
        return progress
    return (
        session.initiate(
            'rds::modify-option-group', progress.resource_model, progress.callback_context
        )
        .translate(
            lambda m: translator.modify_option_group_request(
                m.option_group_name, to_include, to_remove
            )
        )
        .invoke(lambda client, request: client.modify_option_group(**request))
        .handle_error(error_handler(OPTION_GROUP_ERROR_RULE_SET))
        .done(lambda response, p: remember_arn(response['OptionGroup'].get('OptionGroupArn'), p))
        .progress()
    )


def create_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Create the option group, add its options, then read it back."""
    model = _with_name(progress.resource_model, request)
    tag_set = request.desired_tag_set(model.tag_map())

    return run_steps(
        ProgressEvent.progress(model, progress.callback_context),
        [
            lambda p: create_with_tag_fallback(
                lambda attempt, tags: _create_group(session, attempt, tags), p, tag_set
            ),
            lambda p: _modify_options(session, p, model.option_configurations or [], []),
            lambda p: add_extra_tags(session, p, tag_set, OPTION_GROUP_ERROR_RULE_SET),
            lambda p: read_handler(session, request, p),
        ],
    )


def update_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Include new or changed options, remove dropped ones, then update tags."""
    previous = OptionGroup.from_state(request.previous_resource_state)
    desired = _with_name(progress.resource_model, request, previous)
    to_include, to_remove = translator.option_diff(
        previous.option_configurations if previous else None, desired.option_configurations
    )
    previous_tags = request.previous_tag_set(previous.tag_map() if previous else None)
    desired_tags = request.desired_tag_set(desired.tag_map())

    return run_steps(
        ProgressEvent.progress(desired, progress.callback_context),
        [
            lambda p: _describe_group(session, p, 'rds::describe-option-group-arn', True),
            lambda p: _modify_options(session, p, to_include, to_remove),
            lambda p: update_tags(
                session,
                p,
                p.callback_context.get(SCRATCH_RESOURCE_ARN),
                previous_tags,
                desired_tags,
                OPTION_GROUP_ERROR_RULE_SET,
            ),
            lambda p: read_handler(session, request, p),
        ],
    )


def delete_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Delete the option group. A group still in use is retried until the timeout."""
    model = progress.resource_model
    if model is None or not model.option_group_name:
        return ProgressEvent.failed(ErrorKind.NOT_FOUND, 'OptionGroupName is required')

    return (
        session.initiate(
            'rds::delete-option-group', progress.resource_model, progress.callback_context
        )
        .translate(translator.delete_option_group_request)
        .invoke(lambda client, request: client.delete_option_group(**request))
        .handle_error(error_handler(OPTION_GROUP_ERROR_RULE_SET))
        .progress()
        .then(lambda p: ProgressEvent.success())
    )


def _describe_group(
    session: HandlerSession, progress: ProgressEvent, step: str, arn_only: bool = False
):
    """Describe the group and remember its ARN, replacing the model unless arn_only."""
    model = progress.resource_model

    def done(response, p):
        group = response['OptionGroupsList'][0]
        if arn_only:
            return remember_arn(group.get('OptionGroupArn'), p)
        described = translator.translate_option_group_from_sdk(
            group, model.option_configurations
        )
        return remember_arn(
            group.get('OptionGroupArn'),
            ProgressEvent.progress(
                described.model_copy(update={'tags': model.tags}), p.callback_context
            ),
        )

    return (
        session.initiate(step, model, progress.callback_context)
        .translate(lambda m: translator.describe_option_groups_request(m.option_group_name))
        .invoke(lambda client, request: client.describe_option_groups(**request))
        .handle_error(error_handler(OPTION_GROUP_ERROR_RULE_SET))
        .done(done)
        .progress()
    )


def read_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Describe the option group and read its tags."""
    model = progress.resource_model
    if model is None or not model.option_group_name:
        return ProgressEvent.failed(ErrorKind.NOT_FOUND, 'OptionGroupName is required')

    return run_steps(
        progress,
        [
            lambda p: _describe_group(session, p, 'rds::read-option-group'),
            lambda p: read_tags(
                session, p, 'rds::list-tags-for-option-group', OPTION_GROUP_ERROR_RULE_SET
            ),
        ],
    )


def list_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """List option groups, leaving out the default groups RDS manages."""
    return (
        session.initiate('rds::describe-option-groups', None, progress.callback_context)
        .translate(
            lambda m: translator.list_option_groups_request(
                request.next_token, request.max_records
            )
        )
        .invoke(lambda client, req: client.describe_option_groups(**req))
        .handle_error(error_handler(OPTION_GROUP_ERROR_RULE_SET))
        .done(
            lambda response, p: ProgressEvent.success(
                models=[
                    translator.translate_option_group_from_sdk(group)
                    for group in response.get('OptionGroupsList', [])
                    if not translator.is_default_option_group(group)
                ],
                next_token=response.get('Marker'),
            )
        )
        .progress()
    )


OPTION_GROUP = ResourceKind(
    type_name='AWS::RDS::OptionGroup',
    model_class=OptionGroup,
    handlers={
        Action.CREATE: create_handler,
        Action.READ: read_handler,
        Action.UPDATE: update_handler,
        Action.DELETE: delete_handler,
        Action.LIST: list_handler,
    },
    config=DEFAULT_CONFIG,
)
