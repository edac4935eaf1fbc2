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

"""Handlers for AWS::RDS::DBClusterParameterGroup."""

from ...common.constants import MAX_PARAMETER_GROUP_NAME_LENGTH, SCRATCH_RESOURCE_ARN
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
from ..parameters import apply_parameters, diff_parameters, reset_parameters
from . import translator
from .model import DBClusterParameterGroup
from typing import Optional


DB_CLUSTER_PARAMETER_GROUP_ERROR_RULE_SET = (
    DEFAULT_ERROR_RULE_SET.extend()
    .with_error_codes(ErrorKind.ALREADY_EXISTS, 'DBParameterGroupAlreadyExists')
    .with_error_codes(
        ErrorKind.NOT_FOUND, 'DBParameterGroupNotFound', 'DBClusterParameterGroupNotFound'
    )
    .with_error_codes(ErrorKind.INVALID_REQUEST, 'DBParameterGroupQuotaExceeded')
    .with_error_codes(ErrorKind.RETRYABLE, 'InvalidDBParameterGroupState')
)

CREATE_DB_CLUSTER_PARAMETER_GROUP_ERROR_RULE_SET = (
    DB_CLUSTER_PARAMETER_GROUP_ERROR_RULE_SET.extend().with_error_codes(
        ErrorKind.ACCESS_DENIED_CONTINUE, 'AccessDenied', 'AccessDeniedException'
    )
)

DEFAULT_CONFIG = HandlerConfig(backoff=Constant(interval=5, timeout=15 * 60))

API = translator.DB_CLUSTER_PARAMETER_API
RULE_SET = DB_CLUSTER_PARAMETER_GROUP_ERROR_RULE_SET


def _with_name(
    model: DBClusterParameterGroup,
    request: ResourceHandlerRequest,
    previous: Optional[DBClusterParameterGroup] = None,
) -> DBClusterParameterGroup:
    if model.db_cluster_parameter_group_name:
        return model
    if previous is not None and previous.db_cluster_parameter_group_name:
        name = previous.db_cluster_parameter_group_name
    else:
        name = generate_resource_identifier(
            request.stack_id,
            request.logical_resource_identifier,
            request.client_request_token,
            MAX_PARAMETER_GROUP_NAME_LENGTH,
        )
    return model.model_copy(update={'db_cluster_parameter_group_name': name})


def _create_group(
    session: HandlerSession, progress: ProgressEvent, tag_set: TagSet
) -> ProgressEvent:
    tags = tag_set.flatten()
    return (
        session.initiate(
            'rds::create-db-cluster-parameter-group',
            progress.resource_model,
            progress.callback_context,
        )
        .translate(lambda m: translator.create_db_cluster_parameter_group_request(m, tags))
        .invoke(lambda client, request: client.create_db_cluster_parameter_group(**request))
        .handle_error(error_handler(CREATE_DB_CLUSTER_PARAMETER_GROUP_ERROR_RULE_SET))
        .done(
            lambda response, p: remember_arn(
                response['DBClusterParameterGroup'].get('DBClusterParameterGroupArn'), p
            )
        )
        .progress()
    )


def _describe_group(session: HandlerSession, progress: ProgressEvent, step: str):
    model = progress.resource_model

    def done(response, p):
        group = response['DBClusterParameterGroups'][0]
        described = translator.translate_db_cluster_parameter_group_from_sdk(
            group, model.parameters
        )
        return remember_arn(
            group.get('DBClusterParameterGroupArn'),
            ProgressEvent.progress(
                described.model_copy(update={'tags': model.tags}), p.callback_context
            ),
        )

    return (
        session.initiate(step, model, progress.callback_context)
        .translate(
            lambda m: translator.describe_db_cluster_parameter_groups_request(
                m.db_cluster_parameter_group_name
            )
        )
        .invoke(lambda client, request: client.describe_db_cluster_parameter_groups(**request))
        .handle_error(error_handler(RULE_SET))
        .done(done)
        .progress()
    )


def create_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Create the group, set its parameters, then read it back."""
    model = _with_name(progress.resource_model, request)
    tag_set = request.desired_tag_set(model.tag_map())

    return run_steps(
        ProgressEvent.progress(model, progress.callback_context),
        [
            lambda p: create_with_tag_fallback(
                lambda attempt, tags: _create_group(session, attempt, tags), p, tag_set
            ),
            lambda p: apply_parameters(
                session,
                p,
                API,
                p.resource_model.db_cluster_parameter_group_name,
                p.resource_model.parameters,
                RULE_SET,
            ),
            lambda p: add_extra_tags(session, p, tag_set, RULE_SET),
            lambda p: read_handler(session, request, p),
        ],
    )


def update_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Reset removed parameters, apply changed ones, then update tags."""
    previous = DBClusterParameterGroup.from_state(request.previous_resource_state)
    desired = _with_name(progress.resource_model, request, previous)
    to_reset, to_apply = diff_parameters(
        previous.parameters if previous else None, desired.parameters
    )
    family = desired.family or (previous.family if previous else None)
    previous_tags = request.previous_tag_set(previous.tag_map() if previous else None)
    desired_tags = request.desired_tag_set(desired.tag_map())
    group_name = desired.db_cluster_parameter_group_name

    return run_steps(
        ProgressEvent.progress(desired, progress.callback_context),
        [
            lambda p: _describe_group(session, p, 'rds::describe-db-cluster-parameter-group-arn'),
            lambda p: reset_parameters(session, p, API, group_name, family, to_reset, RULE_SET),
            lambda p: apply_parameters(session, p, API, group_name, to_apply, RULE_SET),
            lambda p: update_tags(
                session,
                p,
                p.callback_context.get(SCRATCH_RESOURCE_ARN),
                previous_tags,
                desired_tags,
                RULE_SET,
            ),
            lambda p: read_handler(session, request, p),
        ],
    )


def delete_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Delete the group. A group still in use is retried until the timeout."""
    model = progress.resource_model
    if model is None or not model.db_cluster_parameter_group_name:
        return ProgressEvent.failed(
            ErrorKind.NOT_FOUND, 'DBClusterParameterGroupName is required'
        )

    return (
        session.initiate(
            'rds::delete-db-cluster-parameter-group',
            progress.resource_model,
            progress.callback_context,
        )
        .translate(translator.delete_db_cluster_parameter_group_request)
        .invoke(lambda client, request: client.delete_db_cluster_parameter_group(**request))
        .handle_error(error_handler(RULE_SET))
        .progress()
        .then(lambda p: ProgressEvent.success())
    )


def read_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    model = progress.resource_model
    if model is None or not model.db_cluster_parameter_group_name:
        return ProgressEvent.failed(
            ErrorKind.NOT_FOUND, 'DBClusterParameterGroupName is required'
        )

    return run_steps(
        progress,
        [
            lambda p: _describe_group(session, p, 'rds::read-db-cluster-parameter-group'),
            lambda p: read_tags(
                session, p, 'rds::list-tags-for-db-cluster-parameter-group', RULE_SET
            ),
        ],
    )


def list_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    return (
        session.initiate(
            'rds::describe-db-cluster-parameter-groups', None, progress.callback_context
        )
        .translate(
            lambda m: translator.list_db_cluster_parameter_groups_request(
                request.next_token, request.max_records
            )
        )
        .invoke(lambda client, req: client.describe_db_cluster_parameter_groups(**req))
        .handle_error(error_handler(RULE_SET))
        .done(
            lambda response, p: ProgressEvent.success(
                models=[
                    translator.translate_db_cluster_parameter_group_from_sdk(group)
                    for group in response.get('DBClusterParameterGroups', [])
                ],
                next_token=response.get('Marker'),
            )
        )
        .progress()
    )


DB_CLUSTER_PARAMETER_GROUP = ResourceKind(
    type_name='AWS::RDS::DBClusterParameterGroup',
    model_class=DBClusterParameterGroup,
    handlers={
        Action.CREATE: create_handler,
        Action.READ: read_handler,
        Action.UPDATE: update_handler,
        Action.DELETE: delete_handler,
        Action.LIST: list_handler,
    },
    config=DEFAULT_CONFIG,
)
