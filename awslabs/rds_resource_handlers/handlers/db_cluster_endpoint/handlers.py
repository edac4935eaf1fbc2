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

"""Handlers for AWS::RDS::DBClusterEndpoint."""

from ...common.constants import MAX_ENDPOINT_IDENTIFIER_LENGTH, SCRATCH_RESOURCE_ARN
from ...common.utils import generate_resource_identifier
from ...engine.backoff import Constant
from ...engine.chain import run_steps
from ...engine.error import DEFAULT_ERROR_RULE_SET
from ...engine.handler import Action, ResourceKind
from ...engine.progress import ErrorKind, ProgressEvent
from ...engine.request import ResourceHandlerRequest
from ...engine.session import HandlerConfig, HandlerSession
from ...engine.tagging import TagSet, add_extra_tags, create_with_tag_fallback, update_tags
from ..base import error_handler, none_if_not_found, read_tags, remember_arn
from . import translator
from .model import DBClusterEndpoint
from typing import Any, Dict, Optional


DB_CLUSTER_ENDPOINT_ERROR_RULE_SET = (
    DEFAULT_ERROR_RULE_SET.extend()
    .with_error_codes(ErrorKind.ALREADY_EXISTS, 'DBClusterEndpointAlreadyExistsFault')
    .with_error_codes(
        ErrorKind.NOT_FOUND, 'DBClusterEndpointNotFoundFault', 'DBClusterNotFoundFault'
    )
    .with_error_codes(
        ErrorKind.INVALID_REQUEST, 'DBClusterEndpointQuotaExceededFault', 'DBInstanceNotFound'
    )
    .with_error_codes(
        ErrorKind.RETRYABLE,
        'InvalidDBClusterStateFault',
        'InvalidDBClusterEndpointStateFault',
        'InvalidDBInstanceState',
    )
)

CREATE_DB_CLUSTER_ENDPOINT_ERROR_RULE_SET = (
    DB_CLUSTER_ENDPOINT_ERROR_RULE_SET.extend().with_error_codes(
        ErrorKind.ACCESS_DENIED_CONTINUE, 'AccessDenied', 'AccessDeniedException'
    )
)

ENDPOINT_AVAILABLE = 'available'

DEFAULT_CONFIG = HandlerConfig(backoff=Constant(interval=10, timeout=60 * 60))


def describe_db_cluster_endpoint(client: Any, endpoint_id: str) -> Dict[str, Any]:
    response = client.describe_db_cluster_endpoints(
        **translator.describe_db_cluster_endpoints_request(endpoint_id)
    )
    endpoints = response.get('DBClusterEndpoints', [])
    if not endpoints:
        # describe_db_cluster_endpoints returns an empty list instead of raising
        raise LookupError(f'DB cluster endpoint {endpoint_id} not found')
    return endpoints[0]


def _read_endpoint(client: Any, model: DBClusterEndpoint) -> Optional[Dict[str, Any]]:
    try:
        return describe_db_cluster_endpoint(client, model.db_cluster_endpoint_identifier)
    except LookupError:
        return None


def is_available(endpoint: Optional[Dict[str, Any]]) -> bool:
    return endpoint is not None and endpoint.get('Status') == ENDPOINT_AVAILABLE


def _with_identifier(
    model: DBClusterEndpoint,
    request: ResourceHandlerRequest,
    previous: Optional[DBClusterEndpoint] = None,
) -> DBClusterEndpoint:
    if model.db_cluster_endpoint_identifier:
        return model
    if previous is not None and previous.db_cluster_endpoint_identifier:
        identifier = previous.db_cluster_endpoint_identifier
    else:
        identifier = generate_resource_identifier(
            request.stack_id,
            request.logical_resource_identifier,
            request.client_request_token,
            MAX_ENDPOINT_IDENTIFIER_LENGTH,
        )
    return model.model_copy(update={'db_cluster_endpoint_identifier': identifier})


def _create_endpoint(
    session: HandlerSession, progress: ProgressEvent, tag_set: TagSet
) -> ProgressEvent:
    tags = tag_set.flatten()
    return (
        session.initiate(
            'rds::create-db-cluster-endpoint', progress.resource_model, progress.callback_context
        )
        .translate(lambda m: translator.create_db_cluster_endpoint_request(m, tags))
        .invoke(lambda client, request: client.create_db_cluster_endpoint(**request))
        .handle_error(error_handler(CREATE_DB_CLUSTER_ENDPOINT_ERROR_RULE_SET))
        .done(lambda response, p: remember_arn(response.get('DBClusterEndpointArn'), p))
        .stabilize(_read_endpoint, is_available)
        .progress()
    )


def create_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Create a custom cluster endpoint and wait for it to become available."""
    model = _with_identifier(progress.resource_model, request)
    tag_set = request.desired_tag_set(model.tag_map())

    return run_steps(
        ProgressEvent.progress(model, progress.callback_context),
        [
            lambda p: create_with_tag_fallback(
                lambda attempt, tags: _create_endpoint(session, attempt, tags), p, tag_set
            ),
            lambda p: add_extra_tags(session, p, tag_set, DB_CLUSTER_ENDPOINT_ERROR_RULE_SET),
            lambda p: read_handler(session, request, p),
        ],
    )


def update_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Change the endpoint type or members, then the tags."""
    previous = DBClusterEndpoint.from_state(request.previous_resource_state)
    desired = _with_identifier(progress.resource_model, request, previous)
    previous_tags = request.previous_tag_set(previous.tag_map() if previous else None)
    desired_tags = request.desired_tag_set(desired.tag_map())

    def modify(p: ProgressEvent) -> ProgressEvent:
        return (
            session.initiate(
                'rds::modify-db-cluster-endpoint', p.resource_model, p.callback_context
            )
            .translate(translator.modify_db_cluster_endpoint_request)
            .invoke(lambda client, req: client.modify_db_cluster_endpoint(**req))
            .handle_error(error_handler(DB_CLUSTER_ENDPOINT_ERROR_RULE_SET))
            .done(lambda response, q: remember_arn(response.get('DBClusterEndpointArn'), q))
            .stabilize(_read_endpoint, is_available)
            .progress()
        )

    return run_steps(
        ProgressEvent.progress(desired, progress.callback_context),
        [
            modify,
            lambda p: update_tags(
                session,
                p,
                p.callback_context.get(SCRATCH_RESOURCE_ARN),
                previous_tags,
                desired_tags,
                DB_CLUSTER_ENDPOINT_ERROR_RULE_SET,
            ),
            lambda p: read_handler(session, request, p),
        ],
    )


def delete_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Delete the endpoint and wait until it is gone."""
    model = progress.resource_model
    if model is None or not model.db_cluster_endpoint_identifier:
        return ProgressEvent.failed(
            ErrorKind.NOT_FOUND, 'DBClusterEndpointIdentifier is required'
        )

    return (
        session.initiate(
            'rds::delete-db-cluster-endpoint', progress.resource_model, progress.callback_context
        )
        .translate(translator.delete_db_cluster_endpoint_request)
        .invoke(lambda client, req: client.delete_db_cluster_endpoint(**req))
        .handle_error(error_handler(DB_CLUSTER_ENDPOINT_ERROR_RULE_SET))
        .stabilize(
            lambda client, m: none_if_not_found(
                lambda: _read_endpoint(client, m), DB_CLUSTER_ENDPOINT_ERROR_RULE_SET
            ),
            lambda endpoint: endpoint is None,
        )
        .progress()
        .then(lambda p: ProgressEvent.success())
    )


def read_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Describe the endpoint and read its tags."""
    model = progress.resource_model
    if model is None or not model.db_cluster_endpoint_identifier:
        return ProgressEvent.failed(
            ErrorKind.NOT_FOUND, 'DBClusterEndpointIdentifier is required'
        )

    def done(response, p):
        endpoints = response.get('DBClusterEndpoints', [])
        if not endpoints:
            return ProgressEvent.failed(
                ErrorKind.NOT_FOUND,
                f'DB cluster endpoint {model.db_cluster_endpoint_identifier} not found',
            )
        endpoint = translator.translate_db_cluster_endpoint_from_sdk(endpoints[0])
        return remember_arn(
            endpoint.db_cluster_endpoint_arn,
            ProgressEvent.progress(endpoint, p.callback_context),
        )

    return run_steps(
        progress,
        [
            lambda p: session.initiate(
                'rds::describe-db-cluster-endpoint', model, p.callback_context
            )
            .translate(
                lambda m: translator.describe_db_cluster_endpoints_request(
                    m.db_cluster_endpoint_identifier
                )
            )
            .invoke(lambda client, req: client.describe_db_cluster_endpoints(**req))
            .handle_error(error_handler(DB_CLUSTER_ENDPOINT_ERROR_RULE_SET))
            .done(done)
            .progress(),
            lambda p: read_tags(
                session,
                p,
                'rds::list-tags-for-db-cluster-endpoint',
                DB_CLUSTER_ENDPOINT_ERROR_RULE_SET,
            ),
        ],
    )


def list_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """List custom cluster endpoints one page at a time."""
    return (
        session.initiate('rds::describe-db-cluster-endpoints', None, progress.callback_context)
        .translate(
            lambda m: translator.list_db_cluster_endpoints_request(
                request.next_token, request.max_records
            )
        )
        .invoke(lambda client, req: client.describe_db_cluster_endpoints(**req))
        .handle_error(error_handler(DB_CLUSTER_ENDPOINT_ERROR_RULE_SET))
        .done(
            lambda response, p: ProgressEvent.success(
                models=[
                    translator.translate_db_cluster_endpoint_from_sdk(endpoint)
                    for endpoint in response.get('DBClusterEndpoints', [])
                    if translator.is_custom(endpoint)
                ],
                next_token=response.get('Marker'),
            )
        )
        .progress()
    )


DB_CLUSTER_ENDPOINT = ResourceKind(
    type_name='AWS::RDS::DBClusterEndpoint',
    model_class=DBClusterEndpoint,
    handlers={
        Action.CREATE: create_handler,
        Action.READ: read_handler,
        Action.UPDATE: update_handler,
        Action.DELETE: delete_handler,
        Action.LIST: list_handler,
    },
    config=DEFAULT_CONFIG,
)
