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

"""Handlers for AWS::RDS::DBCluster.

Create runs these steps, each resumable on its own:

1. create, restore from snapshot, or restore to a point in time, then wait for 'available'
2. after a restore, modify the attributes the restore call does not accept
3. associate each IAM role and wait for it to become ACTIVE
4. add stack and resource tags if the create fell back to system tags
5. read the cluster
"""

from ...common.constants import (
    MAX_DB_CLUSTER_IDENTIFIER_LENGTH,
    SCRATCH_MODIFIED,
    SCRATCH_RESOURCE_ARN,
)
from ...common.utils import generate_resource_identifier
from ...engine.backoff import Constant
from ...engine.chain import run_steps
from ...engine.error import DEFAULT_ERROR_RULE_SET
from ...engine.handler import Action, ResourceKind
from ...engine.progress import ErrorKind, ProgressEvent
from ...engine.request import ResourceHandlerRequest
from ...engine.session import HandlerConfig, HandlerSession
from ...engine.tagging import TagSet, add_extra_tags, create_with_tag_fallback, update_tags
from ..base import error_handler, none_if_not_found, remember_arn
from . import translator
from .model import DBCluster, DBClusterRole
from typing import Any, Dict, List, Optional


DB_CLUSTER_ERROR_RULE_SET = (
    DEFAULT_ERROR_RULE_SET.extend()
    .with_error_codes(ErrorKind.ALREADY_EXISTS, 'DBClusterAlreadyExistsFault')
    .with_error_codes(ErrorKind.NOT_FOUND, 'DBClusterNotFoundFault')
    .with_error_codes(
        ErrorKind.INVALID_REQUEST,
        'DBClusterSnapshotNotFoundFault',
        'DBClusterParameterGroupNotFound',
        'DBSubnetGroupNotFoundFault',
        'DBClusterQuotaExceededFault',
        'InsufficientStorageClusterCapacity',
        'InvalidSubnet',
        'InvalidVPCNetworkStateFault',
        'KMSKeyNotAccessibleFault',
        'StorageQuotaExceeded',
    )
    .with_error_codes(ErrorKind.RETRYABLE, 'InvalidDBClusterStateFault', 'InvalidDBInstanceState')
)

# tagging on create may be denied while creating is allowed
CREATE_DB_CLUSTER_ERROR_RULE_SET = DB_CLUSTER_ERROR_RULE_SET.extend().with_error_codes(
    ErrorKind.ACCESS_DENIED_CONTINUE, 'AccessDenied', 'AccessDeniedException'
)

DB_CLUSTER_ROLE_ERROR_RULE_SET = (
    DB_CLUSTER_ERROR_RULE_SET.extend()
    .with_error_codes(ErrorKind.ALREADY_EXISTS, 'DBClusterRoleAlreadyExists')
    .with_error_codes(ErrorKind.NOT_FOUND, 'DBClusterRoleNotFound')
    .with_error_codes(ErrorKind.INVALID_REQUEST, 'DBClusterRoleQuotaExceeded')
)

DB_CLUSTER_AVAILABLE = 'available'
ROLE_ACTIVE = 'ACTIVE'

DEFAULT_CONFIG = HandlerConfig(backoff=Constant(interval=30, timeout=180 * 60))


def describe_db_cluster(client: Any, cluster_id: str) -> Dict[str, Any]:
    response = client.describe_db_clusters(**translator.describe_db_clusters_request(cluster_id))
    return response['DBClusters'][0]


def is_available(cluster: Optional[Dict[str, Any]]) -> bool:
    return cluster is not None and cluster.get('Status') == DB_CLUSTER_AVAILABLE


def _role_status(cluster: Dict[str, Any], role_arn: str) -> Optional[str]:
    for role in cluster.get('AssociatedRoles', []):
        if role.get('RoleArn') == role_arn:
            return role.get('Status')
    return None


def _with_identifier(
    model: DBCluster, request: ResourceHandlerRequest, previous: Optional[DBCluster] = None
) -> DBCluster:
    if model.db_cluster_identifier:
        return model
    if previous is not None and previous.db_cluster_identifier:
        identifier = previous.db_cluster_identifier
    else:
        identifier = generate_resource_identifier(
            request.stack_id,
            request.logical_resource_identifier,
            request.client_request_token,
            MAX_DB_CLUSTER_IDENTIFIER_LENGTH,
        )
    return model.model_copy(update={'db_cluster_identifier': identifier})


def _create_db_cluster(
    session: HandlerSession, progress: ProgressEvent, tag_set: TagSet
) -> ProgressEvent:
    model = progress.resource_model
    tags = tag_set.flatten()
    if model.is_restore_from_snapshot():
        build = translator.restore_db_cluster_from_snapshot_request
        operation = 'restore_db_cluster_from_snapshot'
    elif model.is_restore_to_point_in_time():
        build = translator.restore_db_cluster_to_point_in_time_request
        operation = 'restore_db_cluster_to_point_in_time'
    else:
        build = translator.create_db_cluster_request
        operation = 'create_db_cluster'

    return (
        session.initiate('rds::create-db-cluster', model, progress.callback_context)
        .translate(lambda m: build(m, tags))
        .invoke(lambda client, request: getattr(client, operation)(**request))
        .handle_error(error_handler(CREATE_DB_CLUSTER_ERROR_RULE_SET))
        .done(lambda response, p: remember_arn(response['DBCluster'].get('DBClusterArn'), p))
        .stabilize(
            lambda client, m: describe_db_cluster(client, m.db_cluster_identifier), is_available
        )
        .progress()
    )


def _modify_after_restore(session: HandlerSession, progress: ProgressEvent) -> ProgressEvent:
    model = progress.resource_model
    context = progress.callback_context
    if context.get(SCRATCH_MODIFIED):
        return progress
    if not (model.is_restore_from_snapshot() or model.is_restore_to_point_in_time()):
        return progress
    if len(translator.modify_db_cluster_after_restore_request(model)) <= 2:
        # nothing beyond the identifier and ApplyImmediately
        return progress

    return (
        session.initiate('rds::modify-db-cluster-after-restore', model, context)
        .translate(translator.modify_db_cluster_after_restore_request)
        .invoke(lambda client, request: client.modify_db_cluster(**request))
        .handle_error(error_handler(DB_CLUSTER_ERROR_RULE_SET))
        .done(
            lambda response, p: ProgressEvent.progress(
                p.resource_model, p.callback_context.set(SCRATCH_MODIFIED, True)
            )
        )
        .stabilize(
            lambda client, m: describe_db_cluster(client, m.db_cluster_identifier), is_available
        )
        .progress()
    )


def _add_role(session: HandlerSession, progress: ProgressEvent, role: DBClusterRole):
    return (
        session.initiate(
            f'rds::add-role-to-db-cluster::{role.role_arn}',
            progress.resource_model,
            progress.callback_context,
        )
        .translate(lambda m: translator.db_cluster_role_request(m.db_cluster_identifier, role))
        .invoke(lambda client, request: client.add_role_to_db_cluster(**request))
        .handle_error(error_handler(DB_CLUSTER_ROLE_ERROR_RULE_SET, ErrorKind.ALREADY_EXISTS))
        .stabilize(
            lambda client, m: describe_db_cluster(client, m.db_cluster_identifier),
            lambda cluster: _role_status(cluster, role.role_arn) == ROLE_ACTIVE,
        )
        .progress()
    )


def _remove_role(session: HandlerSession, progress: ProgressEvent, role: DBClusterRole):
    return (
        session.initiate(
            f'rds::remove-role-from-db-cluster::{role.role_arn}',
            progress.resource_model,
            progress.callback_context,
        )
        .translate(lambda m: translator.db_cluster_role_request(m.db_cluster_identifier, role))
        .invoke(lambda client, request: client.remove_role_from_db_cluster(**request))
        .handle_error(error_handler(DB_CLUSTER_ROLE_ERROR_RULE_SET, ErrorKind.NOT_FOUND))
        .stabilize(
            lambda client, m: describe_db_cluster(client, m.db_cluster_identifier),
            lambda cluster: _role_status(cluster, role.role_arn) is None,
        )
        .progress()
    )


def _add_roles(
    session: HandlerSession, progress: ProgressEvent, roles: Optional[List[DBClusterRole]]
) -> ProgressEvent:
    return run_steps(
        progress, [lambda p, role=role: _add_role(session, p, role) for role in roles or []]
    )


def _remove_roles(
    session: HandlerSession, progress: ProgressEvent, roles: List[DBClusterRole]
) -> ProgressEvent:
    return run_steps(
        progress, [lambda p, role=role: _remove_role(session, p, role) for role in roles]
    )


def create_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Create or restore a DB cluster."""
    model = _with_identifier(progress.resource_model, request)
    tag_set = request.desired_tag_set(model.tag_map())

    return run_steps(
        ProgressEvent.progress(model, progress.callback_context),
        [
            lambda p: create_with_tag_fallback(
                lambda attempt, tags: _create_db_cluster(session, attempt, tags), p, tag_set
            ),
            lambda p: _modify_after_restore(session, p),
            lambda p: _add_roles(session, p, p.resource_model.associated_roles),
            lambda p: add_extra_tags(session, p, tag_set, DB_CLUSTER_ERROR_RULE_SET),
            lambda p: read_handler(session, request, p),
        ],
    )


def update_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Modify attributes, roles and tags of a DB cluster."""
    previous = DBCluster.from_state(request.previous_resource_state)
    desired = _with_identifier(progress.resource_model, request, previous)
    roles_to_remove, roles_to_add = translator.role_diff(
        previous.associated_roles if previous else None, desired.associated_roles
    )
    previous_tags = request.previous_tag_set(previous.tag_map() if previous else None)
    desired_tags = request.desired_tag_set(desired.tag_map())

    def modify(p: ProgressEvent) -> ProgressEvent:
        return (
            session.initiate('rds::modify-db-cluster', p.resource_model, p.callback_context)
            .translate(lambda m: translator.modify_db_cluster_request(previous, m))
            .invoke(lambda client, req: client.modify_db_cluster(**req))
            .handle_error(error_handler(DB_CLUSTER_ERROR_RULE_SET))
            .done(lambda response, q: remember_arn(response['DBCluster'].get('DBClusterArn'), q))
            .stabilize(
                lambda client, m: describe_db_cluster(client, m.db_cluster_identifier),
                is_available,
            )
            .progress()
        )

    return run_steps(
        ProgressEvent.progress(desired, progress.callback_context),
        [
            modify,
            lambda p: _remove_roles(session, p, roles_to_remove),
            lambda p: _add_roles(session, p, roles_to_add),
            lambda p: update_tags(
                session,
                p,
                p.callback_context.get(SCRATCH_RESOURCE_ARN),
                previous_tags,
                desired_tags,
                DB_CLUSTER_ERROR_RULE_SET,
            ),
            lambda p: read_handler(session, request, p),
        ],
    )


def delete_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Delete a DB cluster, taking a final snapshot when requested, and wait until it is gone."""
    model = progress.resource_model
    if model is None or not model.db_cluster_identifier:
        return ProgressEvent.failed(ErrorKind.NOT_FOUND, 'DBClusterIdentifier is required')

    final_snapshot_identifier = None
    if request.snapshot_requested:
        final_snapshot_identifier = generate_resource_identifier(
            request.stack_id,
            f'{model.db_cluster_identifier}-final-snapshot',
            request.client_request_token,
            255,
        )

    return (
        session.initiate('rds::delete-db-cluster', model, progress.callback_context)
        .translate(lambda m: translator.delete_db_cluster_request(m, final_snapshot_identifier))
        .invoke(lambda client, req: client.delete_db_cluster(**req))
        .handle_error(error_handler(DB_CLUSTER_ERROR_RULE_SET))
        .stabilize(
            lambda client, m: none_if_not_found(
                lambda: describe_db_cluster(client, m.db_cluster_identifier),
                DB_CLUSTER_ERROR_RULE_SET,
            ),
            lambda cluster: cluster is None,
        )
        .progress()
        .then(lambda p: ProgressEvent.success())
    )


def read_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """Describe a DB cluster into a resource model."""
    model = progress.resource_model
    if model is None or not model.db_cluster_identifier:
        return ProgressEvent.failed(ErrorKind.NOT_FOUND, 'DBClusterIdentifier is required')

    return (
        session.initiate('rds::describe-db-cluster', model, progress.callback_context)
        .translate(lambda m: translator.describe_db_clusters_request(m.db_cluster_identifier))
        .invoke(lambda client, req: client.describe_db_clusters(**req))
        .handle_error(error_handler(DB_CLUSTER_ERROR_RULE_SET))
        .done(
            lambda response, p: ProgressEvent.progress(
                translator.translate_db_cluster_from_sdk(response['DBClusters'][0]),
                p.callback_context,
            )
        )
        .progress()
    )


def list_handler(
    session: HandlerSession, request: ResourceHandlerRequest, progress: ProgressEvent
) -> ProgressEvent:
    """List DB clusters one page at a time."""
    return (
        session.initiate('rds::describe-db-clusters', None, progress.callback_context)
        .translate(
            lambda m: translator.list_db_clusters_request(
                request.next_token, request.max_records
            )
        )
        .invoke(lambda client, req: client.describe_db_clusters(**req))
        .handle_error(error_handler(DB_CLUSTER_ERROR_RULE_SET))
        .done(
            lambda response, p: ProgressEvent.success(
                models=[
                    translator.translate_db_cluster_from_sdk(cluster)
                    for cluster in response.get('DBClusters', [])
                ],
                next_token=response.get('Marker'),
            )
        )
        .progress()
    )


DB_CLUSTER = ResourceKind(
    type_name='AWS::RDS::DBCluster',
    model_class=DBCluster,
    handlers={
        Action.CREATE: create_handler,
        Action.READ: read_handler,
        Action.UPDATE: update_handler,
        Action.DELETE: delete_handler,
        Action.LIST: list_handler,
    },
    config=DEFAULT_CONFIG,
)
