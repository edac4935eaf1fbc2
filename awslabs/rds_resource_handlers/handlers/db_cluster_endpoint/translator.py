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

"""Request builders and response readers for DB cluster endpoints."""

from ...engine.tagging import to_sdk_tags
from .model import DBClusterEndpoint
from typing import Any, Dict, Mapping, Optional


CUSTOM_ENDPOINT_TYPE = 'CUSTOM'


def _compact(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


def create_db_cluster_endpoint_request(
    model: DBClusterEndpoint, tags: Mapping[str, str]
) -> Dict[str, Any]:
    return _compact(
        {
            'DBClusterIdentifier': model.db_cluster_identifier,
            'DBClusterEndpointIdentifier': model.db_cluster_endpoint_identifier,
            'EndpointType': model.endpoint_type,
            'StaticMembers': model.static_members,
            'ExcludedMembers': model.excluded_members,
            'Tags': to_sdk_tags(tags),
        }
    )


def modify_db_cluster_endpoint_request(model: DBClusterEndpoint) -> Dict[str, Any]:
    # empty lists clear the member lists
    return {
        'DBClusterEndpointIdentifier': model.db_cluster_endpoint_identifier,
        'EndpointType': model.endpoint_type,
        'StaticMembers': model.static_members or [],
        'ExcludedMembers': model.excluded_members or [],
    }


def delete_db_cluster_endpoint_request(model: DBClusterEndpoint) -> Dict[str, Any]:
    return {'DBClusterEndpointIdentifier': model.db_cluster_endpoint_identifier}


def describe_db_cluster_endpoints_request(endpoint_id: str) -> Dict[str, Any]:
    return {'DBClusterEndpointIdentifier': endpoint_id}


def list_db_cluster_endpoints_request(
    next_token: Optional[str], max_records: Optional[int] = None
) -> Dict[str, Any]:
    return _compact({'Marker': next_token, 'MaxRecords': max_records})


def is_custom(endpoint: Dict[str, Any]) -> bool:
    return endpoint.get('EndpointType') == CUSTOM_ENDPOINT_TYPE


def translate_db_cluster_endpoint_from_sdk(endpoint: Dict[str, Any]) -> DBClusterEndpoint:
    """Build the resource model from a describe_db_cluster_endpoints entry.

    The API reports the user-facing endpoint type (READER, WRITER or ANY) as
    CustomEndpointType; EndpointType is always CUSTOM for these endpoints.
    """
    return DBClusterEndpoint(
        db_cluster_identifier=endpoint.get('DBClusterIdentifier'),
        db_cluster_endpoint_identifier=endpoint.get('DBClusterEndpointIdentifier'),
        endpoint_type=endpoint.get('CustomEndpointType'),
        static_members=endpoint.get('StaticMembers') or None,
        excluded_members=endpoint.get('ExcludedMembers') or None,
        endpoint=endpoint.get('Endpoint'),
        db_cluster_endpoint_arn=endpoint.get('DBClusterEndpointArn'),
    )
