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

"""Request builders and response readers for DB parameter groups."""

from ...engine.tagging import to_sdk_tags
from ..parameters import ParameterApi
from .model import DBParameterGroup
from typing import Any, Dict, Mapping, Optional


DB_PARAMETER_API = ParameterApi(
    resource='db-parameter-group',
    name_key='DBParameterGroupName',
    describe_paginator='describe_db_parameters',
    defaults_paginator='describe_engine_default_parameters',
    defaults_result_key='EngineDefaults.Parameters',
    defaults_by_family=True,
    modify_operation='modify_db_parameter_group',
    reset_operation='reset_db_parameter_group',
)


def create_db_parameter_group_request(
    model: DBParameterGroup, tags: Mapping[str, str]
) -> Dict[str, Any]:
    return {
        'DBParameterGroupName': model.db_parameter_group_name,
        'DBParameterGroupFamily': model.family,
        'Description': model.description,
        'Tags': to_sdk_tags(tags),
    }


def describe_db_parameter_groups_request(group_name: str) -> Dict[str, Any]:
    return {'DBParameterGroupName': group_name}


def delete_db_parameter_group_request(model: DBParameterGroup) -> Dict[str, Any]:
    return {'DBParameterGroupName': model.db_parameter_group_name}


def list_db_parameter_groups_request(
    next_token: Optional[str], max_records: Optional[int] = None
) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if next_token:
        params['Marker'] = next_token
    if max_records:
        params['MaxRecords'] = max_records
    return params


def translate_db_parameter_group_from_sdk(
    group: Dict[str, Any], parameters: Optional[Dict[str, Any]] = None
) -> DBParameterGroup:
    """Build the resource model from a describe_db_parameter_groups entry.

    The API does not say which parameters were set by the user, so the caller passes the
    declared parameters through.
    """
    return DBParameterGroup(
        db_parameter_group_name=group.get('DBParameterGroupName'),
        description=group.get('Description'),
        family=group.get('DBParameterGroupFamily'),
        parameters=parameters,
    )
