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

"""AWS::RDS::DBClusterEndpoint resource model."""

from ..base import ResourceModel
from pydantic import Field
from typing import List, Optional


class DBClusterEndpoint(ResourceModel):
    """A custom endpoint of an Aurora DB cluster."""

    db_cluster_identifier: Optional[str] = Field(default=None, alias='DBClusterIdentifier')
    db_cluster_endpoint_identifier: Optional[str] = Field(
        default=None, alias='DBClusterEndpointIdentifier'
    )
    endpoint_type: Optional[str] = Field(default=None, alias='EndpointType')
    static_members: Optional[List[str]] = Field(default=None, alias='StaticMembers')
    excluded_members: Optional[List[str]] = Field(default=None, alias='ExcludedMembers')
    endpoint: Optional[str] = Field(default=None, alias='Endpoint')
    db_cluster_endpoint_arn: Optional[str] = Field(default=None, alias='DBClusterEndpointArn')
