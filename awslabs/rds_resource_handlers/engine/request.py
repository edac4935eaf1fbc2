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

"""Operation request handed to every handler invocation."""

from .tagging import TagSet
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Mapping, Optional


class ResourceHandlerRequest(BaseModel):
    """Desired and previous state of a resource plus the tags of every tier.

    The same request is passed to every invocation of one operation.
    """

    model_config = ConfigDict(frozen=True)

    desired_resource_state: Optional[Dict[str, Any]] = Field(
        default=None, description='Desired resource model properties'
    )
    previous_resource_state: Optional[Dict[str, Any]] = Field(
        default=None, description='Resource model properties before the update, absent on create'
    )
    system_tags: Dict[str, str] = Field(
        default_factory=dict, description='Tags set by the provisioning engine'
    )
    desired_resource_tags: Dict[str, str] = Field(
        default_factory=dict, description='Stack-level tags'
    )
    previous_system_tags: Dict[str, str] = Field(default_factory=dict)
    previous_resource_tags: Dict[str, str] = Field(
        default_factory=dict, description='Stack-level tags before the update'
    )
    logical_resource_identifier: Optional[str] = None
    client_request_token: Optional[str] = None
    stack_id: Optional[str] = None
    snapshot_requested: bool = Field(
        default=False, description='Take a final snapshot when deleting'
    )
    next_token: Optional[str] = Field(default=None, description='Pagination token for list')
    max_records: Optional[int] = Field(
        default=None, ge=20, le=100, description='Page size for list, within the RDS limits'
    )

    def desired_tag_set(self, resource_tags: Optional[Mapping[str, str]]) -> TagSet:
        return TagSet(
            system_tags=self.system_tags,
            stack_tags=self.desired_resource_tags,
            resource_tags=dict(resource_tags or {}),
        )

    def previous_tag_set(self, resource_tags: Optional[Mapping[str, str]]) -> TagSet:
        return TagSet(
            system_tags=self.previous_system_tags,
            stack_tags=self.previous_resource_tags,
            resource_tags=dict(resource_tags or {}),
        )
