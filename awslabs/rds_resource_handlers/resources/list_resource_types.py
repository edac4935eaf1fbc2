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

"""Resource listing the resource types the server can handle."""

from ..common.decorator import handle_exceptions
from ..common.server import mcp
from ..handlers import RESOURCE_KINDS, list_type_names
from loguru import logger
from pydantic import BaseModel, Field
from typing import List


RESOURCE_TYPES_URI = 'aws-rds-handlers://resource-types'

LIST_RESOURCE_TYPES_DESCRIPTION = """List the resource types with registered handlers.

<use_case>
Use this resource to find which type_name values the resource handler tools accept and
which lifecycle actions each supports.
</use_case>

<important_notes>
1. first_callback_delay_seconds is the wait suggested after the first IN_PROGRESS response
2. timeout_seconds bounds how long an operation may keep waiting or retrying before it fails
   with NotStabilized
</important_notes>
"""


class ResourceTypeModel(BaseModel):
    """A resource type and its default scheduling."""

    type_name: str = Field(description='CloudFormation type name')
    actions: List[str] = Field(description='Supported lifecycle actions')
    first_callback_delay_seconds: float = Field(description='Delay after the first suspension')
    timeout_seconds: float = Field(description='Operation timeout')


class ResourceTypeListModel(BaseModel):
    """Resource types with registered handlers."""

    resource_types: List[ResourceTypeModel] = Field(default_factory=list)
    count: int = Field(description='Number of resource types')
    resource_uri: str = Field(description='URI of this resource')


@mcp.resource(
    uri=RESOURCE_TYPES_URI,
    name='ListResourceTypes',
    description=LIST_RESOURCE_TYPES_DESCRIPTION,
    mime_type='application/json',
)
@handle_exceptions
async def list_resource_types() -> ResourceTypeListModel:
    """List the registered resource types.

    Returns:
        ResourceTypeListModel: The resource types, sorted by name
    """
    logger.info('Listing registered resource types')
    resource_types = []
    for type_name in list_type_names():
        kind = RESOURCE_KINDS[type_name]
        backoff = kind.config.backoff
        resource_types.append(
            ResourceTypeModel(
                type_name=type_name,
                actions=[action.value for action in kind.handlers],
                first_callback_delay_seconds=backoff.delay(0),
                timeout_seconds=backoff.timeout,
            )
        )

    return ResourceTypeListModel(
        resource_types=resource_types,
        count=len(resource_types),
        resource_uri=RESOURCE_TYPES_URI,
    )
