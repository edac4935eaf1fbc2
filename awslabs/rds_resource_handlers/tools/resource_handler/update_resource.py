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

"""Tool to update an RDS resource through its resource handler."""

from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...engine.handler import Action
from ...engine.request import ResourceHandlerRequest
from .utils import CALLBACK_NOTE, run_handler
from pydantic import Field
from typing import Any, Dict, Optional
from typing_extensions import Annotated


UPDATE_RESOURCE_TOOL_DESCRIPTION = (
    """Update an Amazon RDS resource from its previous to its desired properties.

<use_case>
Use this tool to change properties, associated roles, parameters, options or tags of an
existing resource.
</use_case>

<important_notes>
1. Pass both the previous and the desired properties; only the difference is applied
2. Tags are reconciled across the system, stack and resource tiers: removed keys are
   removed first, then new and changed keys are added
3. Parameters removed from a parameter group are reset to their defaults
4. This operation is blocked when the server runs in read-only mode
</important_notes>

## Response structure
- `status`: IN_PROGRESS, SUCCESS or FAILED
- `callbackDelaySeconds`, `callbackContext`: present while IN_PROGRESS
- `resourceModel`: the updated resource, on SUCCESS
- `errorCode`, `message`: on FAILED
"""
    + CALLBACK_NOTE
)


@mcp.tool(
    name='UpdateResource',
    description=UPDATE_RESOURCE_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def update_resource(
    type_name: Annotated[
        str, Field(description='CloudFormation type name, e.g. AWS::RDS::DBCluster')
    ],
    desired_state: Annotated[
        Dict[str, Any], Field(description='Desired resource properties')
    ],
    previous_state: Annotated[
        Dict[str, Any], Field(description='Resource properties before the update')
    ],
    system_tags: Annotated[
        Optional[Dict[str, str]], Field(description='Tags set by the provisioning engine')
    ] = None,
    stack_tags: Annotated[
        Optional[Dict[str, str]], Field(description='Tags set on the stack')
    ] = None,
    previous_system_tags: Annotated[
        Optional[Dict[str, str]], Field(description='System tags before the update')
    ] = None,
    previous_stack_tags: Annotated[
        Optional[Dict[str, str]], Field(description='Stack tags before the update')
    ] = None,
    callback_context: Annotated[
        Optional[str], Field(description='callbackContext returned by the previous call')
    ] = None,
) -> Dict[str, Any]:
    """Update a resource.

    Args:
        type_name: CloudFormation type name
        desired_state: Desired resource properties
        previous_state: Resource properties before the update
        system_tags: Tags set by the provisioning engine
        stack_tags: Tags set on the stack
        previous_system_tags: System tags before the update
        previous_stack_tags: Stack tags before the update
        callback_context: Continuation token from the previous call

    Returns:
        Dict[str, Any]: The handler envelope
    """
    request = ResourceHandlerRequest(
        desired_resource_state=desired_state,
        previous_resource_state=previous_state,
        system_tags=system_tags or {},
        desired_resource_tags=stack_tags or {},
        previous_system_tags=previous_system_tags or {},
        previous_resource_tags=previous_stack_tags or {},
    )
    return await run_handler(type_name, Action.UPDATE, request, callback_context)
