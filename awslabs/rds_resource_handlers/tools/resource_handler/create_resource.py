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

"""Tool to create an RDS resource through its resource handler."""

from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...engine.handler import Action
from ...engine.request import ResourceHandlerRequest
from .utils import CALLBACK_NOTE, run_handler
from pydantic import Field
from typing import Any, Dict, Optional
from typing_extensions import Annotated


CREATE_RESOURCE_TOOL_DESCRIPTION = (
    """Create an Amazon RDS resource and wait for it to become usable.

<use_case>
Use this tool to provision a DB cluster, DB cluster endpoint, DB cluster parameter group,
DB parameter group or option group from its CloudFormation properties.
</use_case>

<important_notes>
1. desired_state uses the CloudFormation property names, e.g. {"Engine": "aurora-postgresql"}
2. When the name or identifier property is omitted one is generated from stack_id,
   logical_resource_id and client_request_token, which must then stay the same across calls
3. If the caller may not tag with stack or resource tags, the resource is created with
   system tags only and the rest is added afterwards
4. This operation is blocked when the server runs in read-only mode
</important_notes>

## Response structure
- `status`: IN_PROGRESS, SUCCESS or FAILED
- `callbackDelaySeconds`, `callbackContext`: present while IN_PROGRESS
- `resourceModel`: the created resource, on SUCCESS
- `errorCode`, `message`: on FAILED
"""
    + CALLBACK_NOTE
)


@mcp.tool(
    name='CreateResource',
    description=CREATE_RESOURCE_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def create_resource(
    type_name: Annotated[
        str, Field(description='CloudFormation type name, e.g. AWS::RDS::DBCluster')
    ],
    desired_state: Annotated[
        Dict[str, Any], Field(description='Resource properties using CloudFormation names')
    ],
    system_tags: Annotated[
        Optional[Dict[str, str]], Field(description='Tags set by the provisioning engine')
    ] = None,
    stack_tags: Annotated[
        Optional[Dict[str, str]], Field(description='Tags set on the stack')
    ] = None,
    logical_resource_id: Annotated[
        Optional[str], Field(description='Logical ID of the resource in its template')
    ] = None,
    stack_id: Annotated[Optional[str], Field(description='ID of the owning stack')] = None,
    client_request_token: Annotated[
        Optional[str], Field(description='Token identifying this operation')
    ] = None,
    callback_context: Annotated[
        Optional[str], Field(description='callbackContext returned by the previous call')
    ] = None,
) -> Dict[str, Any]:
    """Create a resource.

    Args:
        type_name: CloudFormation type name
        desired_state: Resource properties
        system_tags: Tags set by the provisioning engine
        stack_tags: Tags set on the stack
        logical_resource_id: Logical ID of the resource
        stack_id: ID of the owning stack
        client_request_token: Token identifying this operation
        callback_context: Continuation token from the previous call

    Returns:
        Dict[str, Any]: The handler envelope
    """
    request = ResourceHandlerRequest(
        desired_resource_state=desired_state,
        system_tags=system_tags or {},
        desired_resource_tags=stack_tags or {},
        logical_resource_identifier=logical_resource_id,
        stack_id=stack_id,
        client_request_token=client_request_token,
    )
    return await run_handler(type_name, Action.CREATE, request, callback_context)
