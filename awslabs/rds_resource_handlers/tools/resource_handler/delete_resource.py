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

"""Tool to delete an RDS resource through its resource handler."""

from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...engine.handler import Action
from ...engine.request import ResourceHandlerRequest
from .utils import CALLBACK_NOTE, run_handler
from pydantic import Field
from typing import Any, Dict, Optional
from typing_extensions import Annotated


DELETE_RESOURCE_TOOL_DESCRIPTION = (
    """Delete an Amazon RDS resource and wait until it is gone.

<important_notes>
1. current_state must contain the resource's name or identifier property
2. For DB clusters, snapshot_requested takes a final snapshot before deletion
3. Parameter and option groups still in use are retried until they are released or the
   operation times out
4. This operation is blocked when the server runs in read-only mode
</important_notes>

## Response structure
- `status`: IN_PROGRESS, SUCCESS or FAILED
- `callbackDelaySeconds`, `callbackContext`: present while IN_PROGRESS
- `errorCode`, `message`: on FAILED; NotFound when the resource does not exist
"""
    + CALLBACK_NOTE
)


@mcp.tool(
    name='DeleteResource',
    description=DELETE_RESOURCE_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def delete_resource(
    type_name: Annotated[
        str, Field(description='CloudFormation type name, e.g. AWS::RDS::DBCluster')
    ],
    current_state: Annotated[
        Dict[str, Any], Field(description='Resource properties, at least the identifier')
    ],
    snapshot_requested: Annotated[
        bool, Field(description='Take a final snapshot before deleting a DB cluster')
    ] = False,
    stack_id: Annotated[Optional[str], Field(description='ID of the owning stack')] = None,
    client_request_token: Annotated[
        Optional[str], Field(description='Token identifying this operation')
    ] = None,
    callback_context: Annotated[
        Optional[str], Field(description='callbackContext returned by the previous call')
    ] = None,
) -> Dict[str, Any]:
    """Delete a resource.

    Args:
        type_name: CloudFormation type name
        current_state: Resource properties
        snapshot_requested: Take a final snapshot before deleting
        stack_id: ID of the owning stack, used to name the final snapshot
        client_request_token: Token identifying this operation
        callback_context: Continuation token from the previous call

    Returns:
        Dict[str, Any]: The handler envelope
    """
    request = ResourceHandlerRequest(
        desired_resource_state=current_state,
        snapshot_requested=snapshot_requested,
        stack_id=stack_id,
        client_request_token=client_request_token,
    )
    return await run_handler(type_name, Action.DELETE, request, callback_context)
