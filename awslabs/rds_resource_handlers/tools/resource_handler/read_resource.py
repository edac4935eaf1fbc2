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

"""Tool to read an RDS resource through its resource handler."""

from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...engine.handler import Action
from ...engine.request import ResourceHandlerRequest
from .utils import run_handler
from pydantic import Field
from typing import Any, Dict
from typing_extensions import Annotated


READ_RESOURCE_TOOL_DESCRIPTION = """Read the current properties of an Amazon RDS resource.

<use_case>
Use this tool to get the CloudFormation model of an existing resource, e.g. after a create
or to detect drift.
</use_case>

<important_notes>
1. current_state must contain the resource's name or identifier property
2. Secrets such as MasterUserPassword are never returned
3. Parameter groups return the parameters passed in current_state, not every parameter of
   the group
4. This operation is allowed in read-only mode
</important_notes>

## Response structure
- `status`: SUCCESS or FAILED
- `resourceModel`: the resource properties, on SUCCESS
- `errorCode`, `message`: on FAILED; NotFound when the resource does not exist
"""


@mcp.tool(
    name='ReadResource',
    description=READ_RESOURCE_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def read_resource(
    type_name: Annotated[
        str, Field(description='CloudFormation type name, e.g. AWS::RDS::DBCluster')
    ],
    current_state: Annotated[
        Dict[str, Any], Field(description='Resource properties, at least the identifier')
    ],
) -> Dict[str, Any]:
    """Read a resource.

    Args:
        type_name: CloudFormation type name
        current_state: Resource properties

    Returns:
        Dict[str, Any]: The handler envelope
    """
    request = ResourceHandlerRequest(desired_resource_state=current_state)
    return await run_handler(type_name, Action.READ, request)
