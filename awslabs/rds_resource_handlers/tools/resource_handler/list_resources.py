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

"""Tool to list RDS resources of one type through their resource handler."""

from ...common.context import RDSContext
from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...engine.handler import Action
from ...engine.request import ResourceHandlerRequest
from .utils import run_handler
from pydantic import Field
from typing import Any, Dict, Optional
from typing_extensions import Annotated


# RDS accepts MaxRecords between 20 and 100
MIN_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

LIST_RESOURCES_TOOL_DESCRIPTION = """List Amazon RDS resources of one type, one page at a time.

<important_notes>
1. Pass the returned nextToken back as next_token to get the following page
2. Default option groups managed by RDS and non-custom cluster endpoints are not listed
3. This operation is allowed in read-only mode
</important_notes>

## Response structure
- `status`: SUCCESS or FAILED
- `resourceModels`: the resources on this page
- `nextToken`: token for the next page, null on the last page
- `errorCode`, `message`: on FAILED
"""


def page_size() -> int:
    return max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, RDSContext.max_items()))


@mcp.tool(
    name='ListResources',
    description=LIST_RESOURCES_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def list_resources(
    type_name: Annotated[
        str, Field(description='CloudFormation type name, e.g. AWS::RDS::OptionGroup')
    ],
    next_token: Annotated[
        Optional[str], Field(description='nextToken returned by the previous page')
    ] = None,
) -> Dict[str, Any]:
    """List resources of one type.

    Args:
        type_name: CloudFormation type name
        next_token: Pagination token from the previous page

    Returns:
        Dict[str, Any]: The handler envelope
    """
    request = ResourceHandlerRequest(next_token=next_token, max_records=page_size())
    return await run_handler(type_name, Action.LIST, request)
