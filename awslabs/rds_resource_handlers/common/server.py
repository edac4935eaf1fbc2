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

"""Common MCP server configuration."""

from mcp.server.fastmcp import FastMCP

SERVER_VERSION = '0.1.0'

SERVER_INSTRUCTIONS = """
This server runs CloudFormation-style resource handlers for Amazon RDS resources:
DB clusters, DB cluster endpoints, DB cluster parameter groups, DB parameter groups and option groups.

Handlers never block while a resource is changing. A call that cannot finish yet returns
status IN_PROGRESS together with callbackDelaySeconds and an opaque callbackContext.
Wait for the delay, then call the same tool again with the same arguments and the returned
callbackContext. Repeat until the status is SUCCESS or FAILED.

The server operates in read-only mode by default. Only ReadResource and ListResources are allowed
in read-only mode.
"""

SERVER_DEPENDENCIES = ['boto3', 'botocore', 'pydantic', 'loguru']

# FastMCP instance
mcp = FastMCP(
    'awslabs.rds-resource-handlers',
    instructions=SERVER_INSTRUCTIONS,
    dependencies=SERVER_DEPENDENCIES,
)
