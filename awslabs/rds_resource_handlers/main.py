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

"""awslabs RDS Resource Handlers MCP Server implementation."""

import argparse
import awslabs.rds_resource_handlers.resources  # noqa: F401 - imported for side effects to register resources
import awslabs.rds_resource_handlers.tools  # noqa: F401 - imported for side effects to register tools
import os
import sys
from awslabs.rds_resource_handlers.common.connection import RDSConnectionManager
from awslabs.rds_resource_handlers.common.context import RDSContext
from awslabs.rds_resource_handlers.common.server import SERVER_VERSION, mcp
from loguru import logger


def main():
    """Run the MCP server with CLI argument support."""
    parser = argparse.ArgumentParser(
        description='An AWS Labs MCP server running CloudFormation-style handlers for Amazon RDS'
    )
    parser.add_argument('--port', type=int, default=8888, help='Port to run the server on')
    parser.add_argument(
        '--max-items',
        default=100,
        type=int,
        help='Page size for ListResources, clamped to the 20-100 range RDS accepts',
    )
    parser.add_argument(
        '--region',
        type=str,
        default=os.environ.get('AWS_REGION', 'us-east-1'),
        help='AWS region for RDS operations',
    )
    parser.add_argument(
        '--readonly',
        default=True,
        action=argparse.BooleanOptionalAction,
        help='Prevents the MCP server from running create, update and delete handlers',
    )
    parser.add_argument('--profile', type=str, help='AWS profile to use for credentials')

    args = parser.parse_args()
    logger.remove()
    logger.add(sys.stderr, level=os.environ.get('FASTMCP_LOG_LEVEL', 'INFO'))

    # aws profile
    if args.profile:
        os.environ['AWS_PROFILE'] = args.profile

    RDSConnectionManager.initialize(region=args.region)
    RDSContext.initialize(readonly=args.readonly, max_items=args.max_items)

    mcp.settings.port = args.port

    logger.info(f'Starting RDS Resource Handlers MCP Server v{SERVER_VERSION}')
    logger.info(f'Region: {RDSConnectionManager.get_region()}')
    logger.info(f'Read-only mode: {RDSContext.readonly_mode()}')
    if args.profile:
        logger.info(f'AWS Profile: {args.profile}')

    mcp.run()


if __name__ == '__main__':
    main()
