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

"""RDS client management for Amazon RDS Resource Handlers."""

import boto3
import os
from botocore.config import Config
from typing import Any, Optional


class RDSConnectionManager:
    """Builds and caches the boto3 RDS client shared by every handler invocation.

    The client is the only dependency handlers share across invocations. It is read-mostly
    and never carries operation state.
    """

    _client: Optional[Any] = None
    _service_name = 'rds'
    _env_prefix = 'RDS'
    _region: Optional[str] = None

    @classmethod
    def initialize(cls, region: Optional[str] = None):
        """Initialize the connection manager with a region.

        Args:
            region (str): AWS region for RDS operations
        """
        cls._region = region or os.environ.get('AWS_REGION', 'us-east-1')
        cls._client = None

    @classmethod
    def get_region(cls) -> str:
        """Get the AWS region.

        Returns:
            str: AWS region
        """
        return cls._region or os.environ.get('AWS_REGION', 'us-east-1')

    @classmethod
    def get_connection(cls) -> Any:
        """Get or create an RDS client with retry capabilities.

        Returns:
            boto3.client: An RDS client configured with retries
        """
        if cls._client is None:
            aws_profile = os.environ.get('AWS_PROFILE', '')
            aws_region = cls.get_region()
            endpoint_url = os.environ.get(f'{cls._env_prefix}_ENDPOINT_URL')

            # configuration retry settings
            max_retries = int(os.environ.get(f'{cls._env_prefix}_MAX_RETRIES', '3'))
            retry_mode = os.environ.get(f'{cls._env_prefix}_RETRY_MODE', 'standard')
            connect_timeout = int(os.environ.get(f'{cls._env_prefix}_CONNECT_TIMEOUT', '5'))
            read_timeout = int(os.environ.get(f'{cls._env_prefix}_READ_TIMEOUT', '10'))

            config = Config(
                retries={'max_attempts': max_retries, 'mode': retry_mode},
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
                user_agent_extra='MCP/AmazonRDSResourceHandlers',
            )

            if aws_profile:
                session = boto3.Session(profile_name=aws_profile, region_name=aws_region)
            else:
                session = boto3.Session(
                    aws_access_key_id=os.environ.get('AWS_ACCESS_KEY_ID'),
                    aws_secret_access_key=os.environ.get('AWS_SECRET_ACCESS_KEY'),
                    aws_session_token=os.environ.get('AWS_SESSION_TOKEN'),
                    region_name=aws_region,
                )

            client_kwargs = {'service_name': cls._service_name, 'config': config}
            if endpoint_url:
                client_kwargs['endpoint_url'] = endpoint_url
            cls._client = session.client(**client_kwargs)

        return cls._client

    @classmethod
    def close_connection(cls) -> None:
        """Close the RDS client connection."""
        if cls._client is not None:
            cls._client.close()
            cls._client = None
