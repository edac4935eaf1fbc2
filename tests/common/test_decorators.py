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

"""Tests for common decorators."""

import pytest
from awslabs.rds_resource_handlers.common.decorator import handle_exceptions, readonly_check
from awslabs.rds_resource_handlers.common.exceptions import (
    ReadOnlyModeException,
    UnsupportedResourceTypeException,
)
from botocore.exceptions import ClientError


class TestHandleExceptions:
    """Test cases for handle_exceptions decorator."""

    @pytest.mark.asyncio
    async def test_handle_exceptions_success(self):
        """Test handle_exceptions with successful function call."""

        @handle_exceptions
        async def test_func():
            return {'status': 'SUCCESS'}

        result = await test_func()
        assert result == {'status': 'SUCCESS'}

    @pytest.mark.asyncio
    async def test_handle_exceptions_sync_function(self):
        """Test handle_exceptions with a synchronous function."""

        @handle_exceptions
        def test_func():
            return 42

        assert await test_func() == 42

    @pytest.mark.asyncio
    async def test_handle_exceptions_with_exception(self):
        """Test handle_exceptions with exception."""

        @handle_exceptions
        async def test_func():
            raise ValueError('Invalid callback context: bad token')

        result = await test_func()
        assert result['error_type'] == 'ValueError'
        assert 'bad token' in result['error_message']
        assert result['operation'] == 'test_func'

    @pytest.mark.asyncio
    async def test_handle_exceptions_with_client_error(self):
        """Test handle_exceptions with client error."""

        @handle_exceptions
        async def test_func():
            raise ClientError(
                error_response={
                    'Error': {'Code': 'ValidationException', 'Message': 'Invalid parameter'}
                },
                operation_name='CreateDBCluster',
            )

        result = await test_func()
        assert result['error_code'] == 'ValidationException'
        assert result['error_message'] == 'Invalid parameter'

    @pytest.mark.asyncio
    async def test_handle_exceptions_with_unsupported_type(self):
        """Test handle_exceptions with an unknown resource type."""

        @handle_exceptions
        async def test_func():
            raise UnsupportedResourceTypeException('AWS::RDS::DBProxy')

        result = await test_func()
        assert result['type_name'] == 'AWS::RDS::DBProxy'
        assert 'Unsupported resource type' in result['error']

    @pytest.mark.asyncio
    async def test_handle_exceptions_with_readonly(self):
        """Test handle_exceptions with a blocked operation."""

        @handle_exceptions
        async def test_func():
            raise ReadOnlyModeException('create_resource')

        result = await test_func()
        assert result['operation'] == 'create_resource'
        assert 'read-only mode' in result['error']


class TestReadonlyCheck:
    """Test cases for readonly_check decorator."""

    @pytest.mark.asyncio
    async def test_readonly_check_allowed(self, mock_rds_context_allowed):
        """Test readonly_check when operations are allowed."""

        @readonly_check
        async def create_resource():
            return {'status': 'SUCCESS'}

        result = await create_resource()
        assert result == {'status': 'SUCCESS'}

    @pytest.mark.asyncio
    async def test_readonly_check_blocked(self, mock_rds_context_readonly):
        """Test readonly_check when operations are blocked."""

        @readonly_check
        async def delete_resource():
            return {'status': 'SUCCESS'}

        with pytest.raises(ReadOnlyModeException):
            await delete_resource()

    @pytest.mark.asyncio
    async def test_readonly_check_read_operation(self, mock_rds_context_readonly):
        """Test that read operations run in readonly mode."""

        @readonly_check
        async def read_resource():
            return {'status': 'SUCCESS'}

        @readonly_check
        async def list_resources():
            return {'status': 'SUCCESS'}

        assert await read_resource() == {'status': 'SUCCESS'}
        assert await list_resources() == {'status': 'SUCCESS'}
