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

"""Tests for the DB parameter group handlers."""

import pytest
from awslabs.rds_resource_handlers.engine.handler import Action
from awslabs.rds_resource_handlers.engine.progress import ErrorKind, OperationStatus
from awslabs.rds_resource_handlers.engine.request import ResourceHandlerRequest
from awslabs.rds_resource_handlers.handlers.db_parameter_group import DB_PARAMETER_GROUP
from unittest.mock import MagicMock


GROUP_ARN = 'arn:aws:rds:us-east-1:123456789012:pg:test-parameter-group'


def parameter(name, apply_type='dynamic', modifiable=True):
    return {'ParameterName': name, 'ApplyType': apply_type, 'IsModifiable': modifiable}


def paginators(pages_by_name):
    """get_paginator side effect returning fixed pages per paginator name."""

    def get_paginator(name):
        paginator = MagicMock()
        paginator.paginate.return_value = pages_by_name[name]
        return paginator

    return get_paginator


@pytest.fixture
def client(sample_parameter_group):
    """RDS client with an existing parameter group."""
    client = MagicMock()
    client.create_db_parameter_group.return_value = {'DBParameterGroup': sample_parameter_group}
    client.describe_db_parameter_groups.return_value = {
        'DBParameterGroups': [sample_parameter_group]
    }
    client.list_tags_for_resource.return_value = {'TagList': []}
    client.get_paginator.side_effect = paginators(
        {
            'describe_db_parameters': [
                {
                    'Parameters': [
                        parameter('max_connections'),
                        parameter('innodb_buffer_pool_size', 'static'),
                    ]
                },
                {'Parameters': [parameter('basedir', 'static', False)]},
            ],
            'describe_engine_default_parameters': [
                {
                    'EngineDefaults': {
                        'Parameters': [
                            parameter('max_connections'),
                            parameter('innodb_buffer_pool_size', 'static'),
                        ]
                    }
                }
            ],
        }
    )
    return client


def create_request(parameters):
    return ResourceHandlerRequest(
        desired_resource_state={
            'DBParameterGroupName': 'test-parameter-group',
            'Family': 'mysql8.0',
            'Description': 'Test parameter group',
            'Parameters': parameters,
        }
    )


class TestCreateHandler:
    """Test cases for creating DB parameter groups."""

    def test_create_with_parameters(self, drive, handler_config, client):
        """Test that parameters are applied with the method their apply type calls for."""
        request = create_request({'max_connections': 200, 'innodb_buffer_pool_size': '1G'})

        event, invocations = drive(
            DB_PARAMETER_GROUP, Action.CREATE, request, client, handler_config
        )

        assert event.status == OperationStatus.SUCCESS
        assert invocations == 1
        client.create_db_parameter_group.assert_called_once_with(
            DBParameterGroupName='test-parameter-group',
            DBParameterGroupFamily='mysql8.0',
            Description='Test parameter group',
            Tags=[],
        )
        client.modify_db_parameter_group.assert_called_once_with(
            DBParameterGroupName='test-parameter-group',
            Parameters=[
                {
                    'ParameterName': 'innodb_buffer_pool_size',
                    'ParameterValue': '1G',
                    'ApplyMethod': 'pending-reboot',
                },
                {
                    'ParameterName': 'max_connections',
                    'ParameterValue': '200',
                    'ApplyMethod': 'immediate',
                },
            ],
        )
        client.list_tags_for_resource.assert_called_once_with(ResourceName=GROUP_ARN)
        assert event.resource_model.parameters == {
            'max_connections': 200,
            'innodb_buffer_pool_size': '1G',
        }

    def test_create_without_parameters(self, drive, handler_config, client):
        """Test that no parameter calls are made when none are declared."""
        event, _ = drive(
            DB_PARAMETER_GROUP, Action.CREATE, create_request(None), client, handler_config
        )

        assert event.status == OperationStatus.SUCCESS
        client.get_paginator.assert_not_called()
        client.modify_db_parameter_group.assert_not_called()

    def test_unknown_parameter(self, drive, handler_config, client):
        """Test that an unknown parameter fails before any modify call."""
        request = create_request({'not_a_parameter': 1})

        event, _ = drive(DB_PARAMETER_GROUP, Action.CREATE, request, client, handler_config)

        assert event.error_kind == ErrorKind.INVALID_REQUEST
        assert 'not_a_parameter' in event.message
        client.modify_db_parameter_group.assert_not_called()

    def test_unmodifiable_parameter(self, drive, handler_config, client):
        """Test that an unmodifiable parameter fails before any modify call."""
        request = create_request({'basedir': '/opt'})

        event, _ = drive(DB_PARAMETER_GROUP, Action.CREATE, request, client, handler_config)

        assert event.error_kind == ErrorKind.INVALID_REQUEST
        client.modify_db_parameter_group.assert_not_called()

    def test_throttled_modify_resumes_without_describing_again(
        self, drive, handler_config, client, client_error
    ):
        """Test that a resumed create picks up at the throttled modify call."""
        client.modify_db_parameter_group.side_effect = [client_error('Throttling'), {}]
        request = create_request({'max_connections': 200})

        event, invocations = drive(
            DB_PARAMETER_GROUP, Action.CREATE, request, client, handler_config
        )

        assert event.status == OperationStatus.SUCCESS
        assert invocations == 2
        client.create_db_parameter_group.assert_called_once()
        client.get_paginator.assert_called_once_with('describe_db_parameters')
        assert client.modify_db_parameter_group.call_count == 2

    def test_already_exists(self, drive, handler_config, client, client_error):
        """Test that an existing group fails the create."""
        client.create_db_parameter_group.side_effect = client_error(
            'DBParameterGroupAlreadyExists'
        )

        event, _ = drive(
            DB_PARAMETER_GROUP, Action.CREATE, create_request(None), client, handler_config
        )

        assert event.error_kind == ErrorKind.ALREADY_EXISTS


class TestUpdateHandler:
    """Test cases for updating DB parameter groups."""

    def test_reset_removed_and_apply_changed(self, drive, handler_config, client):
        """Test that removed parameters are reset with engine default apply types."""
        request = ResourceHandlerRequest(
            previous_resource_state={
                'DBParameterGroupName': 'test-parameter-group',
                'Family': 'mysql8.0',
                'Parameters': {'max_connections': 100, 'innodb_buffer_pool_size': '1G'},
            },
            desired_resource_state={
                'DBParameterGroupName': 'test-parameter-group',
                'Family': 'mysql8.0',
                'Parameters': {'max_connections': 300},
            },
        )

        event, _ = drive(DB_PARAMETER_GROUP, Action.UPDATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        client.reset_db_parameter_group.assert_called_once_with(
            DBParameterGroupName='test-parameter-group',
            Parameters=[
                {'ParameterName': 'innodb_buffer_pool_size', 'ApplyMethod': 'pending-reboot'}
            ],
        )
        client.modify_db_parameter_group.assert_called_once_with(
            DBParameterGroupName='test-parameter-group',
            Parameters=[
                {
                    'ParameterName': 'max_connections',
                    'ParameterValue': '300',
                    'ApplyMethod': 'immediate',
                }
            ],
        )
        paginator_names = [c.args[0] for c in client.get_paginator.call_args_list]
        assert paginator_names == ['describe_engine_default_parameters', 'describe_db_parameters']

    def test_update_tags_only(self, drive, handler_config, client):
        """Test that unchanged parameters make no parameter calls."""
        state = {'DBParameterGroupName': 'test-parameter-group', 'Family': 'mysql8.0'}
        request = ResourceHandlerRequest(
            previous_resource_state=state,
            desired_resource_state={**state, 'Tags': [{'Key': 'env', 'Value': 'prod'}]},
        )

        event, _ = drive(DB_PARAMETER_GROUP, Action.UPDATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        client.get_paginator.assert_not_called()
        client.add_tags_to_resource.assert_called_once_with(
            ResourceName=GROUP_ARN, Tags=[{'Key': 'env', 'Value': 'prod'}]
        )


class TestDeleteHandler:
    """Test cases for deleting DB parameter groups."""

    def test_delete_in_use_is_retried(self, drive, handler_config, client, client_error):
        """Test that a group still in use is retried until it can be deleted."""
        client.delete_db_parameter_group.side_effect = [
            client_error('InvalidDBParameterGroupState'),
            {},
        ]
        request = ResourceHandlerRequest(
            desired_resource_state={'DBParameterGroupName': 'test-parameter-group'}
        )

        event, invocations = drive(
            DB_PARAMETER_GROUP, Action.DELETE, request, client, handler_config
        )

        assert event.status == OperationStatus.SUCCESS
        assert invocations == 2

    def test_delete_missing_group(self, drive, handler_config, client, client_error):
        """Test that deleting a missing group fails as not found."""
        client.delete_db_parameter_group.side_effect = client_error('DBParameterGroupNotFound')
        request = ResourceHandlerRequest(
            desired_resource_state={'DBParameterGroupName': 'test-parameter-group'}
        )

        event, _ = drive(DB_PARAMETER_GROUP, Action.DELETE, request, client, handler_config)

        assert event.error_kind == ErrorKind.NOT_FOUND


class TestReadAndListHandlers:
    """Test cases for reading and listing DB parameter groups."""

    def test_read(self, drive, handler_config, client):
        """Test that read returns the described group with its tags."""
        client.list_tags_for_resource.return_value = {
            'TagList': [{'Key': 'env', 'Value': 'prod'}]
        }
        request = ResourceHandlerRequest(
            desired_resource_state={'DBParameterGroupName': 'test-parameter-group'}
        )

        event, _ = drive(DB_PARAMETER_GROUP, Action.READ, request, client, handler_config)

        model = event.resource_model
        assert model.family == 'mysql8.0'
        assert model.description == 'Test parameter group'
        assert model.tag_map() == {'env': 'prod'}

    def test_list(self, drive, handler_config, client, sample_parameter_group):
        """Test that list returns one page of groups."""
        client.describe_db_parameter_groups.return_value = {
            'DBParameterGroups': [sample_parameter_group],
            'Marker': 'next',
        }

        event, _ = drive(
            DB_PARAMETER_GROUP, Action.LIST, ResourceHandlerRequest(), client, handler_config
        )

        assert [m.db_parameter_group_name for m in event.resource_models] == [
            'test-parameter-group'
        ]
        assert event.next_token == 'next'
        client.describe_db_parameter_groups.assert_called_once_with()
