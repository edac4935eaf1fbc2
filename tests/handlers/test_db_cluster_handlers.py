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

"""Tests for the DB cluster handlers."""

import pytest
from awslabs.rds_resource_handlers.engine.handler import Action
from awslabs.rds_resource_handlers.engine.progress import ErrorKind, OperationStatus
from awslabs.rds_resource_handlers.engine.request import ResourceHandlerRequest
from awslabs.rds_resource_handlers.handlers.db_cluster import DB_CLUSTER
from awslabs.rds_resource_handlers.handlers.db_cluster.handlers import (
    describe_db_cluster,
    is_available,
)
from unittest.mock import MagicMock


ROLE_A = 'arn:aws:iam::123456789012:role/s3-import'
ROLE_B = 'arn:aws:iam::123456789012:role/s3-export'
SYSTEM_TAGS = {'aws:cloudformation:stack-name': 'mystack'}
STACK_TAGS = {'team': 'databases'}


def cluster_with(sample, **changes):
    cluster = dict(sample)
    cluster.update(changes)
    return {'DBClusters': [cluster]}


@pytest.fixture
def client(sample_db_cluster):
    """RDS client whose cluster is available from the start."""
    client = MagicMock()
    client.create_db_cluster.return_value = {'DBCluster': sample_db_cluster}
    client.modify_db_cluster.return_value = {'DBCluster': sample_db_cluster}
    client.restore_db_cluster_from_snapshot.return_value = {'DBCluster': sample_db_cluster}
    client.restore_db_cluster_to_point_in_time.return_value = {'DBCluster': sample_db_cluster}
    client.describe_db_clusters.return_value = {'DBClusters': [sample_db_cluster]}
    return client


class TestCreateHandler:
    """Test cases for creating DB clusters."""

    def test_create_waits_until_available(self, drive, handler_config, client, sample_db_cluster):
        """Test that create polls until the cluster is available and reads it back."""
        client.describe_db_clusters.side_effect = [
            cluster_with(sample_db_cluster, Status='creating'),
            cluster_with(sample_db_cluster, Status='creating'),
            cluster_with(sample_db_cluster),
            cluster_with(sample_db_cluster),
        ]
        request = ResourceHandlerRequest(
            desired_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'Engine': 'aurora-mysql',
                'MasterUsername': 'admin',
                'MasterUserPassword': 'secret',  # pragma: allowlist secret
            },
            system_tags=SYSTEM_TAGS,
        )

        event, invocations = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        assert invocations == 3
        client.create_db_cluster.assert_called_once()
        kwargs = client.create_db_cluster.call_args.kwargs
        assert kwargs['DBClusterIdentifier'] == 'test-db-cluster'
        assert kwargs['Tags'] == [{'Key': 'aws:cloudformation:stack-name', 'Value': 'mystack'}]
        assert event.resource_model.db_cluster_arn == sample_db_cluster['DBClusterArn']
        assert event.resource_model.endpoint.port == '3306'

    def test_create_with_role(self, drive, handler_config, client, sample_db_cluster):
        """Test that roles are associated after the cluster is available."""
        client.describe_db_clusters.return_value = cluster_with(
            sample_db_cluster, AssociatedRoles=[{'RoleArn': ROLE_A, 'Status': 'ACTIVE'}]
        )
        request = ResourceHandlerRequest(
            desired_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'Engine': 'aurora-mysql',
                'AssociatedRoles': [{'RoleArn': ROLE_A}],
            }
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        client.create_db_cluster.assert_called_once()
        client.add_role_to_db_cluster.assert_called_once_with(
            DBClusterIdentifier='test-db-cluster', RoleArn=ROLE_A
        )
        assert event.resource_model.associated_roles[0].role_arn == ROLE_A

    def test_role_already_associated_is_tolerated(
        self, drive, handler_config, client, client_error, sample_db_cluster
    ):
        """Test that an existing role association completes the step."""
        client.add_role_to_db_cluster.side_effect = client_error('DBClusterRoleAlreadyExists')
        client.describe_db_clusters.return_value = cluster_with(
            sample_db_cluster, AssociatedRoles=[{'RoleArn': ROLE_A, 'Status': 'ACTIVE'}]
        )
        request = ResourceHandlerRequest(
            desired_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'AssociatedRoles': [{'RoleArn': ROLE_A}],
            }
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS

    def test_tagging_denied_falls_back_to_system_tags(
        self, drive, handler_config, client, client_error, sample_db_cluster
    ):
        """Test the create retry with system tags and the later tagging call."""
        client.create_db_cluster.side_effect = [
            client_error('AccessDenied', 'not authorized to tag'),
            {'DBCluster': sample_db_cluster},
        ]
        request = ResourceHandlerRequest(
            desired_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'Tags': [{'Key': 'app', 'Value': 'orders'}],
            },
            system_tags=SYSTEM_TAGS,
            desired_resource_tags=STACK_TAGS,
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        assert client.create_db_cluster.call_count == 2
        first, second = client.create_db_cluster.call_args_list
        assert len(first.kwargs['Tags']) == 3
        assert second.kwargs['Tags'] == [
            {'Key': 'aws:cloudformation:stack-name', 'Value': 'mystack'}
        ]
        client.add_tags_to_resource.assert_called_once_with(
            ResourceName=sample_db_cluster['DBClusterArn'],
            Tags=[{'Key': 'app', 'Value': 'orders'}, {'Key': 'team', 'Value': 'databases'}],
        )

    def test_access_denied_without_extra_tags(self, drive, handler_config, client, client_error):
        """Test that a denied create with system tags only fails as access denied."""
        client.create_db_cluster.side_effect = client_error('AccessDenied')
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'},
            system_tags=SYSTEM_TAGS,
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.error_kind == ErrorKind.UNAUTHORIZED
        client.create_db_cluster.assert_called_once()

    def test_access_denied_while_polling_does_not_create_again(
        self, drive, handler_config, client, client_error, sample_db_cluster
    ):
        """Test that a denied describe after a successful create fails without a second create."""
        client.create_db_cluster.side_effect = [
            {'DBCluster': sample_db_cluster},
            client_error('DBClusterAlreadyExistsFault'),
        ]
        client.describe_db_clusters.side_effect = client_error('AccessDeniedException')
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'},
            system_tags=SYSTEM_TAGS,
            desired_resource_tags=STACK_TAGS,
        )

        event, invocations = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.status == OperationStatus.FAILED
        assert event.error_kind == ErrorKind.UNAUTHORIZED
        assert invocations == 1
        client.create_db_cluster.assert_called_once()
        assert len(client.create_db_cluster.call_args.kwargs['Tags']) == 2
        client.add_tags_to_resource.assert_not_called()

    def test_generated_identifier(self, drive, handler_config, client):
        """Test that a cluster without an identifier gets one from the stack and logical id."""
        request = ResourceHandlerRequest(
            desired_resource_state={'Engine': 'aurora-postgresql'},
            stack_id='arn:aws:cloudformation:us-east-1:123456789012:stack/mystack/guid',
            logical_resource_identifier='OrdersCluster',
            client_request_token='token-1',
        )

        drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        identifier = client.create_db_cluster.call_args.kwargs['DBClusterIdentifier']
        assert identifier.startswith('mystack-orderscluster-')
        assert len(identifier) <= 63

    def test_restore_from_snapshot_then_modify(self, drive, handler_config, client):
        """Test that a snapshot restore is followed by a modify for restore-only gaps."""
        request = ResourceHandlerRequest(
            desired_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'SnapshotIdentifier': 'snap-1',
                'Engine': 'aurora-mysql',
                'BackupRetentionPeriod': 14,
            }
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        client.create_db_cluster.assert_not_called()
        assert (
            client.restore_db_cluster_from_snapshot.call_args.kwargs['SnapshotIdentifier']
            == 'snap-1'
        )
        client.modify_db_cluster.assert_called_once_with(
            DBClusterIdentifier='test-db-cluster',
            BackupRetentionPeriod=14,
            ApplyImmediately=True,
        )

    def test_restore_to_point_in_time_without_modify(self, drive, handler_config, client):
        """Test that a point in time restore needing no extra attributes skips the modify."""
        request = ResourceHandlerRequest(
            desired_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'SourceDBClusterIdentifier': 'source-cluster',
                'UseLatestRestorableTime': True,
            }
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        client.restore_db_cluster_to_point_in_time.assert_called_once()
        client.modify_db_cluster.assert_not_called()

    def test_already_exists(self, drive, handler_config, client, client_error):
        """Test that an existing cluster fails the create."""
        client.create_db_cluster.side_effect = client_error('DBClusterAlreadyExistsFault')
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'}
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.error_kind == ErrorKind.ALREADY_EXISTS

    def test_not_stabilized(self, drive, handler_config, client, sample_db_cluster):
        """Test that a cluster stuck creating times out."""
        client.describe_db_clusters.return_value = cluster_with(
            sample_db_cluster, Status='creating'
        )
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'}
        )

        event, _ = drive(DB_CLUSTER, Action.CREATE, request, client, handler_config)

        assert event.error_kind == ErrorKind.TIMEOUT
        client.create_db_cluster.assert_called_once()


class TestUpdateHandler:
    """Test cases for updating DB clusters."""

    def test_update_attributes_roles_and_tags(
        self, drive, handler_config, client, sample_db_cluster
    ):
        """Test modify, role changes and tag changes in order."""
        client.describe_db_clusters.return_value = cluster_with(
            sample_db_cluster, AssociatedRoles=[{'RoleArn': ROLE_B, 'Status': 'ACTIVE'}]
        )
        request = ResourceHandlerRequest(
            previous_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'BackupRetentionPeriod': 1,
                'AssociatedRoles': [{'RoleArn': ROLE_A}],
                'Tags': [{'Key': 'old', 'Value': '1'}],
            },
            desired_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'BackupRetentionPeriod': 7,
                'AssociatedRoles': [{'RoleArn': ROLE_B}],
                'Tags': [{'Key': 'new', 'Value': '2'}],
            },
        )

        event, _ = drive(DB_CLUSTER, Action.UPDATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        client.modify_db_cluster.assert_called_once_with(
            DBClusterIdentifier='test-db-cluster', ApplyImmediately=True, BackupRetentionPeriod=7
        )
        client.remove_role_from_db_cluster.assert_called_once_with(
            DBClusterIdentifier='test-db-cluster', RoleArn=ROLE_A
        )
        client.add_role_to_db_cluster.assert_called_once_with(
            DBClusterIdentifier='test-db-cluster', RoleArn=ROLE_B
        )
        arn = sample_db_cluster['DBClusterArn']
        client.remove_tags_from_resource.assert_called_once_with(
            ResourceName=arn, TagKeys=['old']
        )
        client.add_tags_to_resource.assert_called_once_with(
            ResourceName=arn, Tags=[{'Key': 'new', 'Value': '2'}]
        )

    def test_update_waits_for_role_removal(self, drive, handler_config, client, sample_db_cluster):
        """Test that a role removal is polled until the role is gone."""
        active_a = {'RoleArn': ROLE_A, 'Status': 'ACTIVE'}
        client.describe_db_clusters.side_effect = [
            cluster_with(sample_db_cluster, AssociatedRoles=[active_a]),
            cluster_with(sample_db_cluster, AssociatedRoles=[active_a]),
            cluster_with(sample_db_cluster),
            cluster_with(sample_db_cluster),
        ]
        request = ResourceHandlerRequest(
            previous_resource_state={
                'DBClusterIdentifier': 'test-db-cluster',
                'AssociatedRoles': [{'RoleArn': ROLE_A}],
            },
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'},
        )

        event, invocations = drive(DB_CLUSTER, Action.UPDATE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        assert invocations == 2
        client.modify_db_cluster.assert_called_once()
        client.remove_role_from_db_cluster.assert_called_once()


class TestDeleteHandler:
    """Test cases for deleting DB clusters."""

    def test_delete_waits_until_gone(
        self, drive, handler_config, client, client_error, sample_db_cluster
    ):
        """Test that delete polls until the cluster is not found."""
        client.describe_db_clusters.side_effect = [
            cluster_with(sample_db_cluster, Status='deleting'),
            client_error('DBClusterNotFoundFault'),
        ]
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'}
        )

        event, invocations = drive(DB_CLUSTER, Action.DELETE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        assert event.resource_model is None
        assert invocations == 2
        client.delete_db_cluster.assert_called_once_with(
            DBClusterIdentifier='test-db-cluster', SkipFinalSnapshot=True
        )

    def test_delete_with_final_snapshot(self, drive, handler_config, client, client_error):
        """Test that a requested snapshot is taken on delete."""
        client.describe_db_clusters.side_effect = client_error('DBClusterNotFoundFault')
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'},
            snapshot_requested=True,
            client_request_token='token-1',
        )

        event, _ = drive(DB_CLUSTER, Action.DELETE, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        kwargs = client.delete_db_cluster.call_args.kwargs
        assert kwargs['SkipFinalSnapshot'] is False
        assert 'final-snapshot' in kwargs['FinalDBSnapshotIdentifier']

    def test_delete_missing_cluster(self, drive, handler_config, client, client_error):
        """Test that deleting a missing cluster fails as not found."""
        client.delete_db_cluster.side_effect = client_error('DBClusterNotFoundFault')
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'}
        )

        event, _ = drive(DB_CLUSTER, Action.DELETE, request, client, handler_config)

        assert event.error_kind == ErrorKind.NOT_FOUND


class TestReadHandler:
    """Test cases for reading DB clusters."""

    def test_read(self, drive, handler_config, client, sample_db_cluster):
        """Test that read translates the described cluster."""
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'}
        )

        event, _ = drive(DB_CLUSTER, Action.READ, request, client, handler_config)

        model = event.resource_model
        assert model.engine == 'aurora-mysql'
        assert model.vpc_security_group_ids == ['sg-12345678']
        assert model.tag_map() == {'Environment': 'Production'}
        assert model.read_endpoint.address == sample_db_cluster['ReaderEndpoint']

    def test_read_without_identifier(self, drive, handler_config, client):
        """Test that a model without an identifier is not found."""
        event, _ = drive(
            DB_CLUSTER, Action.READ, ResourceHandlerRequest(), client, handler_config
        )
        assert event.error_kind == ErrorKind.NOT_FOUND
        client.describe_db_clusters.assert_not_called()

    def test_read_missing_cluster(self, drive, handler_config, client, client_error):
        """Test that a missing cluster is not found."""
        client.describe_db_clusters.side_effect = client_error('DBClusterNotFoundFault')
        request = ResourceHandlerRequest(
            desired_resource_state={'DBClusterIdentifier': 'test-db-cluster'}
        )

        event, _ = drive(DB_CLUSTER, Action.READ, request, client, handler_config)

        assert event.error_kind == ErrorKind.NOT_FOUND


class TestListHandler:
    """Test cases for listing DB clusters."""

    def test_list_page(self, drive, handler_config, client, sample_db_cluster):
        """Test that one page and its marker are returned."""
        client.describe_db_clusters.return_value = {
            'DBClusters': [sample_db_cluster],
            'Marker': 'page-2',
        }
        request = ResourceHandlerRequest(next_token='page-1', max_records=50)

        event, _ = drive(DB_CLUSTER, Action.LIST, request, client, handler_config)

        assert event.status == OperationStatus.SUCCESS
        assert [m.db_cluster_identifier for m in event.resource_models] == ['test-db-cluster']
        assert event.next_token == 'page-2'
        client.describe_db_clusters.assert_called_once_with(Marker='page-1', MaxRecords=50)


class TestHelpers:
    """Test cases for the DB cluster helpers."""

    def test_describe_db_cluster(self, sample_db_cluster):
        """Test that the first described cluster is returned."""
        client = MagicMock()
        client.describe_db_clusters.return_value = {'DBClusters': [sample_db_cluster]}
        assert describe_db_cluster(client, 'test-db-cluster') is sample_db_cluster

    @pytest.mark.parametrize(
        'cluster,expected',
        [(None, False), ({'Status': 'modifying'}, False), ({'Status': 'available'}, True)],
    )
    def test_is_available(self, cluster, expected):
        """Test the availability predicate."""
        assert is_available(cluster) is expected
