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

"""Global pytest fixtures for Amazon RDS Resource Handlers tests."""

import os
import pytest
from awslabs.rds_resource_handlers.common.connection import RDSConnectionManager
from awslabs.rds_resource_handlers.common.context import RDSContext
from awslabs.rds_resource_handlers.engine.backoff import Constant
from awslabs.rds_resource_handlers.engine.handler import invoke
from awslabs.rds_resource_handlers.engine.progress import OperationStatus, ResumeContext
from awslabs.rds_resource_handlers.engine.session import HandlerConfig
from botocore.exceptions import ClientError
from unittest.mock import MagicMock, patch


class FakeClock:
    """Wall clock advanced by hand."""

    def __init__(self, start: float = 1_700_000_000.0):
        """Start the clock at a fixed epoch time."""
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture(scope='session', autouse=True)
def tests_setup_and_teardown():
    """Mock environment and module variables for testing."""
    # Will be executed before the first test
    old_environ = dict(os.environ)
    os.environ.update(
        {
            'AWS_DEFAULT_REGION': 'us-east-1',  # pragma: allowlist secret
            'AWS_ACCESS_KEY_ID': 'mock_access_key',  # pragma: allowlist secret
            'AWS_SECRET_ACCESS_KEY': 'mock_secret_key',  # pragma: allowlist secret
        }
    )

    yield
    # Will be executed after the last test
    os.environ.clear()
    os.environ.update(old_environ)


@pytest.fixture
def mock_rds_client():
    """Fixture providing a mock RDS client for tests.

    Resets the RDS connection before and after the test.
    Returns a mock client that's automatically patched into the RDSConnectionManager.
    """
    RDSConnectionManager._client = None

    mock_client = MagicMock()

    with patch.object(RDSConnectionManager, 'get_connection', return_value=mock_client) as _:
        yield mock_client

    RDSConnectionManager._client = None


@pytest.fixture
def mock_rds_context_allowed():
    """Mock RDS context to allow operations (readonly_mode returns False)."""
    with patch.object(RDSContext, 'readonly_mode', return_value=False) as mock:
        yield mock


@pytest.fixture
def mock_rds_context_readonly():
    """Mock RDS context to deny operations (readonly_mode returns True)."""
    with patch.object(RDSContext, 'readonly_mode', return_value=True) as mock:
        yield mock


@pytest.fixture
def mock_asyncio_thread():
    """Mock asyncio.to_thread to run the target inline."""

    async def run_inline(func, *args, **kwargs):
        return func(*args, **kwargs)

    with patch('asyncio.to_thread', side_effect=run_inline) as mock:
        yield mock


@pytest.fixture
def clock():
    """Fake wall clock shared by the handler config and the drive fixture."""
    return FakeClock()


@pytest.fixture
def handler_config(clock):
    """Short backoff on the fake clock: 5 second callbacks, 60 second timeout."""
    return HandlerConfig(backoff=Constant(interval=5, timeout=60), clock=clock)


@pytest.fixture
def client_error():
    """Factory for botocore ClientErrors."""

    def make(code: str, message: str = 'error', status: int = 400, operation: str = 'Call'):
        return ClientError(
            error_response={
                'Error': {'Code': code, 'Message': message},
                'ResponseMetadata': {'HTTPStatusCode': status},
            },
            operation_name=operation,
        )

    return make


@pytest.fixture
def drive(clock):
    """Play the scheduler: re-invoke while suspended, advancing the clock by each delay.

    The resume context is passed through its continuation token between invocations, as a
    real scheduler would. Returns (final event, number of invocations).
    """

    def run(kind, action, request, client, config, max_invocations: int = 100):
        context = None
        for invocation in range(1, max_invocations + 1):
            event = invoke(kind, action, request, context, client, config)
            if event.status != OperationStatus.SUSPENDED:
                return event, invocation
            context = ResumeContext.from_token(event.callback_context.to_token())
            clock.advance(event.callback_delay_seconds)
        raise AssertionError(f'Operation still suspended after {max_invocations} invocations')

    return run


@pytest.fixture
def sample_db_cluster():
    """Return a sample DB cluster response."""
    return {
        'DBClusterIdentifier': 'test-db-cluster',
        'Status': 'available',
        'Engine': 'aurora-mysql',
        'EngineVersion': '5.7.mysql_aurora.2.10.2',
        'DBClusterArn': 'arn:aws:rds:us-east-1:123456789012:cluster:test-db-cluster',
        'DbClusterResourceId': 'cluster-ABCDEFGHIJKLMNOP',
        'Endpoint': 'test-db-cluster.cluster-abc123.us-east-1.rds.amazonaws.com',
        'ReaderEndpoint': 'test-db-cluster.cluster-ro-abc123.us-east-1.rds.amazonaws.com',
        'Port': 3306,
        'MasterUsername': 'admin',
        'AvailabilityZones': ['us-east-1a', 'us-east-1b', 'us-east-1c'],
        'EngineMode': 'provisioned',
        'VpcSecurityGroups': [{'VpcSecurityGroupId': 'sg-12345678', 'Status': 'active'}],
        'DBClusterParameterGroup': 'default.aurora-mysql5.7',
        'DBSubnetGroup': 'default',
        'BackupRetentionPeriod': 7,
        'PreferredBackupWindow': '07:00-09:00',
        'PreferredMaintenanceWindow': 'sun:04:00-sun:05:00',
        'DeletionProtection': False,
        'StorageEncrypted': True,
        'IAMDatabaseAuthenticationEnabled': False,
        'CopyTagsToSnapshot': True,
        'AssociatedRoles': [],
        'TagList': [{'Key': 'Environment', 'Value': 'Production'}],
    }


@pytest.fixture
def sample_parameter_group():
    """Return a sample parameter group response."""
    return {
        'DBParameterGroupName': 'test-parameter-group',
        'DBParameterGroupFamily': 'mysql8.0',
        'Description': 'Test parameter group',
        'DBParameterGroupArn': 'arn:aws:rds:us-east-1:123456789012:pg:test-parameter-group',
    }


@pytest.fixture
def sample_cluster_parameter_group():
    """Return a sample cluster parameter group response."""
    return {
        'DBClusterParameterGroupName': 'test-cluster-parameter-group',
        'DBParameterGroupFamily': 'aurora-mysql5.7',
        'Description': 'Test cluster parameter group',
        'DBClusterParameterGroupArn': 'arn:aws:rds:us-east-1:123456789012:cluster-pg:test-cluster-parameter-group',
    }
