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

"""Request builders and response readers for DB clusters."""

from ...engine.tagging import from_sdk_tags, to_sdk_tags
from ..base import tags_from_map
from .model import DBCluster, DBClusterRole, Endpoint
from typing import Any, Dict, List, Mapping, Optional


def _compact(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


def create_db_cluster_request(model: DBCluster, tags: Mapping[str, str]) -> Dict[str, Any]:
    return _compact(
        {
            'DBClusterIdentifier': model.db_cluster_identifier,
            'Engine': model.engine,
            'EngineVersion': model.engine_version,
            'EngineMode': model.engine_mode,
            'MasterUsername': model.master_username,
            'MasterUserPassword': model.master_user_password,
            'DatabaseName': model.database_name,
            'Port': model.port,
            'DBClusterParameterGroupName': model.db_cluster_parameter_group_name,
            'DBSubnetGroupName': model.db_subnet_group_name,
            'VpcSecurityGroupIds': model.vpc_security_group_ids,
            'AvailabilityZones': model.availability_zones,
            'BackupRetentionPeriod': model.backup_retention_period,
            'PreferredBackupWindow': model.preferred_backup_window,
            'PreferredMaintenanceWindow': model.preferred_maintenance_window,
            'DeletionProtection': model.deletion_protection,
            'StorageEncrypted': model.storage_encrypted,
            'KmsKeyId': model.kms_key_id,
            'EnableIAMDatabaseAuthentication': model.enable_iam_database_authentication,
            'CopyTagsToSnapshot': model.copy_tags_to_snapshot,
            'Tags': to_sdk_tags(tags),
        }
    )


def restore_db_cluster_from_snapshot_request(
    model: DBCluster, tags: Mapping[str, str]
) -> Dict[str, Any]:
    return _compact(
        {
            'DBClusterIdentifier': model.db_cluster_identifier,
            'SnapshotIdentifier': model.snapshot_identifier,
            'Engine': model.engine,
            'EngineVersion': model.engine_version,
            'EngineMode': model.engine_mode,
            'DatabaseName': model.database_name,
            'Port': model.port,
            'DBClusterParameterGroupName': model.db_cluster_parameter_group_name,
            'DBSubnetGroupName': model.db_subnet_group_name,
            'VpcSecurityGroupIds': model.vpc_security_group_ids,
            'AvailabilityZones': model.availability_zones,
            'DeletionProtection': model.deletion_protection,
            'KmsKeyId': model.kms_key_id,
            'EnableIAMDatabaseAuthentication': model.enable_iam_database_authentication,
            'CopyTagsToSnapshot': model.copy_tags_to_snapshot,
            'Tags': to_sdk_tags(tags),
        }
    )


def restore_db_cluster_to_point_in_time_request(
    model: DBCluster, tags: Mapping[str, str]
) -> Dict[str, Any]:
    return _compact(
        {
            'DBClusterIdentifier': model.db_cluster_identifier,
            'SourceDBClusterIdentifier': model.source_db_cluster_identifier,
            'RestoreType': model.restore_type,
            'RestoreToTime': model.restore_to_time,
            'UseLatestRestorableTime': model.use_latest_restorable_time,
            'Port': model.port,
            'DBClusterParameterGroupName': model.db_cluster_parameter_group_name,
            'DBSubnetGroupName': model.db_subnet_group_name,
            'VpcSecurityGroupIds': model.vpc_security_group_ids,
            'DeletionProtection': model.deletion_protection,
            'KmsKeyId': model.kms_key_id,
            'EnableIAMDatabaseAuthentication': model.enable_iam_database_authentication,
            'CopyTagsToSnapshot': model.copy_tags_to_snapshot,
            'Tags': to_sdk_tags(tags),
        }
    )


def modify_db_cluster_after_restore_request(model: DBCluster) -> Dict[str, Any]:
    """Attributes the restore calls do not accept."""
    return _compact(
        {
            'DBClusterIdentifier': model.db_cluster_identifier,
            'BackupRetentionPeriod': model.backup_retention_period,
            'PreferredBackupWindow': model.preferred_backup_window,
            'PreferredMaintenanceWindow': model.preferred_maintenance_window,
            'MasterUserPassword': model.master_user_password,
            'ApplyImmediately': True,
        }
    )


MODIFIABLE_ATTRIBUTES = (
    ('backup_retention_period', 'BackupRetentionPeriod'),
    ('db_cluster_parameter_group_name', 'DBClusterParameterGroupName'),
    ('vpc_security_group_ids', 'VpcSecurityGroupIds'),
    ('port', 'Port'),
    ('master_user_password', 'MasterUserPassword'),
    ('preferred_backup_window', 'PreferredBackupWindow'),
    ('preferred_maintenance_window', 'PreferredMaintenanceWindow'),
    ('engine_version', 'EngineVersion'),
    ('deletion_protection', 'DeletionProtection'),
    ('enable_iam_database_authentication', 'EnableIAMDatabaseAuthentication'),
    ('copy_tags_to_snapshot', 'CopyTagsToSnapshot'),
)


def modify_db_cluster_request(
    previous: Optional[DBCluster], desired: DBCluster
) -> Dict[str, Any]:
    """Only attributes that changed are sent."""
    params: Dict[str, Any] = {
        'DBClusterIdentifier': desired.db_cluster_identifier,
        'ApplyImmediately': True,
    }
    for attribute, key in MODIFIABLE_ATTRIBUTES:
        value = getattr(desired, attribute)
        if value is None:
            continue
        if previous is None or getattr(previous, attribute) != value:
            params[key] = value
    if 'EngineVersion' in params:
        params['AllowMajorVersionUpgrade'] = True
    return params


def db_cluster_role_request(cluster_id: str, role: DBClusterRole) -> Dict[str, Any]:
    """Request for add_role_to_db_cluster and remove_role_from_db_cluster."""
    return _compact(
        {
            'DBClusterIdentifier': cluster_id,
            'RoleArn': role.role_arn,
            'FeatureName': role.feature_name,
        }
    )


def delete_db_cluster_request(
    model: DBCluster, final_snapshot_identifier: Optional[str]
) -> Dict[str, Any]:
    if final_snapshot_identifier:
        return {
            'DBClusterIdentifier': model.db_cluster_identifier,
            'SkipFinalSnapshot': False,
            'FinalDBSnapshotIdentifier': final_snapshot_identifier,
        }
    return {'DBClusterIdentifier': model.db_cluster_identifier, 'SkipFinalSnapshot': True}


def describe_db_clusters_request(cluster_id: str) -> Dict[str, Any]:
    return {'DBClusterIdentifier': cluster_id}


def list_db_clusters_request(
    next_token: Optional[str], max_records: Optional[int] = None
) -> Dict[str, Any]:
    return _compact({'Marker': next_token, 'MaxRecords': max_records})


def role_diff(
    previous: Optional[List[DBClusterRole]], desired: Optional[List[DBClusterRole]]
):
    """Return (roles to remove, roles to add), compared by role ARN and feature name."""
    previous = previous or []
    desired = desired or []
    previous_keys = {(role.role_arn, role.feature_name) for role in previous}
    desired_keys = {(role.role_arn, role.feature_name) for role in desired}
    to_remove = [
        role for role in previous if (role.role_arn, role.feature_name) not in desired_keys
    ]
    to_add = [role for role in desired if (role.role_arn, role.feature_name) not in previous_keys]
    return to_remove, to_add


def _endpoint(address: Optional[str], port: Any) -> Optional[Endpoint]:
    if not address:
        return None
    return Endpoint(address=address, port=str(port) if port is not None else None)


def translate_db_cluster_from_sdk(cluster: Dict[str, Any]) -> DBCluster:
    """Build the resource model from a describe_db_clusters entry."""
    roles = [
        DBClusterRole(role_arn=role['RoleArn'], feature_name=role.get('FeatureName'))
        for role in cluster.get('AssociatedRoles', [])
    ]
    return DBCluster(
        db_cluster_identifier=cluster.get('DBClusterIdentifier'),
        db_cluster_arn=cluster.get('DBClusterArn'),
        db_cluster_resource_id=cluster.get('DbClusterResourceId'),
        engine=cluster.get('Engine'),
        engine_version=cluster.get('EngineVersion'),
        engine_mode=cluster.get('EngineMode'),
        master_username=cluster.get('MasterUsername'),
        database_name=cluster.get('DatabaseName'),
        port=cluster.get('Port'),
        db_cluster_parameter_group_name=cluster.get('DBClusterParameterGroup'),
        db_subnet_group_name=cluster.get('DBSubnetGroup'),
        vpc_security_group_ids=[
            group['VpcSecurityGroupId'] for group in cluster.get('VpcSecurityGroups', [])
        ]
        or None,
        availability_zones=cluster.get('AvailabilityZones') or None,
        backup_retention_period=cluster.get('BackupRetentionPeriod'),
        preferred_backup_window=cluster.get('PreferredBackupWindow'),
        preferred_maintenance_window=cluster.get('PreferredMaintenanceWindow'),
        deletion_protection=cluster.get('DeletionProtection'),
        storage_encrypted=cluster.get('StorageEncrypted'),
        kms_key_id=cluster.get('KmsKeyId'),
        enable_iam_database_authentication=cluster.get('IAMDatabaseAuthenticationEnabled'),
        copy_tags_to_snapshot=cluster.get('CopyTagsToSnapshot'),
        associated_roles=roles or None,
        endpoint=_endpoint(cluster.get('Endpoint'), cluster.get('Port')),
        read_endpoint=_endpoint(cluster.get('ReaderEndpoint'), None),
        tags=tags_from_map(from_sdk_tags(cluster.get('TagList'))),
    )
