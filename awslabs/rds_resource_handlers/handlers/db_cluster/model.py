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

"""AWS::RDS::DBCluster resource model."""

from ..base import ResourceModel
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class DBClusterRole(BaseModel):
    """An IAM role associated with the cluster."""

    model_config = ConfigDict(populate_by_name=True)

    role_arn: str = Field(alias='RoleArn')
    feature_name: Optional[str] = Field(default=None, alias='FeatureName')


class Endpoint(BaseModel):
    """Connection endpoint of the cluster."""

    model_config = ConfigDict(populate_by_name=True)

    address: Optional[str] = Field(default=None, alias='Address')
    port: Optional[str] = Field(default=None, alias='Port')


class DBCluster(ResourceModel):
    """Properties of an Aurora DB cluster."""

    db_cluster_identifier: Optional[str] = Field(default=None, alias='DBClusterIdentifier')
    db_cluster_arn: Optional[str] = Field(default=None, alias='DBClusterArn')
    db_cluster_resource_id: Optional[str] = Field(default=None, alias='DBClusterResourceId')
    engine: Optional[str] = Field(default=None, alias='Engine')
    engine_version: Optional[str] = Field(default=None, alias='EngineVersion')
    engine_mode: Optional[str] = Field(default=None, alias='EngineMode')
    master_username: Optional[str] = Field(default=None, alias='MasterUsername')
    master_user_password: Optional[str] = Field(default=None, alias='MasterUserPassword')
    database_name: Optional[str] = Field(default=None, alias='DatabaseName')
    port: Optional[int] = Field(default=None, alias='Port')
    db_cluster_parameter_group_name: Optional[str] = Field(
        default=None, alias='DBClusterParameterGroupName'
    )
    db_subnet_group_name: Optional[str] = Field(default=None, alias='DBSubnetGroupName')
    vpc_security_group_ids: Optional[List[str]] = Field(default=None, alias='VpcSecurityGroupIds')
    availability_zones: Optional[List[str]] = Field(default=None, alias='AvailabilityZones')
    backup_retention_period: Optional[int] = Field(default=None, alias='BackupRetentionPeriod')
    preferred_backup_window: Optional[str] = Field(default=None, alias='PreferredBackupWindow')
    preferred_maintenance_window: Optional[str] = Field(
        default=None, alias='PreferredMaintenanceWindow'
    )
    deletion_protection: Optional[bool] = Field(default=None, alias='DeletionProtection')
    storage_encrypted: Optional[bool] = Field(default=None, alias='StorageEncrypted')
    kms_key_id: Optional[str] = Field(default=None, alias='KmsKeyId')
    enable_iam_database_authentication: Optional[bool] = Field(
        default=None, alias='EnableIAMDatabaseAuthentication'
    )
    copy_tags_to_snapshot: Optional[bool] = Field(default=None, alias='CopyTagsToSnapshot')
    snapshot_identifier: Optional[str] = Field(default=None, alias='SnapshotIdentifier')
    source_db_cluster_identifier: Optional[str] = Field(
        default=None, alias='SourceDBClusterIdentifier'
    )
    restore_type: Optional[str] = Field(default=None, alias='RestoreType')
    restore_to_time: Optional[str] = Field(default=None, alias='RestoreToTime')
    use_latest_restorable_time: Optional[bool] = Field(
        default=None, alias='UseLatestRestorableTime'
    )
    associated_roles: Optional[List[DBClusterRole]] = Field(default=None, alias='AssociatedRoles')
    endpoint: Optional[Endpoint] = Field(default=None, alias='Endpoint')
    read_endpoint: Optional[Endpoint] = Field(default=None, alias='ReadEndpoint')

    def is_restore_from_snapshot(self) -> bool:
        return bool(self.snapshot_identifier)

    def is_restore_to_point_in_time(self) -> bool:
        return bool(self.source_db_cluster_identifier)
