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

"""AWS::RDS::OptionGroup resource model."""

from ..base import ResourceModel
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class OptionSetting(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias='Name')
    value: Optional[str] = Field(default=None, alias='Value')


class OptionConfiguration(BaseModel):
    """One option of the group and its settings."""

    model_config = ConfigDict(populate_by_name=True)

    option_name: str = Field(alias='OptionName')
    option_version: Optional[str] = Field(default=None, alias='OptionVersion')
    port: Optional[int] = Field(default=None, alias='Port')
    db_security_group_memberships: Optional[List[str]] = Field(
        default=None, alias='DBSecurityGroupMemberships'
    )
    vpc_security_group_memberships: Optional[List[str]] = Field(
        default=None, alias='VpcSecurityGroupMemberships'
    )
    option_settings: Optional[List[OptionSetting]] = Field(default=None, alias='OptionSettings')


class OptionGroup(ResourceModel):
    """An option group for a database engine version."""

    option_group_name: Optional[str] = Field(default=None, alias='OptionGroupName')
    option_group_description: Optional[str] = Field(
        default=None, alias='OptionGroupDescription'
    )
    engine_name: Optional[str] = Field(default=None, alias='EngineName')
    major_engine_version: Optional[str] = Field(default=None, alias='MajorEngineVersion')
    option_configurations: Optional[List[OptionConfiguration]] = Field(
        default=None, alias='OptionConfigurations'
    )
