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

"""AWS::RDS::DBParameterGroup resource model."""

from ..base import ResourceModel
from pydantic import Field
from typing import Any, Dict, Optional


class DBParameterGroup(ResourceModel):
    """A DB parameter group and the parameter values it sets."""

    db_parameter_group_name: Optional[str] = Field(default=None, alias='DBParameterGroupName')
    description: Optional[str] = Field(default=None, alias='Description')
    family: Optional[str] = Field(default=None, alias='Family')
    parameters: Optional[Dict[str, Any]] = Field(default=None, alias='Parameters')
