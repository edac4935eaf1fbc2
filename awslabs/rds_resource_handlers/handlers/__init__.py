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

"""Resource kinds and their lifecycle handlers.

Each kind bundles a resource model, a handler per lifecycle action and a default backoff.
Run an operation with ``engine.handler.invoke``:

    ```python
    from awslabs.rds_resource_handlers.engine.handler import Action, invoke
    from awslabs.rds_resource_handlers.handlers import get_resource_kind

    event = invoke(get_resource_kind('AWS::RDS::DBCluster'), Action.CREATE, request, None, client)
    ```
"""

from ..common.exceptions import UnsupportedResourceTypeException
from ..engine.handler import ResourceKind
from .db_cluster import DB_CLUSTER
from .db_cluster_endpoint import DB_CLUSTER_ENDPOINT
from .db_cluster_parameter_group import DB_CLUSTER_PARAMETER_GROUP
from .db_parameter_group import DB_PARAMETER_GROUP
from .option_group import OPTION_GROUP
from typing import Dict, List


RESOURCE_KINDS: Dict[str, ResourceKind] = {
    kind.type_name: kind
    for kind in (
        DB_CLUSTER,
        DB_CLUSTER_ENDPOINT,
        DB_CLUSTER_PARAMETER_GROUP,
        DB_PARAMETER_GROUP,
        OPTION_GROUP,
    )
}


def get_resource_kind(type_name: str) -> ResourceKind:
    """Look up a resource kind by CloudFormation type name.

    Args:
        type_name: e.g. 'AWS::RDS::DBCluster'

    Returns:
        The registered resource kind

    Raises:
        UnsupportedResourceTypeException: If no kind is registered for type_name
    """
    kind = RESOURCE_KINDS.get(type_name)
    if kind is None:
        raise UnsupportedResourceTypeException(type_name)
    return kind


def list_type_names() -> List[str]:
    return sorted(RESOURCE_KINDS)
