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

"""Tools running the RDS resource handlers."""

from .create_resource import create_resource
from .read_resource import read_resource
from .update_resource import update_resource
from .delete_resource import delete_resource
from .list_resources import list_resources

__all__ = [
    'create_resource',
    'read_resource',
    'update_resource',
    'delete_resource',
    'list_resources',
]
