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

"""General utility functions for Amazon RDS Resource Handlers."""

import datetime
import hashlib
import re
from botocore.client import BaseClient
from loguru import logger
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar


T = TypeVar('T', bound=object)


def handle_paginated_aws_api_call(
    client: BaseClient,
    paginator_name: str,
    operation_parameters: Dict[str, Any],
    format_function: Callable[[Any], T],
    result_key: str,
) -> List[T]:
    """Fetch all results using AWS API pagination.

    Args:
        client: Boto3 client to use for the API call
        paginator_name: Name of the paginator to use (e.g. 'describe_engine_default_parameters')
        operation_parameters: Parameters to pass to the paginator
        format_function: Function to format each item in the result
        result_key: Key in the response that contains the list of items, dotted for nested keys

    Returns:
        List of formatted results
    """
    results = []
    logger.debug(f'Paginating {paginator_name}')
    paginator = client.get_paginator(paginator_name)
    for page in paginator.paginate(**operation_parameters):
        items: Any = page
        for key in result_key.split('.'):
            items = items.get(key, {}) if isinstance(items, dict) else {}
        for item in items or []:
            results.append(format_function(item))

    return results


def convert_datetime_to_string(obj: Any) -> Any:
    """Recursively convert datetime objects to ISO format strings.

    Args:
        obj: Object to convert

    Returns:
        Object with datetime objects converted to strings
    """
    if isinstance(obj, datetime.datetime):
        return obj.isoformat()
    elif isinstance(obj, dict):
        return {k: convert_datetime_to_string(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_datetime_to_string(item) for item in obj]
    return obj


def generate_resource_identifier(
    stack_id: Optional[str],
    logical_id: Optional[str],
    client_request_token: Optional[str],
    max_length: int,
) -> str:
    """Generate a physical identifier for a resource created without one.

    The result depends only on its inputs, so every invocation of one operation
    derives the same name.

    Args:
        stack_id: The stack ARN or name, the stack name segment is used
        logical_id: The logical resource identifier in the template
        client_request_token: The token identifying the operation
        max_length: Maximum identifier length accepted by the resource type

    Returns:
        A lowercase identifier that starts with a letter
    """
    stack_name = 'rds'
    if stack_id:
        parts = stack_id.split('/')
        stack_name = parts[1] if len(parts) > 1 else parts[0]
    digest = hashlib.sha256((client_request_token or '').encode('utf-8')).hexdigest()
    suffix = digest[:12]

    prefix = re.sub(r'[^a-z0-9-]', '', f'{stack_name}-{logical_id or "resource"}'.lower())
    prefix = re.sub(r'-+', '-', prefix).strip('-')
    if not prefix or not prefix[0].isalpha():
        prefix = f'r{prefix}'
    prefix = prefix[: max_length - len(suffix) - 1].rstrip('-')

    return f'{prefix}-{suffix}'


def chunked(items: Iterable[T], size: int) -> List[List[T]]:
    """Split items into lists of at most size elements."""
    batch: List[T] = []
    batches = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            batches.append(batch)
            batch = []
    if batch:
        batches.append(batch)
    return batches
