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

"""Decorators used by the RDS resource handler MCP tools."""

from .constants import ERROR_CLIENT, ERROR_READONLY_MODE, ERROR_UNEXPECTED
from .context import RDSContext
from .exceptions import ReadOnlyModeException, UnsupportedResourceTypeException
from botocore.exceptions import ClientError
from functools import wraps
from inspect import iscoroutinefunction
from loguru import logger
from typing import Any, Callable


READ_OPERATION_PREFIXES = ('describe', 'list', 'get', 'read')


def handle_exceptions(func: Callable) -> Callable:
    """Decorator to handle exceptions in MCP operations.

    Wraps the function in a try-catch block and returns any exceptions
    in a standardized error format.

    Args:
        func: The function to wrap

    Returns:
        The wrapped function that handles exceptions
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any):
        try:
            if iscoroutinefunction(func):
                return await func(*args, **kwargs)
            return func(*args, **kwargs)
        except Exception as error:
            if isinstance(error, ReadOnlyModeException):
                logger.warning(f'Operation blocked in readonly mode: {error.operation}')
                return {
                    'error': ERROR_READONLY_MODE,
                    'operation': error.operation,
                    'message': str(error),
                }
            elif isinstance(error, UnsupportedResourceTypeException):
                logger.warning(str(error))
                return {
                    'error': str(error),
                    'type_name': error.type_name,
                    'operation': func.__name__,
                }
            elif isinstance(error, ClientError):
                error_code = error.response['Error']['Code']
                error_message = error.response['Error']['Message']
                logger.error(f'Failed with client error {error_code}: {error_message}')
                return {
                    'error': ERROR_CLIENT.format(error_code),
                    'error_code': error_code,
                    'error_message': error_message,
                    'operation': func.__name__,
                }
            else:
                logger.exception(f'Failed with unexpected error: {str(error)}')
                return {
                    'error': ERROR_UNEXPECTED.format(str(error)),
                    'error_type': type(error).__name__,
                    'error_message': str(error),
                    'operation': func.__name__,
                }

    return wrapper


def readonly_check(func: Callable) -> Callable:
    """Decorator to block mutating handlers in readonly mode.

    The operation type is taken from the function name: names starting with
    describe, list, get or read are always allowed.

    Args:
        func: The function to wrap

    Returns:
        The wrapped function that checks readonly mode
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any):
        func_name = func.__name__.lower()
        is_read_operation = func_name.startswith(READ_OPERATION_PREFIXES)

        if not is_read_operation and RDSContext.readonly_mode():
            raise ReadOnlyModeException(func.__name__)

        if iscoroutinefunction(func):
            return await func(*args, **kwargs)
        return func(*args, **kwargs)

    return wrapper
