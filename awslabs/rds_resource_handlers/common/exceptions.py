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

"""Custom exceptions for Amazon RDS Resource Handlers."""

from .constants import ERROR_STABILIZATION_TIMEOUT, ERROR_UNSUPPORTED_TYPE


class RDSHandlerException(Exception):
    """Base exception for RDS resource handlers."""

    pass


class ReadOnlyModeException(RDSHandlerException):
    """Exception raised when a write operation is attempted in read-only mode."""

    def __init__(self, operation: str):
        """Initialize the ReadOnlyModeException.

        Args:
            operation: The name of the operation that was attempted
        """
        self.operation = operation
        super().__init__(
            f"Operation '{operation}' requires write access. The server is currently in read-only mode."
        )


class UnsupportedResourceTypeException(RDSHandlerException):
    """Exception raised when no handlers are registered for a resource type."""

    def __init__(self, type_name: str):
        """Initialize the UnsupportedResourceTypeException.

        Args:
            type_name: The requested resource type name
        """
        self.type_name = type_name
        super().__init__(ERROR_UNSUPPORTED_TYPE.format(type_name))


class StabilizationTimeoutError(RDSHandlerException):
    """Raised by the poller once an operation has outlived its backoff horizon."""

    def __init__(self, resource_id: str, timeout: float):
        """Initialize the StabilizationTimeoutError.

        Args:
            resource_id: Identifier of the resource being waited on
            timeout: The horizon, in seconds, that was exceeded
        """
        self.resource_id = resource_id
        self.timeout = timeout
        super().__init__(ERROR_STABILIZATION_TIMEOUT.format(resource_id, int(timeout)))
