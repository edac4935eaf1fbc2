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

"""Constants for Amazon RDS Resource Handlers."""

# Error Messages
ERROR_READONLY_MODE = (
    'This operation requires write access. The server is currently in read-only mode.'
)
ERROR_CLIENT = 'Client error: {}'
ERROR_UNEXPECTED = 'Unexpected error: {}'
ERROR_UNSUPPORTED_TYPE = 'Unsupported resource type: {}'
ERROR_STABILIZATION_TIMEOUT = 'Resource {} did not stabilize within {} seconds'
ERROR_INVALID_CONTEXT = 'Invalid callback context: {}'
ERROR_UNAUTHORIZED_TAGGING = 'Not authorized to tag resource {}'

# Success Messages
SUCCESS_STABILIZED = 'Resource {} is stable'

# CloudFormation handler error codes
HANDLER_ERROR_NOT_FOUND = 'NotFound'
HANDLER_ERROR_ALREADY_EXISTS = 'AlreadyExists'
HANDLER_ERROR_ACCESS_DENIED = 'AccessDenied'
HANDLER_ERROR_INVALID_REQUEST = 'InvalidRequest'
HANDLER_ERROR_INTERNAL_FAILURE = 'InternalFailure'
HANDLER_ERROR_NOT_STABILIZED = 'NotStabilized'
HANDLER_ERROR_THROTTLING = 'Throttling'

# Resume context scratch keys
SCRATCH_EXTRA_TAGS_PENDING = 'extra-tags-pending'
SCRATCH_RESOURCE_ARN = 'resource-arn'
SCRATCH_MODIFIED = 'modified'
SCRATCH_PARAMETERS_APPLIED = 'parameters-applied'

# Generated identifiers
MAX_DB_CLUSTER_IDENTIFIER_LENGTH = 63
MAX_PARAMETER_GROUP_NAME_LENGTH = 255
MAX_OPTION_GROUP_NAME_LENGTH = 255
MAX_ENDPOINT_IDENTIFIER_LENGTH = 63

# RDS accepts at most this many parameters per modify/reset call
MAX_PARAMETERS_PER_REQUEST = 20
