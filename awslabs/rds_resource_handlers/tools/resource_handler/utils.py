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

"""Shared plumbing for the resource handler tools."""

import asyncio
from ...common.connection import RDSConnectionManager
from ...engine.envelope import to_envelope
from ...engine.handler import Action, invoke
from ...engine.progress import ResumeContext
from ...engine.request import ResourceHandlerRequest
from ...handlers import get_resource_kind
from loguru import logger
from typing import Any, Dict, Optional


CALLBACK_NOTE = """
<callback_protocol>
If the response status is IN_PROGRESS, wait callbackDelaySeconds, then call this tool again
with exactly the same arguments plus callback_context set to the returned callbackContext.
Repeat until the status is SUCCESS or FAILED.
</callback_protocol>
"""


async def run_handler(
    type_name: str,
    action: Action,
    request: ResourceHandlerRequest,
    callback_context: Optional[str] = None,
) -> Dict[str, Any]:
    """Run one handler invocation off the event loop and return the scheduler envelope.

    Args:
        type_name: CloudFormation type name of the resource
        action: Lifecycle action to run
        request: The operation request
        callback_context: Continuation token returned by the previous call, if any

    Returns:
        Dict[str, Any]: The envelope built by to_envelope

    Raises:
        UnsupportedResourceTypeException: If type_name has no registered handlers
        ValueError: If callback_context is not a valid continuation token
    """
    kind = get_resource_kind(type_name)
    context = ResumeContext.from_token(callback_context) if callback_context else None
    logger.info(
        f'{action.value} {type_name}'
        + (f' resuming at step {context.step}' if context and context.step else '')
    )
    rds_client = RDSConnectionManager.get_connection()
    event = await asyncio.to_thread(invoke, kind, action, request, context, rds_client)
    return to_envelope(event)
