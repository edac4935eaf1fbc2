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

"""Stabilization poller."""

from ..common.constants import SUCCESS_STABILIZED
from ..common.exceptions import StabilizationTimeoutError
from .backoff import Backoff
from .progress import ResumeContext
from loguru import logger
from typing import Any, Callable, Tuple


def stabilize(
    resource_id: str,
    read: Callable[[], Any],
    predicate: Callable[[Any], bool],
    backoff: Backoff,
    context: ResumeContext,
    now: float,
) -> Tuple[bool, ResumeContext]:
    """Read the resource once and check whether it reached the desired state.

    Never sleeps. The caller suspends when the resource is not stable yet.

    Args:
        resource_id: Name used in log and error messages
        read: Zero-argument function returning the observed resource
        predicate: Returns True once the observed resource is stable
        backoff: Schedule whose timeout bounds the whole operation
        context: The current resume context
        now: Current wall-clock time in epoch seconds

    Returns:
        (True, context) when stable, otherwise (False, context with one more retry)

    Raises:
        StabilizationTimeoutError: If the resource is not stable and the operation has
            run longer than the backoff timeout
    """
    context = context.tick(now)
    resource = read()
    if predicate(resource):
        logger.success(SUCCESS_STABILIZED.format(resource_id))
        return True, context

    if context.elapsed_seconds >= backoff.timeout:
        raise StabilizationTimeoutError(resource_id, backoff.timeout)

    logger.debug(
        f'Resource {resource_id} is not stable yet '
        f'(attempt {context.retry_count + 1}, {context.elapsed_seconds:.0f}s elapsed)'
    )
    return False, context.next_retry()
