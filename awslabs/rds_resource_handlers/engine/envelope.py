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

"""Conversion of progress events to the scheduler's response shape."""

import math
from ..common.constants import (
    HANDLER_ERROR_ACCESS_DENIED,
    HANDLER_ERROR_ALREADY_EXISTS,
    HANDLER_ERROR_INTERNAL_FAILURE,
    HANDLER_ERROR_INVALID_REQUEST,
    HANDLER_ERROR_NOT_FOUND,
    HANDLER_ERROR_NOT_STABILIZED,
    HANDLER_ERROR_THROTTLING,
)
from ..common.utils import convert_datetime_to_string
from .progress import ErrorKind, OperationStatus, ProgressEvent
from pydantic import BaseModel
from typing import Any, Dict


HANDLER_ERROR_CODES = {
    ErrorKind.RETRYABLE: HANDLER_ERROR_THROTTLING,
    ErrorKind.NOT_FOUND: HANDLER_ERROR_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: HANDLER_ERROR_ALREADY_EXISTS,
    ErrorKind.ACCESS_DENIED_CONTINUE: HANDLER_ERROR_ACCESS_DENIED,
    ErrorKind.UNAUTHORIZED: HANDLER_ERROR_ACCESS_DENIED,
    ErrorKind.INVALID_REQUEST: HANDLER_ERROR_INVALID_REQUEST,
    ErrorKind.FATAL: HANDLER_ERROR_INTERNAL_FAILURE,
    ErrorKind.TIMEOUT: HANDLER_ERROR_NOT_STABILIZED,
}


def _dump_model(model: Any) -> Any:
    if isinstance(model, BaseModel):
        model = model.model_dump(by_alias=True, exclude_none=True)
    return convert_datetime_to_string(model)


def to_envelope(event: ProgressEvent) -> Dict[str, Any]:
    """Build the response the scheduler acts on.

    A suspended event is reported as IN_PROGRESS with callbackDelaySeconds and an opaque
    callbackContext token to send back on the next call.

    Args:
        event: A SUSPENDED, SUCCESS or FAILED event

    Returns:
        Dictionary with status and only the keys relevant to it
    """
    if event.status == OperationStatus.SUSPENDED:
        return {
            'status': OperationStatus.IN_PROGRESS.value,
            'callbackDelaySeconds': math.ceil(event.callback_delay_seconds),
            'callbackContext': event.callback_context.to_token(),
        }

    if event.status == OperationStatus.FAILED:
        return {
            'status': OperationStatus.FAILED.value,
            'errorCode': HANDLER_ERROR_CODES[event.error_kind],
            'message': event.message,
        }

    envelope: Dict[str, Any] = {'status': OperationStatus.SUCCESS.value}
    if event.resource_model is not None:
        envelope['resourceModel'] = _dump_model(event.resource_model)
    if event.resource_models is not None:
        envelope['resourceModels'] = [_dump_model(model) for model in event.resource_models]
        envelope['nextToken'] = event.next_token
    if event.message:
        envelope['message'] = event.message
    return envelope
