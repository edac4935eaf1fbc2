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

"""Progress results and the resume context passed between handler invocations.

A handler invocation never blocks. When an operation cannot finish in one invocation it
returns a ``SUSPENDED`` event carrying a ``ResumeContext`` and a delay; the scheduler calls
the handler again after the delay with that context. The resume context is the only state
that survives between invocations, so everything a handler needs to pick up where it left
off (the in-flight step, which steps already ran, retry count, elapsed time, small
step-local values) lives in it.
"""

import base64
import binascii
from ..common.constants import ERROR_INVALID_CONTEXT
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from typing import Any, Callable, Dict, List, Optional, Tuple


class OperationStatus(str, Enum):
    """Status of a progress event.

    ``IN_PROGRESS`` only exists inside an invocation, between steps. The scheduler sees
    ``SUSPENDED``, ``SUCCESS`` or ``FAILED``.
    """

    IN_PROGRESS = 'IN_PROGRESS'
    SUSPENDED = 'SUSPENDED'
    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'


class ErrorKind(str, Enum):
    """Classification of a failure."""

    RETRYABLE = 'Retryable'
    NOT_FOUND = 'NotFound'
    ALREADY_EXISTS = 'AlreadyExists'
    ACCESS_DENIED_CONTINUE = 'AccessDeniedContinue'
    UNAUTHORIZED = 'Unauthorized'
    INVALID_REQUEST = 'InvalidRequest'
    FATAL = 'Fatal'
    TIMEOUT = 'Timeout'


class ResumeContext(BaseModel):
    """Immutable state carried across invocations of one operation.

    Every mutation returns a new instance.
    """

    model_config = ConfigDict(frozen=True)

    step: Optional[str] = Field(default=None, description='Marker of the step in flight')
    invoked_steps: Tuple[str, ...] = Field(
        default=(), description='Steps whose remote call succeeded but may not be stable yet'
    )
    completed_steps: Tuple[str, ...] = Field(default=(), description='Steps that are done')
    retry_count: int = Field(default=0, ge=0, description='Suspensions so far')
    started_at: Optional[float] = Field(
        default=None, description='Wall-clock time of the first invocation, epoch seconds'
    )
    elapsed_seconds: float = Field(default=0.0, ge=0, description='Time since started_at')
    scratch: Dict[str, Any] = Field(default_factory=dict, description='Step-local values')

    def tick(self, now: float) -> 'ResumeContext':
        """Record the current wall-clock time.

        Args:
            now: Current time in epoch seconds

        Returns:
            A context whose elapsed time never goes backwards
        """
        if self.started_at is None:
            return self.model_copy(update={'started_at': now, 'elapsed_seconds': 0.0})
        elapsed = max(self.elapsed_seconds, now - self.started_at)
        return self.model_copy(update={'elapsed_seconds': elapsed})

    def enter(self, step: str) -> 'ResumeContext':
        return self.model_copy(update={'step': step})

    def mark_invoked(self, step: str) -> 'ResumeContext':
        if step in self.invoked_steps:
            return self
        return self.model_copy(update={'invoked_steps': self.invoked_steps + (step,)})

    def mark_completed(self, step: str) -> 'ResumeContext':
        if step in self.completed_steps:
            return self
        return self.model_copy(
            update={'completed_steps': self.completed_steps + (step,), 'step': None}
        )

    def is_invoked(self, step: str) -> bool:
        return step in self.invoked_steps

    def is_completed(self, step: str) -> bool:
        return step in self.completed_steps

    def next_retry(self) -> 'ResumeContext':
        return self.model_copy(update={'retry_count': self.retry_count + 1})

    def get(self, key: str, default: Any = None) -> Any:
        return self.scratch.get(key, default)

    def set(self, key: str, value: Any) -> 'ResumeContext':
        """Return a context with a scratch value set. Values must be JSON serializable."""
        return self.model_copy(update={'scratch': {**self.scratch, key: value}})

    def to_token(self) -> str:
        """Serialize the context to an opaque continuation token."""
        return base64.urlsafe_b64encode(self.model_dump_json().encode('utf-8')).decode('ascii')

    @classmethod
    def from_token(cls, token: str) -> 'ResumeContext':
        """Restore a context from a continuation token.

        Args:
            token: A token produced by to_token

        Returns:
            The restored context

        Raises:
            ValueError: If the token is not a valid continuation token
        """
        try:
            payload = base64.urlsafe_b64decode(token.encode('ascii'))
            return cls.model_validate_json(payload)
        except (binascii.Error, UnicodeError, ValidationError) as error:
            raise ValueError(ERROR_INVALID_CONTEXT.format(error)) from error


class ProgressEvent(BaseModel):
    """Result of a step, a handler, or a whole invocation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: OperationStatus
    callback_context: Optional[ResumeContext] = None
    callback_delay_seconds: Optional[float] = None
    resource_model: Optional[Any] = None
    resource_models: Optional[List[Any]] = None
    next_token: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @model_validator(mode='after')
    def _check_status_shape(self) -> 'ProgressEvent':
        if self.status == OperationStatus.SUSPENDED:
            if self.resource_model is not None or self.resource_models is not None:
                raise ValueError('A suspended event carries no resource model')
            if self.callback_context is None:
                raise ValueError('A suspended event requires a callback context')
            if self.callback_delay_seconds is None or self.callback_delay_seconds < 0:
                raise ValueError('A suspended event requires a non-negative callback delay')
        elif self.status == OperationStatus.SUCCESS:
            if self.callback_delay_seconds is not None:
                raise ValueError('A successful event carries no callback delay')
        elif self.status == OperationStatus.FAILED:
            if self.resource_model is not None or self.resource_models is not None:
                raise ValueError('A failed event carries no resource model')
            if self.error_kind is None:
                raise ValueError('A failed event requires an error kind')
        elif self.callback_context is None:
            raise ValueError('An in-progress event requires a callback context')
        return self

    @classmethod
    def progress(cls, model: Any, context: ResumeContext) -> 'ProgressEvent':
        return cls(
            status=OperationStatus.IN_PROGRESS, resource_model=model, callback_context=context
        )

    @classmethod
    def suspend(cls, context: ResumeContext, delay_seconds: float) -> 'ProgressEvent':
        return cls(
            status=OperationStatus.SUSPENDED,
            callback_context=context,
            callback_delay_seconds=delay_seconds,
        )

    @classmethod
    def success(
        cls,
        model: Any = None,
        models: Optional[List[Any]] = None,
        next_token: Optional[str] = None,
    ) -> 'ProgressEvent':
        return cls(
            status=OperationStatus.SUCCESS,
            resource_model=model,
            resource_models=models,
            next_token=next_token,
        )

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> 'ProgressEvent':
        return cls(status=OperationStatus.FAILED, error_kind=kind, message=message)

    def is_in_progress(self) -> bool:
        return self.status == OperationStatus.IN_PROGRESS

    def then(self, step: Callable[['ProgressEvent'], 'ProgressEvent']) -> 'ProgressEvent':
        """Run the next step, or return self unchanged if this event is terminal or suspended."""
        if not self.is_in_progress():
            return self
        return step(self)
