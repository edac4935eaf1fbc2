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

"""Step chain.

A handler is a sequence of steps. Each step is built with a ``CallChain``:

    ```python
    session.initiate('rds::create-db-cluster', model, context)
        .translate(lambda model: Translator.create_db_cluster_request(model, tags))
        .invoke(lambda client, request: client.create_db_cluster(**request))
        .stabilize(read_db_cluster, lambda cluster: cluster['Status'] == 'available')
        .handle_error(lambda request, error, client, model, context: handle_exception(
            ProgressEvent.progress(model, context), error, CREATE_RULE_SET))
        .progress()
    ```

Steps are joined with ``ProgressEvent.then`` or ``run_steps``; anything other than
IN_PROGRESS stops the sequence. Resuming an operation replays the sequence: completed steps
are skipped, and a step whose call went through but which was not stable yet goes straight
back to polling.
"""

from ..common.exceptions import StabilizationTimeoutError
from .error import DEFAULT_ERROR_RULE_SET, handle_exception
from .progress import ErrorKind, OperationStatus, ProgressEvent, ResumeContext
from .stabilize import stabilize
from loguru import logger
from typing import Any, Callable, Iterable, Optional


StepFunction = Callable[[ProgressEvent], ProgressEvent]


def run_steps(initial: ProgressEvent, steps: Iterable[StepFunction]) -> ProgressEvent:
    """Run steps left to right, stopping at the first event that is not IN_PROGRESS."""
    progress = initial
    for step in steps:
        progress = progress.then(step)
    return progress


class CallChain:
    """Builder for one step: translate, invoke, stabilize, handle errors."""

    def __init__(self, session: Any, name: str, model: Any, context: ResumeContext):
        """Initialize the chain. Use HandlerSession.initiate instead of calling this directly."""
        self._session = session
        self._name = name
        self._model = model
        self._context = context
        self._translate: Optional[Callable[[Any], Any]] = None
        self._invoke: Optional[Callable[[Any, Any], Any]] = None
        self._read: Optional[Callable[[Any, Any], Any]] = None
        self._predicate: Optional[Callable[[Any], bool]] = None
        self._backoff = None
        self._handle_error: Optional[Callable[..., ProgressEvent]] = None
        self._done: Optional[Callable[[Any, ProgressEvent], ProgressEvent]] = None

    def translate(self, translate: Callable[[Any], Any]) -> 'CallChain':
        """Set the pure function building the request from the model."""
        self._translate = translate
        return self

    def invoke(self, invoke: Callable[[Any, Any], Any]) -> 'CallChain':
        """Set the remote call, called as invoke(client, request)."""
        self._invoke = invoke
        return self

    def stabilize(
        self,
        read: Callable[[Any, Any], Any],
        predicate: Callable[[Any], bool],
        backoff: Any = None,
    ) -> 'CallChain':
        """Poll with read(client, model) until predicate(resource) holds.

        Args:
            read: Reads the observed resource
            predicate: Returns True once the resource is stable
            backoff: Overrides the session backoff for this step
        """
        self._read = read
        self._predicate = predicate
        self._backoff = backoff
        return self

    def handle_error(self, handle_error: Callable[..., ProgressEvent]) -> 'CallChain':
        """Set the error handler, called as handle_error(request, error, client, model, context).

        A FAILED result with kind RETRYABLE suspends the step. An IN_PROGRESS result
        completes the step and lets the sequence continue.
        """
        self._handle_error = handle_error
        return self

    def done(self, done: Callable[[Any, ProgressEvent], ProgressEvent]) -> 'CallChain':
        """Set post-processing of the call response, called as done(response, progress).

        Runs only in the invocation that made the call, before stabilization. Anything a
        later invocation needs from the response must go into the context scratch.
        """
        self._done = done
        return self

    def progress(self) -> ProgressEvent:
        """Run the step."""
        name = self._name
        context = self._context
        model = self._model
        client = self._session.client

        if context.is_completed(name):
            logger.debug(f'Skipping completed step {name}')
            return ProgressEvent.progress(model, context)

        context = context.enter(name)
        request = None

        if not context.is_invoked(name):
            try:
                request = self._translate(model) if self._translate is not None else None
                logger.info(f'Running step {name}')
                response = self._invoke(client, request) if self._invoke is not None else None
            except Exception as error:
                return self._on_error(request, error, model, context)
            context = context.mark_invoked(name)

            if self._done is not None:
                event = self._done(response, ProgressEvent.progress(model, context))
                if not event.is_in_progress():
                    return event
                model = event.resource_model
                context = event.callback_context
        else:
            logger.info(
                f'Resuming step {name} at stabilization (attempt {context.retry_count + 1})'
            )

        if self._read is not None and self._predicate is not None:
            backoff = self._backoff or self._session.backoff
            try:
                stable, next_context = stabilize(
                    name,
                    lambda: self._read(client, model),
                    self._predicate,
                    backoff,
                    context,
                    self._session.now(),
                )
            except StabilizationTimeoutError as error:
                logger.error(str(error))
                return ProgressEvent.failed(ErrorKind.TIMEOUT, str(error))
            except Exception as error:
                return self._on_error(request, error, model, context, stabilizing=True)
            if not stable:
                return ProgressEvent.suspend(next_context, backoff.delay(context.retry_count))
            context = next_context

        logger.success(f'Completed step {name}')
        return ProgressEvent.progress(model, context.mark_completed(name))

    def _on_error(
        self,
        request: Any,
        error: Exception,
        model: Any,
        context: ResumeContext,
        stabilizing: bool = False,
    ) -> ProgressEvent:
        if self._handle_error is not None:
            event = self._handle_error(request, error, self._session.client, model, context)
        else:
            event = handle_exception(
                ProgressEvent.progress(model, context), error, DEFAULT_ERROR_RULE_SET
            )

        # access denied while polling is never a tagging failure of the call itself
        if (
            stabilizing
            and event.status == OperationStatus.FAILED
            and event.error_kind == ErrorKind.ACCESS_DENIED_CONTINUE
        ):
            return ProgressEvent.failed(ErrorKind.UNAUTHORIZED, event.message or 'Access denied')
        if event.status == OperationStatus.IN_PROGRESS:
            return ProgressEvent.progress(
                event.resource_model, event.callback_context.mark_completed(self._name)
            )
        if event.status == OperationStatus.FAILED and event.error_kind == ErrorKind.RETRYABLE:
            return self._retry(context, event.message)
        return event

    def _retry(self, context: ResumeContext, message: Optional[str]) -> ProgressEvent:
        backoff = self._backoff or self._session.backoff
        context = context.tick(self._session.now())
        if context.elapsed_seconds >= backoff.timeout:
            logger.error(f'Step {self._name} kept failing until the {backoff.timeout}s timeout')
            return ProgressEvent.failed(ErrorKind.TIMEOUT, message or 'Timed out retrying')
        delay = backoff.delay(context.retry_count)
        logger.warning(f'Step {self._name} will be retried in {delay}s: {message}')
        return ProgressEvent.suspend(context.next_retry(), delay)
