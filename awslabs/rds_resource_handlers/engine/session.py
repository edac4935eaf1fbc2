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

"""Per-invocation handler session: the RDS client, the backoff and the clock."""

import time
from .backoff import Backoff
from .chain import CallChain
from .progress import ResumeContext
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class HandlerConfig:
    """Configuration for a resource kind.

    Attributes:
        backoff: Schedule for callback delays and the operation timeout
        clock: Returns the current wall-clock time in epoch seconds
    """

    backoff: Backoff
    clock: Callable[[], float] = time.time


class HandlerSession:
    """Everything a handler needs for one invocation besides the request and context."""

    def __init__(self, client: Any, config: HandlerConfig):
        """Initialize the session.

        Args:
            client: boto3 RDS client
            config: Backoff and clock for this resource kind
        """
        self.client = client
        self.config = config

    @property
    def backoff(self) -> Backoff:
        return self.config.backoff

    def now(self) -> float:
        return self.config.clock()

    def initiate(self, name: str, model: Any, context: ResumeContext) -> CallChain:
        """Start a step.

        Args:
            name: Step marker, unique within the operation, e.g. 'rds::create-db-cluster'
            model: The resource model the step works on
            context: The current resume context

        Returns:
            A CallChain to configure and run with progress()
        """
        return CallChain(self, name, model, context)
