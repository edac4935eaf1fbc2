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

"""Backoff schedules used to pick callback delays and the stabilization horizon."""

import math
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Constant:
    """Same delay for every retry.

    Attributes:
        interval: Delay in seconds between attempts
        timeout: Horizon in seconds after which the operation times out
    """

    interval: float
    timeout: float

    def __post_init__(self):
        if self.interval < 0 or self.timeout < 0:
            raise ValueError('interval and timeout must be non-negative')

    def delay(self, retry_count: int) -> float:
        if retry_count < 0:
            raise ValueError(f'retry_count must be non-negative, got {retry_count}')
        return self.interval


@dataclass(frozen=True)
class Exponential:
    """Delay growing as min_delay * power ** retry_count, capped at max_delay.

    Attributes:
        min_delay: Delay in seconds for the first retry
        max_delay: Upper bound for any delay
        power: Growth factor, at least 1
        timeout: Horizon in seconds after which the operation times out
    """

    min_delay: float
    max_delay: float
    timeout: float
    power: float = 2.0

    def __post_init__(self):
        if self.min_delay < 0 or self.timeout < 0:
            raise ValueError('min_delay and timeout must be non-negative')
        if self.max_delay < self.min_delay:
            raise ValueError('max_delay must not be smaller than min_delay')
        if self.power < 1:
            raise ValueError('power must be at least 1')

    def delay(self, retry_count: int) -> float:
        if retry_count < 0:
            raise ValueError(f'retry_count must be non-negative, got {retry_count}')
        if self.min_delay == 0 or self.power == 1:
            return self.min_delay
        # compared in log space so large powers never overflow
        if retry_count * math.log(self.power) >= math.log(self.max_delay / self.min_delay):
            return self.max_delay
        return self.min_delay * self.power**retry_count


Backoff = Union[Constant, Exponential]
