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

"""Tests for the server context."""

from awslabs.rds_resource_handlers.common.context import RDSContext


class TestRDSContext:
    """Test cases for RDSContext."""

    def teardown_method(self):
        """Restore the defaults after each test."""
        RDSContext.initialize()

    def test_defaults(self):
        """Test that readonly mode is on by default."""
        RDSContext.initialize()

        assert RDSContext.readonly_mode() is True
        assert RDSContext.max_items() == 100

    def test_initialize(self):
        """Test that initialize stores the settings."""
        RDSContext.initialize(readonly=False, max_items=25)

        assert RDSContext.readonly_mode() is False
        assert RDSContext.max_items() == 25
