#!/usr/bin/env python3
# tnb-openshift
# Copyright(C) 2026 tnb-openshift contributors
#
# This program is free software: you can redistribute it and / or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

"""Configuration of Horreum, the performance results repository."""

import attr

from ..config import Configuration


@attr.s(slots=True)
class HorreumConfiguration(Configuration):
    """Properties describing where and how test results are uploaded to Horreum."""

    URL = "horreum.url"
    TEST_NAME = "horreum.testname"
    SCHEMA = "horreum.schema"
    TEST_OWNER = "horreum.testowner"
    HTTP_LOG_ENABLED = "horreum.http.log.enabled"

    @property
    def url(self) -> str:
        return self.get_required(self.URL)

    @property
    def test_name(self) -> str:
        return self.get_required(self.TEST_NAME)

    @property
    def schema(self) -> str:
        return self.get_required(self.SCHEMA)

    @property
    def test_owner(self) -> str:
        return self.get_required(self.TEST_OWNER)

    @property
    def http_log_enabled(self) -> bool:
        """Log HTTP traffic with Horreum, off by default."""
        return self.get_boolean(self.HTTP_LOG_ENABLED, False)
