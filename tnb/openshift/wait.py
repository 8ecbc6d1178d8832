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

"""Block until a condition observed on the cluster holds.

Two forms are provided. The single-predicate form polls until the predicate
holds and gives up after the given number of attempts. The dual-predicate
form polls until either the success or the failure predicate holds; it is
used for resources with a finite set of terminal states, such as builds.

There is no sleep after the last failed attempt: ``n`` failed evaluations
sleep ``n - 1`` times. Exceptions raised by predicates are not retried.
"""

from enum import Enum
from typing import Callable
from typing import Optional
import logging
import time

import attr

from .exceptions import WaitFailureError
from .exceptions import WaitTimeoutError

_LOGGER = logging.getLogger(__name__)

Predicate = Callable[[], bool]


class WaitOutcome(Enum):
    """Terminal result of a wait."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXPLICIT_FAILURE = "explicit_failure"


def _positive_or_none(instance: "WaitSpec", attribute: "attr.Attribute[Optional[int]]", value: Optional[int]) -> None:
    if value is not None and value <= 0:
        raise ValueError(f"{attribute.name} has to be a positive integer, got {value!r}")


def _non_negative(instance: "WaitSpec", attribute: "attr.Attribute[int]", value: int) -> None:
    if value < 0:
        raise ValueError(f"{attribute.name} cannot be negative, got {value!r}")


@attr.s(slots=True, frozen=True)
class WaitSpec:
    """A description of a single wait, consumed by the engine and discarded."""

    success = attr.ib(type=Predicate)
    interval_ms = attr.ib(type=int, validator=_non_negative)
    description = attr.ib(type=str)
    failure = attr.ib(type=Optional[Predicate], default=None)
    max_attempts = attr.ib(type=Optional[int], default=None, validator=_positive_or_none)

    def __attrs_post_init__(self) -> None:
        """Single-predicate form has to be bounded."""
        if self.failure is None and self.max_attempts is None:
            raise ValueError("max_attempts is required when no failure predicate is given")

    @property
    def is_dual(self) -> bool:
        """Check whether this wait observes a failure predicate as well."""
        return self.failure is not None


def _run(spec: WaitSpec) -> WaitOutcome:
    """Poll according to the given spec, raise if the wait did not succeed."""
    _LOGGER.debug("%s", spec.description)

    attempt = 0
    while True:
        attempt += 1

        if spec.success():
            _LOGGER.debug("Condition met after %d attempt(s): %s", attempt, spec.description)
            return WaitOutcome.SUCCESS

        if spec.failure is not None and spec.failure():
            raise WaitFailureError(
                f"Failure state observed after {attempt} attempt(s): {spec.description}",
                description=spec.description,
                attempts=attempt,
                outcome=WaitOutcome.EXPLICIT_FAILURE,
            )

        if spec.max_attempts is not None:
            _LOGGER.debug(
                "Attempt %d/%d failed: %s", attempt, spec.max_attempts, spec.description
            )
            if attempt >= spec.max_attempts:
                raise WaitTimeoutError(
                    f"Timed out after {attempt} attempt(s): {spec.description}",
                    description=spec.description,
                    attempts=attempt,
                    outcome=WaitOutcome.TIMEOUT,
                )
        else:
            _LOGGER.debug("Attempt %d failed: %s", attempt, spec.description)

        time.sleep(spec.interval_ms / 1000)


def wait_for(predicate: Predicate, max_attempts: int, interval_ms: int, description: str) -> WaitOutcome:
    """Wait until the predicate holds, give up after max_attempts evaluations."""
    return _run(
        WaitSpec(
            success=predicate,
            max_attempts=max_attempts,
            interval_ms=interval_ms,
            description=description,
        )
    )


def wait_for_either(
    success_predicate: Predicate,
    failure_predicate: Predicate,
    interval_ms: int,
    description: str,
    max_attempts: Optional[int] = None,
) -> WaitOutcome:
    """Wait until one of the predicates holds.

    Success predicate is checked first in each cycle. When the failure
    predicate holds, the wait stops immediately with WaitFailureError. Without
    max_attempts the wait is unbounded and relies on the observed resource
    reaching a terminal state.
    """
    return _run(
        WaitSpec(
            success=success_predicate,
            failure=failure_predicate,
            max_attempts=max_attempts,
            interval_ms=interval_ms,
            description=description,
        )
    )
