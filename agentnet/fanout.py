"""Run independent calls concurrently and wait for all of them."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default


def _run(call: Callable[[], Any]) -> Settled:
    try:
        return Settled(value=call())
    except Exception as exc:
        return Settled(error=exc)


def settle_all(calls: Sequence[Callable[[], T]]) -> List[Settled[T]]:
    """Run ``calls`` concurrently; results come back in call order.

    A failing call never cancels its siblings and never raises here; its
    exception is carried in the returned ``Settled``.
    """

    if not calls:
        return []
    if len(calls) == 1:
        return [_run(calls[0])]
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(_run, call) for call in calls]
        return [future.result() for future in futures]
