from typing import Any, Iterable, NoReturn, Optional, TypeVar

T = TypeVar("T")


def maybe_head(v: Iterable[T]) -> Optional[T]:
    try:
        return next(iter(v))
    except StopIteration:
        return None


def assert_never(v: Any) -> NoReturn:
    """For exhaustive enum/variant checks etc"""
    raise TypeError(v)
