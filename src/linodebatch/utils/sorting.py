import typing as t

T = t.TypeVar("T")


def stable_sort(items: t.Iterable[T], key: t.Callable[[T], t.Any]) -> list[T]:
    """Sort items by ``key``, keeping the input order of equal keys.

    Args:
        items (Iterable[T]): The items to sort
        key (Callable[[T], Any]): Extracts the comparison key of an item

    Returns:
        list[T]: A new sorted list
    """
    return sorted(items, key=key)
