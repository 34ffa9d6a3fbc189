"""
cache.py - bounded LRU price cache

Owned and passed in by the caller; nothing in the package keeps a
module-level cache. Keys are built from (product id, base price,
collection, materials, collection records) so identical requests reuse
one result.
"""

from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple

from ..domain.models import CollectionRecord, FurnitureMaterial, coerce_quantities
from ..domain.normalize import normalize_key


class PriceCache:
    """LRU cache for listing price results"""

    def __init__(self, max_size: int = 256):
        self.max_size = max(1, int(max_size))
        self._items: "OrderedDict[Hashable, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(
        product_id: Optional[str],
        base_price: Any,
        collection: Optional[str],
        materials: Optional[Iterable[FurnitureMaterial]] = None,
        quantities: Optional[Dict[str, Any]] = None,
        collections: Optional[Iterable[CollectionRecord]] = None,
    ) -> Tuple:
        """Hashable key for one pricing request

        Quantities are keyed the way the calculator reads them (text ids),
        and active collection records are part of the key.
        """
        quantities = coerce_quantities(quantities)
        material_key = tuple(
            (m.id, m.price, m.consumption_coeff, m.is_active, str(quantities.get(m.id, 0)))
            for m in (materials or [])
        )
        collection_key = tuple(sorted(
            (normalize_key(c.name), c.multiplier)
            for c in (collections or [])
            if c.is_active
        ))
        return (
            product_id or "",
            str(base_price),
            (collection or "").strip().lower(),
            material_key,
            collection_key,
        )

    def get(self, key: Hashable) -> Optional[Any]:
        if key in self._items:
            self._items.move_to_end(key)
            self.hits += 1
            return self._items[key]
        self.misses += 1
        return None

    def put(self, key: Hashable, value: Any):
        self._items[key] = value
        self._items.move_to_end(key)
        while len(self._items) > self.max_size:
            self._items.popitem(last=False)

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Cached value, or compute / store / return it"""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = compute()
        self.put(key, value)
        return value

    def clear(self):
        self._items.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: Hashable) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
