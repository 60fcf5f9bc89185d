"""
Tohumlanabilir deterministik rastgele sayı üreteci (mulberry32).

Aynı tohum her platformda aynı diziyi üretir; aynı ay için aynı girdilerle
aynı çizelge elde edilir.
"""

from typing import List, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def month_seed(yil: int, month0: int) -> int:
    return yil * 100 + (month0 + 1)


class Mulberry32:
    """32 bit durumlu küçük PRNG; random() [0, 1) aralığında float döner"""

    def __init__(self, seed: int):
        self._state = seed & _MASK32

    def random(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        r = _imul(t ^ (t >> 15), 1 | t)
        r = r ^ ((r + _imul(r ^ (r >> 7), 61 | r)) & _MASK32)
        return ((r ^ (r >> 14)) & _MASK32) / 4294967296.0

    def randrange(self, n: int) -> int:
        if n <= 0:
            raise ValueError("randrange() için n > 0 olmalı")
        return int(self.random() * n)

    def draw(self, pool: List[T]) -> T:
        """Havuzdan yerine koymadan bir eleman çek (havuz yerinde küçülür)"""
        return pool.pop(self.randrange(len(pool)))

