"""
Ring assembly

Joins coordinate chains that share endpoints into maximal chains or closed rings
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ...models import Coordinate
from ...analysis.geometry_utils import is_closed_chain

Key = Tuple[float, float]


@dataclass
class AssembledChain:
    """A joined chain plus the input indices it was built from"""
    coords: List[Coordinate]
    members: List[int]

    @property
    def is_closed(self) -> bool:
        return is_closed_chain(self.coords)


class RingAssembler:
    """
    Greedy endpoint joiner

    Endpoints match by exact coordinate equality. At junctions shared by
    more than two chains the lowest-index candidate wins, so the result
    is deterministic but not guaranteed optimal.
    """

    def assemble(self, chains: Sequence[Sequence[Coordinate]]) -> List[List[Coordinate]]:
        """Join chains; returns closed rings and unextendable open chains"""
        return [group.coords for group in self.assemble_groups(chains)]

    def assemble_groups(self, chains: Sequence[Sequence[Coordinate]]) -> List[AssembledChain]:
        """Like assemble(), but also reports which inputs formed each chain"""
        pool = [list(chain) for chain in chains]
        starts: Dict[Key, Set[int]] = defaultdict(set)
        ends: Dict[Key, Set[int]] = defaultdict(set)
        for idx, chain in enumerate(pool):
            if not chain:
                continue
            starts[chain[0].key].add(idx)
            ends[chain[-1].key].add(idx)

        remaining = [idx for idx, chain in enumerate(pool) if chain]
        consumed: Set[int] = set()
        results: List[AssembledChain] = []

        for seed in remaining:
            if seed in consumed:
                continue
            self._consume(seed, pool, starts, ends, consumed)
            ring = list(pool[seed])
            members = [seed]

            while not is_closed_chain(ring):
                step = self._next_match(ring, starts, ends)
                if step is None:
                    break
                mode, idx = step
                chain = pool[idx]
                self._consume(idx, pool, starts, ends, consumed)
                members.append(idx)

                if mode == "append":
                    ring.extend(chain[1:])
                elif mode == "append_reversed":
                    ring.extend(list(reversed(chain))[1:])
                elif mode == "prepend":
                    ring[:0] = chain[:-1]
                else:
                    ring[:0] = list(reversed(chain))[:-1]

            results.append(AssembledChain(coords=ring, members=members))

        return results

    @staticmethod
    def _consume(
        idx: int,
        pool: List[List[Coordinate]],
        starts: Dict[Key, Set[int]],
        ends: Dict[Key, Set[int]],
        consumed: Set[int]
    ) -> None:
        chain = pool[idx]
        starts[chain[0].key].discard(idx)
        ends[chain[-1].key].discard(idx)
        consumed.add(idx)

    @staticmethod
    def _next_match(
        ring: List[Coordinate],
        starts: Dict[Key, Set[int]],
        ends: Dict[Key, Set[int]]
    ) -> Optional[Tuple[str, int]]:
        head = ring[0].key
        tail = ring[-1].key

        # Fixed priority: extend the tail before the head, same orientation first
        for mode, index, key in (
            ("append", starts, tail),
            ("append_reversed", ends, tail),
            ("prepend", ends, head),
            ("prepend_reversed", starts, head),
        ):
            candidates = index.get(key)
            if candidates:
                return mode, min(candidates)
        return None
