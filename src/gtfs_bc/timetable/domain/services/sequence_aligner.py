"""Stop sequence alignment for multi-trip timetables.

Trips of one route rarely visit exactly the same stops: short turns skip
the ends, express runs skip the middle, branches diverge. To print them as
columns of one timetable every trip has to be placed on a shared list of
rows, a common supersequence of all the trips' stop lists.

The supersequence is built incrementally:

    running = trips[0]
    for each next trip S:
        running = SCS(running, S)   # two-sequence shortest common supersequence

Each pairwise step is the textbook LCS dynamic program. While the merged
sequence is reconstructed we record, for the incoming trip, the row each of
its stops landed on, and shift the rows of every trip merged before it.

Finding the minimal supersequence of more than two sequences is NP-hard,
so this is a heuristic: optimal per merge, not necessarily globally. Trip
and stop counts per route are small (tens to low hundreds) so the
O(len(running) * len(S)) cost per merge is fine.
"""

import logging
from dataclasses import dataclass
from typing import Generic, Hashable, List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class AlignmentResult(Generic[T]):
    """Supersequence plus one position mapping per input sequence.

    ``mappings[k][i]`` is the supersequence index of the ``i``-th element of
    input ``k``. Every mapping is strictly increasing.
    """
    supersequence: Tuple[T, ...]
    mappings: Tuple[Tuple[int, ...], ...]

    def mapping_for(self, sequence_index: int) -> Tuple[int, ...]:
        return self.mappings[sequence_index]

    def __len__(self) -> int:
        return len(self.supersequence)


class SequenceAligner:
    """Incremental pairwise shortest-common-supersequence aligner.

    Callers only depend on ``align``; a different merge strategy can be
    dropped in without touching them.
    """

    def align(self, sequences: Sequence[Sequence[T]]) -> AlignmentResult[T]:
        """Align all sequences on one supersequence.

        Never raises for well formed input: empty input gives an empty
        result, a single sequence comes back unchanged with the identity
        mapping.
        """
        if not sequences:
            return AlignmentResult(supersequence=(), mappings=())

        running: List[T] = list(sequences[0])
        mappings: List[List[int]] = [list(range(len(running)))]

        for incoming in sequences[1:]:
            merged, running_positions, incoming_positions = self._merge(running, list(incoming))

            # Rows inserted before an existing row shift it down
            mappings = [[running_positions[p] for p in mapping] for mapping in mappings]
            mappings.append(incoming_positions)
            running = merged

        logger.debug(
            f"Aligned {len(sequences)} sequences on {len(running)} rows"
        )

        return AlignmentResult(
            supersequence=tuple(running),
            mappings=tuple(tuple(mapping) for mapping in mappings),
        )

    @staticmethod
    def _lcs_table(left: Sequence[T], right: Sequence[T]) -> List[List[int]]:
        """table[i][j] = LCS length of left[:i] and right[:j]."""
        table = [[0] * (len(right) + 1) for _ in range(len(left) + 1)]
        for i in range(1, len(left) + 1):
            row, previous = table[i], table[i - 1]
            for j in range(1, len(right) + 1):
                if left[i - 1] == right[j - 1]:
                    row[j] = previous[j - 1] + 1
                else:
                    row[j] = max(previous[j], row[j - 1])
        return table

    def _merge(
        self, running: List[T], incoming: List[T]
    ) -> Tuple[List[T], List[int], List[int]]:
        """Shortest common supersequence of two sequences.

        Returns the merged sequence and, for each input, the merged index
        of each of its elements.

        The table is walked backwards from the end. When both moves are
        optimal the incoming element is emitted first, which (the output
        being reversed at the end) places the running element before it.
        Existing rows therefore stay ahead of new ones on ties, which keeps
        the output deterministic.
        """
        table = self._lcs_table(running, incoming)

        # (element, running index or None, incoming index or None), reversed
        steps: List[Tuple[T, Optional[int], Optional[int]]] = []
        i, j = len(running), len(incoming)
        while i > 0 and j > 0:
            if running[i - 1] == incoming[j - 1]:
                steps.append((running[i - 1], i - 1, j - 1))
                i -= 1
                j -= 1
            elif table[i][j - 1] >= table[i - 1][j]:
                steps.append((incoming[j - 1], None, j - 1))
                j -= 1
            else:
                steps.append((running[i - 1], i - 1, None))
                i -= 1
        while j > 0:
            steps.append((incoming[j - 1], None, j - 1))
            j -= 1
        while i > 0:
            steps.append((running[i - 1], i - 1, None))
            i -= 1
        steps.reverse()

        merged: List[T] = []
        running_positions = [0] * len(running)
        incoming_positions = [0] * len(incoming)
        for position, (element, running_index, incoming_index) in enumerate(steps):
            merged.append(element)
            if running_index is not None:
                running_positions[running_index] = position
            if incoming_index is not None:
                incoming_positions[incoming_index] = position

        return merged, running_positions, incoming_positions


def align_sequences(sequences: Sequence[Sequence[T]]) -> AlignmentResult[T]:
    """Align sequences with the default aligner."""
    return SequenceAligner().align(sequences)


def visualize_alignment(sequences: Sequence[Sequence[T]], result: AlignmentResult[T]) -> str:
    """Text diagram of each input laid out under the supersequence.

    SCS: A  X  B  C
         -- -- -- --
    S1:  A     B  C
    S2:  A  X  B
    """
    labels = [str(element) for element in result.supersequence]
    width = max([len(label) for label in labels] + [1])

    lines = ["Input sequences and their alignment with the supersequence:", ""]
    lines.append("SCS: " + " ".join(label.ljust(width) for label in labels).rstrip())
    lines.append("     " + " ".join("-" * width for _ in labels))

    for index, sequence in enumerate(sequences):
        cells = [" " * width] * len(labels)
        for element, position in zip(sequence, result.mapping_for(index)):
            cells[position] = str(element).ljust(width)
        lines.append(f"S{index + 1}:".ljust(5) + " ".join(cells).rstrip())

    return "\n".join(lines)
