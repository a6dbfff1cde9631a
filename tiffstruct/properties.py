from enum import Enum, auto


class LayoutPhase(Enum):
    '''Enum to state the actual phase of a document and of its directories.

    A document moves only forward, one phase at a time, and EMITTED is
    terminal.'''
    BUILT     = 0
    MEASURED  = auto()
    ASSIGNED  = auto()
    EMITTED   = auto()

    def follows(self, other: "LayoutPhase") -> bool:
        return self.value == other.value + 1


def align(size: int, word_align: bool) -> int:
    '''Rounds the size up to an even number of bytes if requested.'''
    if word_align and size % 2:
        return size + 1

    return size
