from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

STDIN, STDOUT, APPEND = 0, 1, 2


class Status(IntEnum):
    SUCCESS = 0
    EXIT = 1
    UNKNOWN = 2


@dataclass
class Command:
    """One pipeline stage."""
    name: str = ""
    args: List[str] = field(default_factory=list)
    background: bool = False
    auto_complete: bool = False
    redirects: List[Optional[str]] = field(default_factory=lambda: [None, None, None])

    @property
    def arg_count(self):
        return len(self.args)

    @property
    def stdin(self):
        return self.redirects[STDIN]

    @property
    def stdout(self):
        return self.redirects[STDOUT]

    @property
    def append(self):
        return self.redirects[APPEND]

    def describe(self):
        lines = [
            f"Command: <{self.name}>",
            f"\tIs Background: {'yes' if self.background else 'no'}",
            f"\tNeeds Auto-complete: {'yes' if self.auto_complete else 'no'}",
            "\tRedirects:",
        ]
        for i, target in enumerate(self.redirects):
            lines.append(f"\t\t{i}: {target if target is not None else 'N/A'}")
        lines.append(f"\tArguments ({self.arg_count}):")
        for i, arg in enumerate(self.args):
            lines.append(f"\t\tArg {i}: {arg}")
        return "\n".join(lines)

    def __str__(self):
        parts = [self.name] + self.args
        for marker, target in zip(("<", ">", ">>"), self.redirects):
            if target is not None:
                parts.append(marker + target)
        return " ".join(p for p in parts if p)


def describe_pipeline(stages):
    """Multi-line dump of a whole pipeline, each later stage shown as piped-to."""
    out = []
    for idx, stage in enumerate(stages):
        if idx:
            out.append("\tPiped to:")
        out.append(stage.describe())
    return "\n".join(out)
