from dataclasses import dataclass

from rich.pretty import pprint

from flagbind import *


@dataclass
class SampleArgs:
    example: u8 = 0
    optional_example: str | None = None
    foo: u8 = 0

    @classmethod
    def init(cls) -> "SampleArgs":
        return cls()


if __name__ == '__main__':
    pprint(run(SampleArgs))
