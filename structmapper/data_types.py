from enum import Enum, auto


class DirectiveKind(Enum):
    MAP_FROM = auto()
    MAP_TO = auto()
    IGNORE = auto()
    NAME = auto()


class SourceLanguage(Enum):
    C = "c"
    CXX = "c++"


class SelfPairPolicy(Enum):
    SKIP = "skip"
    EMIT = "emit"
